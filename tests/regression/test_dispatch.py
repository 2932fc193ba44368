"""
Dispatch tests for fitmodel().

Tests that every (model class, link, prior) combination resolves to
exactly one routine, that unsupported combinations and malformed tag
lists raise DispatchError before any data is read, and that argument
validation happens before any solver runs.
"""

import pytest

from pyregression import (
    fitmodel, LinearRegression, LogisticRegression, PoissonRegression,
    NegBinomRegression, Logit, Probit, Cauchit, Cloglog,
    Ridge, Laplace, Cauchy, StudentT, Uniform,
)
from pyregression.core.exceptions import DispatchError, SchemaError, ValidationError
from pyregression.regression import solvers
from pyregression.regression.links import Identity, Log
from pyregression.regression.solvers import (
    dispatch, fit_bayesian, fit_frequentist, registered_combinations,
)

PRIORS = [Ridge, Laplace, Cauchy, StudentT, Uniform]
BINARY_LINKS = [Logit, Probit, Cauchit, Cloglog]


def _fail(*args, **kwargs):
    raise AssertionError("solver must not run")


class TestRegistry:

    def test_size(self):
        # 4 model classes; Logistic takes 4 links; each with no prior or 5 priors
        assert len(registered_combinations()) == (1 + 4 + 1 + 1) * 6

    def test_keys_unique(self):
        keys = registered_combinations()
        assert len(keys) == len(set(keys))

    @pytest.mark.parametrize("model_cls", [LinearRegression, PoissonRegression, NegBinomRegression])
    def test_frequentist_without_link(self, model_cls):
        assert dispatch(model_cls(), None, None) is fit_frequentist

    @pytest.mark.parametrize("link_cls", BINARY_LINKS)
    def test_logistic_links(self, link_cls):
        assert dispatch(LogisticRegression(), link_cls(), None) is fit_frequentist

    @pytest.mark.parametrize("prior_cls", PRIORS)
    @pytest.mark.parametrize("model_cls", [LinearRegression, PoissonRegression, NegBinomRegression])
    def test_bayesian(self, model_cls, prior_cls):
        assert dispatch(model_cls(), None, prior_cls()) is fit_bayesian

    @pytest.mark.parametrize("prior_cls", PRIORS)
    @pytest.mark.parametrize("link_cls", BINARY_LINKS)
    def test_bayesian_logistic(self, link_cls, prior_cls):
        assert dispatch(LogisticRegression(), link_cls(), prior_cls()) is fit_bayesian

    def test_duplicate_registration_rejected(self):
        key = registered_combinations()[0]
        with pytest.raises(DispatchError, match="already registered"):
            solvers.register(key, fit_frequentist)


class TestUnsupportedCombinations:
    """DispatchError is raised before data is looked at: data=None here."""

    @pytest.mark.parametrize("prior", [None, Ridge()])
    def test_logistic_requires_link(self, prior):
        tags = () if prior is None else (prior,)
        with pytest.raises(DispatchError, match="requires a link") as excinfo:
            fitmodel("y ~ x", None, LogisticRegression(), *tags)
        assert excinfo.value.model_class == 'LogisticRegression'
        assert excinfo.value.link is None

    @pytest.mark.parametrize("model_cls", [LinearRegression, PoissonRegression, NegBinomRegression])
    def test_link_not_accepted(self, model_cls):
        with pytest.raises(DispatchError, match="does not take a link") as excinfo:
            fitmodel("y ~ x", None, model_cls(), Logit())
        assert excinfo.value.link == 'logit'

    def test_canonical_link_tag_still_rejected(self):
        with pytest.raises(DispatchError):
            fitmodel("y ~ x", None, PoissonRegression(), Log())

    def test_identity_for_logistic(self):
        with pytest.raises(DispatchError):
            fitmodel("y ~ x", None, LogisticRegression(), Identity())

    def test_two_priors(self):
        with pytest.raises(DispatchError, match="more than one prior"):
            fitmodel("y ~ x", None, LinearRegression(), Ridge(), Laplace())

    def test_two_links(self):
        with pytest.raises(DispatchError, match="more than one link"):
            fitmodel("y ~ x", None, LogisticRegression(), Logit(), Probit())

    def test_positional_h_rejected(self):
        with pytest.raises(DispatchError, match="unexpected positional argument"):
            fitmodel("y ~ x", None, LinearRegression(), Ridge(), 0.5)

    def test_model_class_type_not_instance(self):
        with pytest.raises(DispatchError, match="must be an instance"):
            fitmodel("y ~ x", None, LinearRegression)

    def test_model_class_wrong_type(self):
        with pytest.raises(DispatchError, match="must be a ModelClass"):
            fitmodel("y ~ x", None, "linear")

    def test_unregistered_model_class_subclass(self):
        class MyLinear(LinearRegression):
            pass

        with pytest.raises(DispatchError, match="Unknown model class MyLinear") as excinfo:
            fitmodel("y ~ x", None, MyLinear())
        assert excinfo.value.model_class == 'LinearRegression'

    def test_tag_order_irrelevant(self):
        assert solvers._split_tags(LogisticRegression(), (Ridge(), Probit())) == (Probit(), Ridge())
        assert solvers._split_tags(LogisticRegression(), (Probit(), Ridge())) == (Probit(), Ridge())


class TestBayesianOnlyArguments:

    @pytest.mark.parametrize("kwargs", [
        {'h': 0.1}, {'sim_size': 100}, {'rng': 1},
    ])
    def test_rejected_without_prior(self, linear_data, kwargs):
        with pytest.raises(DispatchError, match="only apply to Bayesian fits"):
            fitmodel("y ~ x1", linear_data, LinearRegression(), **kwargs)


class TestValidationBeforeSolve:

    @pytest.fixture(autouse=True)
    def no_solvers(self, monkeypatch):
        monkeypatch.setattr(solvers.StatsmodelsBackend, "solve", _fail)
        monkeypatch.setattr(solvers.NUTSBackend, "solve", _fail)

    @pytest.mark.parametrize("h", [0, -1.0, float('nan')])
    def test_invalid_h(self, linear_data, h):
        with pytest.raises(ValidationError, match="h:"):
            fitmodel("y ~ x1", linear_data, LinearRegression(), Ridge(), h=h)

    @pytest.mark.parametrize("sim_size", [0, -5, 10.0])
    def test_invalid_sim_size(self, linear_data, sim_size):
        with pytest.raises(ValidationError, match="sim_size:"):
            fitmodel("y ~ x1", linear_data, LinearRegression(), Ridge(), sim_size=sim_size)

    def test_invalid_rng(self, linear_data):
        with pytest.raises(TypeError, match="rng must be"):
            fitmodel("y ~ x1", linear_data, LinearRegression(), Ridge(), rng="seed")

    def test_missing_column_frequentist(self, linear_data):
        with pytest.raises(SchemaError) as excinfo:
            fitmodel("y ~ x1 + missing", linear_data, LinearRegression())
        assert excinfo.value.missing == ('missing',)

    def test_missing_column_bayesian(self, linear_data):
        with pytest.raises(SchemaError):
            fitmodel("y ~ x1 + missing", linear_data, LinearRegression(), Ridge())

    def test_data_not_dataframe(self, linear_data):
        with pytest.raises(ValidationError, match="pandas.DataFrame"):
            fitmodel("y ~ x1", linear_data.to_numpy(), LinearRegression())

    def test_bad_binary_response_bayesian(self, count_data):
        with pytest.raises(ValidationError, match="0/1"):
            fitmodel("num ~ x1", count_data, LogisticRegression(), Logit(), Ridge())
