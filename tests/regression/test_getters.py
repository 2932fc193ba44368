"""
Getter and prediction tests.

Tests every frequentist getter against quantities computed directly
from the data, idempotence, TypeError on the wrong container, and
prediction on training and new data.
"""

from dataclasses import replace

import numpy as np
import pandas as pd
import pytest
from scipy import special

from pyregression import (
    fitmodel, LinearRegression, LogisticRegression, PoissonRegression,
    NegBinomRegression, Logit, Probit,
    coeftable, r2, adjr2, loglikelihood, aic, bic, sigma,
    residuals, cooksdistance, fitted, predict, posterior, posterior_summary,
)
from pyregression.core.exceptions import SchemaError, UnsupportedLinkError


@pytest.fixture
def ols(linear_data):
    return fitmodel("y ~ x1 + x2", linear_data, LinearRegression())


@pytest.fixture
def logit(binary_data):
    return fitmodel("vote ~ age + income", binary_data, LogisticRegression(), Logit())


def _design(linear_data):
    return np.column_stack([
        np.ones(len(linear_data)), linear_data['x1'], linear_data['x2'],
    ])


# =====================================================================
# Linear model getters
# =====================================================================

class TestLinearGetters:

    def test_coeftable(self, ols):
        table = coeftable(ols)
        assert isinstance(table, pd.DataFrame)
        assert list(table.columns) == [
            'Coef.', 'Std. Error', 't', 'Pr(>|t|)', 'Lower 95%', 'Upper 95%',
        ]
        assert list(table.index) == ['Intercept', 'x1', 'x2']
        np.testing.assert_allclose(table['Coef.'].to_numpy(), ols.coefficients)
        assert np.all(table['Lower 95%'] < table['Coef.'])
        assert np.all(table['Coef.'] < table['Upper 95%'])

    def test_standard_errors(self, ols, linear_data):
        X = _design(linear_data)
        e = residuals(ols)
        n, p = X.shape
        s2 = e @ e / (n - p)
        se = np.sqrt(np.diag(s2 * np.linalg.inv(X.T @ X)))
        np.testing.assert_allclose(coeftable(ols)['Std. Error'].to_numpy(), se, rtol=1e-8)

    def test_r2(self, ols, linear_data):
        y = linear_data['y'].to_numpy()
        e = residuals(ols)
        n, p = len(y), 3
        expected = 1.0 - (e @ e) / np.sum((y - y.mean()) ** 2)
        np.testing.assert_allclose(r2(ols), expected, rtol=1e-10)
        np.testing.assert_allclose(
            adjr2(ols), 1.0 - (1.0 - expected) * (n - 1) / (n - p), rtol=1e-10
        )

    def test_sigma_is_residual_standard_error(self, ols):
        e = residuals(ols)
        np.testing.assert_allclose(sigma(ols), np.sqrt(e @ e / (len(e) - 3)), rtol=1e-10)

    def test_loglikelihood_aic_bic(self, ols):
        e = residuals(ols)
        n, p = len(e), 3
        ll = -0.5 * n * (np.log(2 * np.pi) + np.log(e @ e / n) + 1.0)
        np.testing.assert_allclose(loglikelihood(ols), ll, rtol=1e-10)
        np.testing.assert_allclose(aic(ols), -2 * ll + 2 * p, rtol=1e-10)
        np.testing.assert_allclose(bic(ols), -2 * ll + p * np.log(n), rtol=1e-10)

    def test_residuals_plus_fitted_is_response(self, ols, linear_data):
        np.testing.assert_allclose(
            residuals(ols) + fitted(ols), linear_data['y'].to_numpy(), rtol=1e-12
        )

    def test_cooks_distance(self, ols, linear_data):
        X = _design(linear_data)
        e = residuals(ols)
        n, p = X.shape
        hat = np.diag(X @ np.linalg.inv(X.T @ X) @ X.T)
        s2 = e @ e / (n - p)
        expected = e ** 2 / (p * s2) * hat / (1 - hat) ** 2
        np.testing.assert_allclose(cooksdistance(ols), expected, rtol=1e-8)

    @pytest.mark.parametrize("getter", [
        coeftable, r2, adjr2, loglikelihood, aic, bic, sigma,
        residuals, cooksdistance, fitted,
    ])
    def test_idempotent(self, ols, getter):
        first = getter(ols)
        second = getter(ols)
        if isinstance(first, pd.DataFrame):
            pd.testing.assert_frame_equal(first, second)
        else:
            np.testing.assert_array_equal(first, second)


# =====================================================================
# GLM getters
# =====================================================================

class TestGLMGetters:

    def test_coeftable_uses_z(self, logit):
        assert 'z' in coeftable(logit).columns
        assert 'Pr(>|z|)' in coeftable(logit).columns

    def test_mcfadden_r2(self, logit, binary_data):
        y = binary_data['vote'].to_numpy()
        pbar = y.mean()
        ll_null = len(y) * (pbar * np.log(pbar) + (1 - pbar) * np.log(1 - pbar))
        np.testing.assert_allclose(r2(logit), 1.0 - loglikelihood(logit) / ll_null, rtol=1e-8)
        np.testing.assert_allclose(
            adjr2(logit), 1.0 - (loglikelihood(logit) - 3) / ll_null, rtol=1e-8
        )
        assert 0.0 < adjr2(logit) < r2(logit) < 1.0

    def test_fitted_are_probabilities(self, logit):
        mu = fitted(logit)
        assert np.all((mu > 0) & (mu < 1))

    def test_response_residuals(self, logit, binary_data):
        np.testing.assert_allclose(
            residuals(logit), binary_data['vote'].to_numpy() - fitted(logit), rtol=1e-10
        )

    def test_sigma_from_deviance(self, count_data):
        result = fitmodel("num ~ x1 + x2", count_data, PoissonRegression())
        fit = result.fitted_model
        np.testing.assert_allclose(sigma(result), np.sqrt(fit.deviance / fit.df_residual))

    def test_cooks_distance_nonnegative(self, count_data):
        result = fitmodel("num ~ x1 + x2", count_data, PoissonRegression())
        d = cooksdistance(result)
        assert d.shape == (len(count_data),)
        assert np.all(d >= 0)


class TestWrongContainer:

    @pytest.mark.parametrize("getter", [
        coeftable, r2, adjr2, loglikelihood, aic, bic, sigma,
        residuals, cooksdistance, fitted, predict, posterior, posterior_summary,
    ])
    def test_non_result(self, getter):
        with pytest.raises(TypeError, match="is not defined for dict"):
            getter({})

    @pytest.mark.parametrize("getter", [posterior, posterior_summary])
    def test_bayesian_getter_on_frequentist(self, ols, getter):
        with pytest.raises(TypeError, match="FrequentistRegression"):
            getter(ols)


# =====================================================================
# Prediction
# =====================================================================

class TestPredict:

    def test_no_data_returns_fitted(self, ols):
        np.testing.assert_array_equal(predict(ols), fitted(ols))

    def test_training_data_equals_fitted_linear(self, ols, linear_data):
        np.testing.assert_allclose(predict(ols, linear_data), fitted(ols), rtol=1e-10)

    @pytest.mark.parametrize("link_cls", [Logit, Probit])
    def test_training_data_equals_fitted_logistic(self, binary_data, link_cls):
        result = fitmodel("vote ~ age + income", binary_data, LogisticRegression(), link_cls())
        np.testing.assert_allclose(predict(result, binary_data), fitted(result), rtol=1e-8)

    def test_training_data_equals_fitted_count(self, count_data, overdispersed_count_data):
        pois = fitmodel("num ~ x1 + x2", count_data, PoissonRegression())
        np.testing.assert_allclose(predict(pois, count_data), fitted(pois), rtol=1e-8)
        nb = fitmodel("num ~ x", overdispersed_count_data, NegBinomRegression())
        np.testing.assert_allclose(
            predict(nb, overdispersed_count_data), fitted(nb), rtol=1e-8
        )

    def test_new_data_linear(self, ols):
        new = pd.DataFrame({'x1': [0.0, 1.0], 'x2': [0.0, 2.0]})
        b = ols.coefficients
        np.testing.assert_allclose(predict(ols, new), [b[0], b[0] + b[1] + 2 * b[2]])

    def test_new_data_probit(self, binary_data):
        result = fitmodel("vote ~ age + income", binary_data, LogisticRegression(), Probit())
        new = pd.DataFrame({'age': [-1.0, 0.5], 'income': [0.3, 0.0]})
        X = np.column_stack([np.ones(2), new['age'], new['income']])
        np.testing.assert_allclose(
            predict(result, new), special.ndtr(X @ result.coefficients), rtol=1e-12
        )

    def test_new_data_poisson(self, count_data):
        result = fitmodel("num ~ x1 + x2", count_data, PoissonRegression())
        new = pd.DataFrame({'x1': [0.2], 'x2': [-0.1]})
        b = result.coefficients
        np.testing.assert_allclose(predict(result, new), np.exp(b[0] + 0.2 * b[1] - 0.1 * b[2]))

    def test_categorical_subset(self, grouped_linear_data):
        result = fitmodel("y ~ x + group", grouped_linear_data, LinearRegression())
        new = pd.DataFrame({'x': [0.0], 'group': ['b']})
        b = result.coefficients
        np.testing.assert_allclose(predict(result, new), [b[0] + b[1]])

    def test_missing_column(self, ols):
        with pytest.raises(SchemaError) as excinfo:
            predict(ols, pd.DataFrame({'x1': [1.0]}))
        assert excinfo.value.missing == ('x2',)

    def test_unsupported_link(self, count_data):
        result = fitmodel("num ~ x1", count_data, PoissonRegression())
        tampered = replace(result, link=Logit())
        with pytest.raises(UnsupportedLinkError) as excinfo:
            predict(tampered, count_data)
        assert excinfo.value.model_class == 'PoissonRegression'
        assert excinfo.value.link == 'logit'

    def test_original_data_untouched(self, ols, linear_data):
        before = linear_data.copy()
        predict(ols, linear_data)
        pd.testing.assert_frame_equal(linear_data, before)
