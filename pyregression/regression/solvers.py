"""
Solver dispatch for regression.

This module provides fitmodel() (the public entry point) and the dispatch
registry that maps a (model class, link, prior) combination to exactly
one fitting routine.

The registry is keyed on argument types only, never on their contents:

    (LinearRegression,   None,   None)   -> frequentist routine
    (LogisticRegression, Probit, None)   -> frequentist routine
    (PoissonRegression,  None,   Ridge)  -> Bayesian routine
    ...

It is filled and checked for completeness at import time; a combination
that is not in the table raises DispatchError before any data is read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Union

import pandas as pd

from pyregression.core.config import SamplerConfig, SolverConfig
from pyregression.core.exceptions import DispatchError
from pyregression.core.random import KeyStream, resolve_rng
from pyregression.core.validation import check_positive, check_positive_int
from pyregression.regression.backends.glm import StatsmodelsBackend
from pyregression.regression.backends.nuts import NUTSBackend
from pyregression.regression.backends.programs import regression_program
from pyregression.regression.design import FormulaDesign
from pyregression.regression.families import family_for
from pyregression.regression.links import Link
from pyregression.regression.models import (
    ModelClass, LinearRegression, LogisticRegression,
    PoissonRegression, NegBinomRegression,
)
from pyregression.regression.priors import (
    Prior, Ridge, Laplace, Cauchy, StudentT, Uniform,
)
from pyregression.regression.solution import FrequentistRegression, BayesianRegression

logger = logging.getLogger(__name__)

DEFAULT_SIM_SIZE = 10000

MODEL_CLASSES: tuple[type[ModelClass], ...] = (
    LinearRegression, LogisticRegression, PoissonRegression, NegBinomRegression,
)
PRIORS: tuple[type[Prior], ...] = (Ridge, Laplace, Cauchy, StudentT, Uniform)

RegressionResult = Union[FrequentistRegression, BayesianRegression]


@dataclass(frozen=True)
class FitRequest:
    """Arguments of one fitmodel() call after dispatch."""
    formula: str
    data: pd.DataFrame
    model_class: ModelClass
    link: Link | None
    prior: Prior | None
    h: float | None = None
    sim_size: int = DEFAULT_SIM_SIZE
    rng: KeyStream | None = None
    sampler: SamplerConfig | None = None
    solver: SolverConfig | None = None


Routine = Callable[[FitRequest], RegressionResult]
DispatchKey = tuple[type[ModelClass], Union[type[Link], None], Union[type[Prior], None]]


# =====================================================================
# Fitting routines
# =====================================================================

def fit_frequentist(request: FitRequest) -> FrequentistRegression:
    """Expand the formula and fit with statsmodels."""
    family = family_for(request.model_class)
    link = family.resolve_link(request.link)

    design = FormulaDesign.build(request.formula, request.data)
    result = StatsmodelsBackend(request.solver).solve(design, family, link)

    logger.info(
        "%s fitted (%s, n=%d, p=%d) in %.4fs",
        request.model_class.name, result.backend_name, design.n, design.p,
        result.timing['total_seconds'],
    )
    return FrequentistRegression(
        model_class=request.model_class,
        link=link,
        _result=result,
        _schema=design.schema,
    )


def fit_bayesian(request: FitRequest) -> BayesianRegression:
    """Expand the formula, build the model program and sample it with NUTS."""
    family = family_for(request.model_class)
    link = family.resolve_link(request.link)
    prior = request.prior
    h = _resolve_h(request)

    design = FormulaDesign.build(request.formula, request.data, drop_intercept=True)
    family.check_response(design.y)

    program = regression_program(family, prior, link, h)
    rng = request.rng if request.rng is not None else KeyStream()
    result = NUTSBackend(request.sampler).solve(
        design, program, request.sim_size, rng.next_key()
    )

    logger.info(
        "%s with %s prior sampled (%d draws, %d divergences) in %.4fs",
        request.model_class.name, prior.name, result.params.n_draws,
        result.params.divergences, result.timing['total_seconds'],
    )
    return BayesianRegression(
        model_class=request.model_class,
        link=link,
        prior=prior,
        h=h,
        _result=result,
        _schema=design.schema,
    )


def _resolve_h(request: FitRequest) -> float:
    """Explicit h argument, else the prior's own h, else the family default."""
    if request.h is not None:
        return request.h
    if request.prior.h is not None:
        return float(request.prior.h)
    return family_for(request.model_class).default_h[type(request.prior)]


# =====================================================================
# Dispatch registry
# =====================================================================

_REGISTRY: dict[DispatchKey, Routine] = {}


def register(key: DispatchKey, routine: Routine) -> None:
    """Add one combination to the registry. Duplicates are an error."""
    if key in _REGISTRY:
        raise DispatchError(f"routine already registered for {_describe_key(key)}")
    _REGISTRY[key] = routine


def _build_registry() -> None:
    for model_cls in MODEL_CLASSES:
        links = family_for(model_cls).allowed_links or (None,)
        for link_cls in links:
            register((model_cls, link_cls, None), fit_frequentist)
            for prior_cls in PRIORS:
                register((model_cls, link_cls, prior_cls), fit_bayesian)


def _check_registry() -> None:
    """Every model class must have a frequentist and a Bayesian routine
    for every link it accepts, and every prior must have a default h."""
    for model_cls in MODEL_CLASSES:
        family = family_for(model_cls)
        for link_cls in family.allowed_links or (None,):
            for prior_cls in (None,) + PRIORS:
                key = (model_cls, link_cls, prior_cls)
                if key not in _REGISTRY:
                    raise DispatchError(f"no routine for {_describe_key(key)}")
                if prior_cls is not None and prior_cls not in family.default_h:
                    raise DispatchError(
                        f"{family.name} family has no default h for {prior_cls.__name__}"
                    )


_build_registry()
_check_registry()


def registered_combinations() -> tuple[DispatchKey, ...]:
    """All (model class, link, prior) type combinations fitmodel() accepts."""
    return tuple(_REGISTRY)


def dispatch(
    model_class: ModelClass,
    link: Link | None,
    prior: Prior | None,
) -> Routine:
    """
    Look up the routine for a combination of tags.

    Raises:
        DispatchError: If no routine matches
    """
    key = (type(model_class), None if link is None else type(link),
           None if prior is None else type(prior))
    routine = _REGISTRY.get(key)
    if routine is None:
        hint = ""
        try:
            family = family_for(model_class)
        except TypeError:
            raise DispatchError(
                f"no fitting routine for {_describe_key(key)}. "
                f"Unknown model class {type(model_class).__name__}; use one of "
                f"{', '.join(cls.__name__ for cls in MODEL_CLASSES)}.",
                model_class=model_class.name,
                link=None if link is None else link.name,
                prior=None if prior is None else prior.name,
            ) from None
        if family.allowed_links and link is None:
            names = ', '.join(cls.__name__ for cls in family.allowed_links)
            hint = f" {model_class.name} requires a link: one of {names}."
        elif not family.allowed_links and link is not None:
            hint = f" {model_class.name} does not take a link argument."
        raise DispatchError(
            f"no fitting routine for {_describe_key(key)}.{hint}",
            model_class=model_class.name,
            link=None if link is None else link.name,
            prior=None if prior is None else prior.name,
        )
    return routine


def _describe_key(key: DispatchKey) -> str:
    model_cls, link_cls, prior_cls = key
    return (
        f"({model_cls.__name__}, "
        f"link={'none' if link_cls is None else link_cls.__name__}, "
        f"prior={'none' if prior_cls is None else prior_cls.__name__})"
    )


def _split_tags(model_class: Any, tags: tuple[Any, ...]) -> tuple[Link | None, Prior | None]:
    if not isinstance(model_class, ModelClass):
        if isinstance(model_class, type) and issubclass(model_class, ModelClass):
            raise DispatchError(
                f"model_class must be an instance: use {model_class.__name__}(), "
                f"not {model_class.__name__}"
            )
        raise DispatchError(
            f"model_class must be a ModelClass tag, got {type(model_class).__name__}"
        )

    link = prior = None
    for tag in tags:
        if isinstance(tag, Link):
            if link is not None:
                raise DispatchError(f"more than one link given: {link!r}, {tag!r}")
            link = tag
        elif isinstance(tag, Prior):
            if prior is not None:
                raise DispatchError(f"more than one prior given: {prior!r}, {tag!r}")
            prior = tag
        else:
            raise DispatchError(
                f"unexpected positional argument {tag!r}: only Link and Prior "
                f"tags may follow the model class (pass h= and sim_size= by keyword)"
            )
    return link, prior


# =====================================================================
# Public API
# =====================================================================

def fitmodel(
    formula: str,
    data: pd.DataFrame,
    model_class: ModelClass,
    *tags: Link | Prior,
    h: float | None = None,
    sim_size: int | None = None,
    rng: KeyStream | int | None = None,
    sampler: SamplerConfig | None = None,
    solver: SolverConfig | None = None,
) -> RegressionResult:
    """
    Fit a regression model described by a formula.

    The model class, plus an optional Link tag and an optional Prior tag,
    select exactly one fitting routine. Without a prior the model is
    fitted by maximum likelihood (statsmodels); with a prior it is fitted
    by NUTS sampling (numpyro).

    Args:
        formula: patsy formula over columns of data, e.g. "y ~ x1 + x2"
        data: DataFrame with one row per observation
        model_class: LinearRegression(), LogisticRegression(),
            PoissonRegression() or NegBinomRegression()
        *tags: At most one Link (required for LogisticRegression, not
            accepted otherwise) and at most one Prior, in any order
        h: Prior hyperparameter; defaults per model class and prior
        sim_size: Posterior draws per chain (default 10000)
        rng: KeyStream or int seed for the sampler; None uses a fresh,
            entropy-seeded stream. Pass the same seeded stream (or
            reseed it) to reproduce draws.
        sampler: NUTS settings (warmup, target acceptance, chains)
        solver: Frequentist solver settings (tolerance, iterations)

    Returns:
        FrequentistRegression without a prior, BayesianRegression with one

    Raises:
        DispatchError: No routine for the combination of tags, or
            Bayesian-only arguments given without a prior
        ValidationError: Invalid h, sim_size or data
        SchemaError: Formula references columns data lacks
        FitError: The frequentist solver failed
        SamplerError: The sampler produced non-finite draws

    Example:
        >>> from pyregression import fitmodel, LinearRegression, LogisticRegression
        >>> from pyregression import PoissonRegression, Logit, Ridge, KeyStream
        >>> ols = fitmodel("MPG ~ HP + WT + Gear", mtcars, LinearRegression())
        >>> logit = fitmodel("Vote ~ Age + Income", turnout, LogisticRegression(), Logit())
        >>> bayes = fitmodel("Num ~ Target + Coop", sanction, PoissonRegression(),
        ...                  Ridge(), sim_size=2000, rng=KeyStream(123))
    """
    # === Dispatch ===
    # Resolved before anything else so a bad combination never touches data
    link, prior = _split_tags(model_class, tags)
    routine = dispatch(model_class, link, prior)

    if prior is None:
        given = [name for name, value in
                 (('h', h), ('sim_size', sim_size), ('rng', rng), ('sampler', sampler))
                 if value is not None]
        if given:
            raise DispatchError(
                f"{', '.join(given)} only apply to Bayesian fits; pass a Prior tag",
                model_class=model_class.name,
                link=None if link is None else link.name,
            )

    # === Argument Validation ===
    h_value = None if h is None else check_positive(h, 'h')
    size = DEFAULT_SIM_SIZE if sim_size is None else check_positive_int(sim_size, 'sim_size')

    request = FitRequest(
        formula=formula,
        data=data,
        model_class=model_class,
        link=link,
        prior=prior,
        h=h_value,
        sim_size=size,
        rng=None if prior is None else resolve_rng(rng),
        sampler=sampler,
        solver=solver,
    )

    logger.debug("dispatching %s to %s", _describe_key(
        (type(model_class), None if link is None else type(link),
         None if prior is None else type(prior))
    ), routine.__name__)

    # === Fit ===
    return routine(request)
