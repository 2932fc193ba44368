"""
Regression solution types.

Contains the posterior payload and the two user-facing result containers:
FrequentistRegression wraps an opaque FittedModel handle, and
BayesianRegression wraps the posterior draws. Both are frozen; the
getters in pyregression.regression.getters read from them.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from numpyro.diagnostics import summary as numpyro_summary

from pyregression.core.protocols import FittedModel
from pyregression.core.result import Result
from pyregression.regression.design import PredictorSchema
from pyregression.regression.links import Link
from pyregression.regression.models import ModelClass
from pyregression.regression.priors import Prior


@dataclass(frozen=True)
class PosteriorSamples:
    """
    Posterior draws produced by the sampler.

    Draws from all chains are pooled in chain order; the first axis of
    every array is the draw index. Arrays are read-only.

    Attributes:
        draws: Site name → array of shape (n_draws, *site_shape)
        num_chains: Number of chains the draws were pooled from
        divergences: Divergent transitions reported by NUTS
    """
    draws: Mapping[str, NDArray[np.floating[Any]]]
    num_chains: int = 1
    divergences: int = 0

    @classmethod
    def from_arrays(
        cls,
        draws: Mapping[str, Any],
        *,
        num_chains: int = 1,
        divergences: int = 0,
    ) -> PosteriorSamples:
        frozen = {}
        for name, values in draws.items():
            arr = np.array(values, dtype=np.float64)
            arr.setflags(write=False)
            frozen[name] = arr
        return cls(
            draws=MappingProxyType(frozen),
            num_chains=num_chains,
            divergences=divergences,
        )

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.draws.keys())

    @property
    def n_draws(self) -> int:
        """Draws per parameter (all chains pooled)."""
        first = next(iter(self.draws.values()))
        return int(first.shape[0])

    def __getitem__(self, name: str) -> NDArray[np.floating[Any]]:
        if name not in self.draws:
            raise KeyError(
                f"No posterior site {name!r}. Available: {sorted(self.draws)}"
            )
        return self.draws[name]

    def __contains__(self, name: str) -> bool:
        return name in self.draws

    @property
    def intercept(self) -> NDArray[np.floating[Any]]:
        """Intercept draws (n_draws,)."""
        return self['alpha']

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        """Coefficient draws (n_draws, p)."""
        return self['beta']

    def point_estimate(self, kind: str = 'mean') -> tuple[float, NDArray[np.floating[Any]]]:
        """
        Representative (intercept, coefficients) from the draws.

        Args:
            kind: 'mean' or 'median'
        """
        if kind == 'mean':
            reduce = np.mean
        elif kind == 'median':
            reduce = np.median
        else:
            raise ValueError(f"Unknown point estimate: {kind!r}. Valid: mean, median")
        return float(reduce(self.intercept)), reduce(self.coefficients, axis=0)

    def by_chain(self, name: str) -> NDArray[np.floating[Any]]:
        """Draws of one site reshaped to (num_chains, draws_per_chain, ...)."""
        arr = self[name]
        return arr.reshape((self.num_chains, -1) + arr.shape[1:])

    def summary(
        self,
        coefficient_names: tuple[str, ...] = (),
        prob: float = 0.9,
    ) -> pd.DataFrame:
        """
        Per-parameter posterior summary.

        Columns: mean, std, median, lower/upper quantiles of the central
        `prob` interval, effective sample size and split R-hat. Vector
        sites get one row per element; beta rows are labelled with the
        design column names when given.
        """
        grouped = {name: self.by_chain(name) for name in self.names}
        stats = numpyro_summary(grouped, prob=prob, group_by_chain=True)

        rows = []
        labels = []
        for name in self.names:
            site = stats[name]
            shape = np.shape(site['mean'])
            if shape == ():
                labels.append(name)
                rows.append({k: float(v) for k, v in site.items()})
                continue
            flat = {k: np.ravel(v) for k, v in site.items()}
            size = int(np.prod(shape))
            for i in range(size):
                if name == 'beta' and len(coefficient_names) == size:
                    labels.append(f"beta[{coefficient_names[i]}]")
                else:
                    labels.append(f"{name}[{i}]")
                rows.append({k: float(v[i]) for k, v in flat.items()})
        return pd.DataFrame(rows, index=pd.Index(labels, name='parameter'))

    def __repr__(self) -> str:
        return (
            f"PosteriorSamples(sites={list(self.names)}, n_draws={self.n_draws}, "
            f"num_chains={self.num_chains}, divergences={self.divergences})"
        )


@dataclass(frozen=True)
class FrequentistRegression:
    """
    Result of a frequentist fit.

    Holds the model-class tag, the link it was fitted with and the
    backend Result wrapping an opaque FittedModel. Read-only.
    """
    model_class: ModelClass
    link: Link
    _result: Result[FittedModel]
    _schema: PredictorSchema

    @property
    def formula(self) -> str:
        return self._schema.formula

    @property
    def fitted_model(self) -> FittedModel:
        return self._result.params

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def coefficient_names(self) -> tuple[str, ...]:
        return self._result.params.coefficient_names

    @property
    def schema(self) -> PredictorSchema:
        return self._schema

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def details(self) -> str:
        """Describe the regression method behind this result."""
        return self.model_class.details()

    def summary(self) -> str:
        """Generate R-style summary output."""
        fit = self.fitted_model
        table = fit.coef_table()
        lines = [
            f"{self.model_class.name} (link: {self.link.name})",
            "=" * 72,
            f"Formula: {self.formula}",
            f"Observations: {fit.nobs}",
            f"Residual DF: {fit.df_residual:g}",
            f"Log-likelihood: {fit.loglikelihood:.6f}",
            f"AIC: {fit.aic:.6f}   BIC: {fit.bic:.6f}",
        ]
        if 'dispersion' in self.info:
            lines.append(f"NB2 dispersion (alpha): {self.info['dispersion']:.6f}")
        lines += [
            "",
            "Coefficients:",
            "-" * 72,
            table.to_string(float_format=lambda v: f"{v:.6f}"),
            "-" * 72,
            f"Backend: {self.backend_name}",
        ]
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"FrequentistRegression({self.model_class.name}, link={self.link.name!r}, "
            f"formula={self.formula!r}, n={self.fitted_model.nobs})"
        )


@dataclass(frozen=True)
class BayesianRegression:
    """
    Result of a Bayesian fit.

    Holds the model-class tag, link, prior, the hyperparameter h that was
    used, and the backend Result wrapping the PosteriorSamples. Read-only.
    """
    model_class: ModelClass
    link: Link
    prior: Prior
    h: float
    _result: Result[PosteriorSamples]
    _schema: PredictorSchema

    @property
    def formula(self) -> str:
        return self._schema.formula

    @property
    def samples(self) -> PosteriorSamples:
        return self._result.params

    @property
    def n_draws(self) -> int:
        return self._result.params.n_draws

    @property
    def coefficient_names(self) -> tuple[str, ...]:
        """Design columns matching the beta draws (intercept excluded)."""
        return self._schema.column_names

    @property
    def schema(self) -> PredictorSchema:
        return self._schema

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def details(self) -> str:
        """Describe the regression method behind this result."""
        return (
            f"{self.model_class.details()}\n"
            f"Prior: {self.prior.name} with scale ~ InverseGamma({self.h:g}, {self.h:g})."
        )

    def summary(self) -> str:
        table = self.samples.summary(self.coefficient_names)
        lines = [
            f"{self.model_class.name} (link: {self.link.name}, prior: {self.prior.name}, h={self.h:g})",
            "=" * 72,
            f"Formula: {self.formula}",
            f"Draws: {self.n_draws} ({self.samples.num_chains} chain(s)), "
            f"divergences: {self.samples.divergences}",
            "",
            table.to_string(float_format=lambda v: f"{v:.4f}"),
            "-" * 72,
            f"Backend: {self.backend_name}",
        ]
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BayesianRegression({self.model_class.name}, link={self.link.name!r}, "
            f"prior={self.prior.name!r}, formula={self.formula!r}, n_draws={self.n_draws})"
        )
