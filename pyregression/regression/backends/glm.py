"""
Frequentist backend built on statsmodels.

Linear models are solved by OLS; logistic, Poisson and negative binomial
models by IRLS (statsmodels GLM). Negative binomial fits first estimate
the NB2 dispersion α by maximum likelihood and then refit the GLM with α
held fixed, the same two-step scheme as R's MASS::glm.nb, so that every
GLM diagnostic (deviance, influence) is available.

The statsmodels results object never leaves this module: it is wrapped in
StatsmodelsFit, which implements the FittedModel protocol.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray
import statsmodels.api as sm
from statsmodels.discrete.discrete_model import NegativeBinomial as NBDiscrete
from statsmodels.tools.sm_exceptions import (
    ConvergenceWarning,
    PerfectSeparationWarning,
)

from pyregression.core.config import SolverConfig
from pyregression.core.exceptions import FitError
from pyregression.core.result import Result
from pyregression.core.timing import Timer
from pyregression.core.validation import check_column_rank
from pyregression.regression.design import FormulaDesign
from pyregression.regression.families import Family
from pyregression.regression.links import Link

logger = logging.getLogger(__name__)


class StatsmodelsFit:
    """
    FittedModel backed by a statsmodels OLS or GLM results object.

    Args:
        results: statsmodels results (RegressionResults or GLMResults)
        coefficient_names: Design column names, in coefficient order
        extra_params: Parameters estimated outside the results object
            (the NB2 dispersion); counted in AIC/BIC and adjusted R².
    """

    def __init__(
        self,
        results: Any,
        coefficient_names: tuple[str, ...],
        *,
        least_squares: bool,
        extra_params: int = 0,
    ):
        self._results = results
        self._names = tuple(coefficient_names)
        self._least_squares = least_squares
        self._extra_params = extra_params

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return np.asarray(self._results.params, dtype=np.float64)

    @property
    def coefficient_names(self) -> tuple[str, ...]:
        return self._names

    @property
    def nobs(self) -> int:
        return int(self._results.nobs)

    @property
    def df_residual(self) -> float:
        return float(self._results.df_resid)

    @property
    def n_params(self) -> int:
        """Estimated parameters: coefficients plus any external dispersion."""
        return len(self._names) + self._extra_params

    @property
    def deviance(self) -> float:
        if self._least_squares:
            return float(self._results.ssr)
        return float(self._results.deviance)

    @property
    def dispersion(self) -> float:
        """Scale estimate: σ² for OLS, φ for GLMs (1 for Binomial/Poisson)."""
        return float(self._results.scale)

    @property
    def loglikelihood(self) -> float:
        return float(self._results.llf)

    @property
    def aic(self) -> float:
        return float(self._results.aic) + 2.0 * self._extra_params

    @property
    def bic(self) -> float:
        if self._least_squares:
            base = float(self._results.bic)
        else:
            base = float(self._results.bic_llf)
        return base + self._extra_params * float(np.log(self.nobs))

    @property
    def r2(self) -> float:
        """R² for OLS; McFadden's pseudo-R² (1 - ℓ/ℓ₀) for GLMs."""
        if self._least_squares:
            return float(self._results.rsquared)
        return 1.0 - self.loglikelihood / float(self._results.llnull)

    @property
    def adjr2(self) -> float:
        """Adjusted R² for OLS; adjusted McFadden (1 - (ℓ - k)/ℓ₀) for GLMs."""
        if self._least_squares:
            return float(self._results.rsquared_adj)
        k = self.n_params
        return 1.0 - (self.loglikelihood - k) / float(self._results.llnull)

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        """Response-scale residuals y - μ̂."""
        if self._least_squares:
            return np.asarray(self._results.resid, dtype=np.float64)
        return np.asarray(self._results.resid_response, dtype=np.float64)

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        """Fitted mean μ̂ on the response scale."""
        return np.asarray(self._results.fittedvalues, dtype=np.float64)

    def coef_table(self) -> pd.DataFrame:
        r = self._results
        stat = 't' if self._least_squares else 'z'
        ci = np.asarray(r.conf_int(alpha=0.05), dtype=np.float64)
        return pd.DataFrame(
            {
                'Coef.': np.asarray(r.params, dtype=np.float64),
                'Std. Error': np.asarray(r.bse, dtype=np.float64),
                stat: np.asarray(r.tvalues, dtype=np.float64),
                f'Pr(>|{stat}|)': np.asarray(r.pvalues, dtype=np.float64),
                'Lower 95%': ci[:, 0],
                'Upper 95%': ci[:, 1],
            },
            index=pd.Index(self._names, name='term'),
        )

    def cooks_distance(self) -> NDArray[np.floating[Any]]:
        influence = self._results.get_influence()
        return np.asarray(influence.cooks_distance[0], dtype=np.float64)

    def __repr__(self) -> str:
        kind = 'OLS' if self._least_squares else 'GLM'
        return f"StatsmodelsFit({kind}, nobs={self.nobs}, p={len(self._names)})"


class StatsmodelsBackend:
    """
    Frequentist backend delegating to statsmodels.

    Maps a FormulaDesign to a Result[StatsmodelsFit].
    Solver failures are raised as FitError with the statsmodels exception
    chained; nothing is retried.
    """

    def __init__(self, config: SolverConfig | None = None):
        self._config = config or SolverConfig()

    @property
    def name(self) -> str:
        return 'statsmodels'

    def solve(
        self,
        design: FormulaDesign,
        family: Family,
        link: Link,
    ) -> Result[StatsmodelsFit]:
        """
        Fit the model.

        Args:
            design: Formula design; X includes the intercept column
            family: Response family of the model class
            link: Link to fit with (already validated for the family)

        Returns:
            Result containing a StatsmodelsFit

        Raises:
            FitError: Rank-deficient X, non-convergence, perfect
                separation or a numerical failure inside statsmodels
            ValidationError: Response outside the family's support
        """
        with Timer() as timer:
            X, y = design.X, design.y
            family.check_response(y)
            check_column_rank(X, 'X')

            info: dict[str, Any] = {'family': family.name, 'link': link.name}
            extra_params = 0

            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter('always')
                try:
                    if family.least_squares:
                        with timer.section('solve'):
                            results = sm.OLS(y, X).fit()
                        info['method'] = 'qr'
                        backend_name = 'statsmodels_ols'
                    else:
                        dispersion = None
                        if family.estimates_dispersion:
                            with timer.section('dispersion'):
                                dispersion = self._estimate_nb_dispersion(X, y)
                            info['dispersion'] = dispersion
                            extra_params = 1
                        with timer.section('solve'):
                            results = sm.GLM(
                                y, X, family=family.statsmodels_family(link, dispersion),
                            ).fit(
                                method='IRLS',
                                tol=self._config.tol,
                                maxiter=self._config.max_iter,
                            )
                        info['method'] = 'irls'
                        info['converged'] = bool(results.converged)
                        info['iterations'] = int(results.fit_history['iteration'])
                        backend_name = 'statsmodels_glm'
                except np.linalg.LinAlgError as err:
                    raise FitError(
                        f"{family.name} fit failed: {err}", reason='solver_failed'
                    ) from err

            solver_warnings = self._check_warnings(caught, family)

            if info.get('converged') is False:
                raise FitError(
                    f"{family.name} IRLS did not converge in "
                    f"{self._config.max_iter} iterations",
                    reason='not_converged',
                )

            fit = StatsmodelsFit(
                results,
                design.column_names,
                least_squares=family.least_squares,
                extra_params=extra_params,
            )
            if not np.all(np.isfinite(fit.coefficients)):
                raise FitError(
                    f"{family.name} fit produced non-finite coefficients",
                    reason='nonfinite',
                )

        logger.debug("%s fit finished in %.4fs", backend_name, timer.result()['total_seconds'])

        return Result(
            params=fit,
            info=info,
            timing=timer.result(),
            backend_name=backend_name,
            warnings=solver_warnings,
        )

    def _estimate_nb_dispersion(self, X: NDArray, y: NDArray) -> float:
        """Maximum-likelihood NB2 dispersion α."""
        nb = NBDiscrete(y, X, loglike_method='nb2').fit(
            disp=0, maxiter=self._config.max_iter,
        )
        if not nb.mle_retvals.get('converged', True):
            raise FitError(
                "negative binomial dispersion estimate did not converge",
                reason='not_converged',
            )
        alpha = float(np.asarray(nb.params)[-1])
        if not np.isfinite(alpha) or alpha <= 0:
            raise FitError(
                f"negative binomial dispersion estimate is invalid: {alpha}",
                reason='nonfinite',
            )
        return alpha

    def _check_warnings(self, caught, family: Family) -> tuple[str, ...]:
        """Turn solver failure warnings into FitError; keep the rest."""
        kept: list[str] = []
        for w in caught:
            if issubclass(w.category, PerfectSeparationWarning):
                raise FitError(
                    f"{family.name} fit failed: {w.message}", reason='solver_failed'
                )
            if issubclass(w.category, ConvergenceWarning):
                raise FitError(
                    f"{family.name} fit did not converge: {w.message}",
                    reason='not_converged',
                )
            message = f"{w.category.__name__}: {w.message}"
            logger.warning(message)
            kept.append(message)
        return tuple(kept)
