"""
Core protocols for pyregression.

These define structural interfaces that implementations must satisfy.
We use Protocol (structural typing) rather than ABC (nominal typing) so
that solver adapters need not inherit from anything in this package.

Design Principles:
    - Minimal contracts: prescribe only what the getter layer needs
    - The solver's own result object never leaks past its adapter
"""

from typing import Protocol, Any, runtime_checkable

import numpy as np
import pandas as pd
from numpy.typing import NDArray


@runtime_checkable
class FittedModel(Protocol):
    """
    Opaque handle to a frequentist fit.

    Produced once by a frequentist backend and owned by the result
    container. Exposes only what prediction and the getters need.
    """

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        """Point estimates, aligned with coefficient_names."""
        ...

    @property
    def coefficient_names(self) -> tuple[str, ...]:
        ...

    @property
    def nobs(self) -> int:
        ...

    @property
    def df_residual(self) -> float:
        ...

    @property
    def deviance(self) -> float:
        ...

    @property
    def loglikelihood(self) -> float:
        ...

    @property
    def aic(self) -> float:
        ...

    @property
    def bic(self) -> float:
        ...

    @property
    def r2(self) -> float:
        ...

    @property
    def adjr2(self) -> float:
        ...

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        ...

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        ...

    def coef_table(self) -> pd.DataFrame:
        """Estimates with standard errors, test statistics and intervals."""
        ...

    def cooks_distance(self) -> NDArray[np.floating[Any]]:
        """Per-observation Cook's distance."""
        ...
