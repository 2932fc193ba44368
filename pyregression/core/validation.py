"""
Input validation utilities for pyregression.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion
    - No default handling of edge cases
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numbers

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from typing import Any

from pyregression.core.exceptions import ValidationError, FitError


def check_dataframe(data: Any, name: str) -> pd.DataFrame:
    """
    Verify input is a pandas DataFrame with at least one row.

    Args:
        data: Input to validate
        name: Parameter name for error messages

    Returns:
        The DataFrame, unchanged

    Raises:
        ValidationError: If data is not a non-empty DataFrame
    """
    if not isinstance(data, pd.DataFrame):
        raise ValidationError(
            f"{name}: expected pandas.DataFrame, got {type(data).__name__}"
        )
    if len(data) == 0:
        raise ValidationError(f"{name}: DataFrame has no rows")
    return data


def check_positive(value: Any, name: str) -> float:
    """
    Verify value is a finite, strictly positive real number.

    Raises:
        ValidationError: If value is not a positive real
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(
            f"{name}: expected a real number, got {type(value).__name__}"
        )
    if not np.isfinite(value) or value <= 0:
        raise ValidationError(f"{name}: must be positive and finite, got {value}")
    return float(value)


def check_positive_int(value: Any, name: str) -> int:
    """
    Verify value is a strictly positive integer.

    Raises:
        ValidationError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValidationError(
            f"{name}: expected an integer, got {type(value).__name__}"
        )
    if value <= 0:
        raise ValidationError(f"{name}: must be positive, got {value}")
    return int(value)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_column_rank(X: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify matrix has full column rank.

    A rank-deficient design matrix indicates perfect multicollinearity;
    the solver would return aliased coefficients instead of failing.

    Raises:
        FitError: If matrix is rank-deficient
    """
    p = X.shape[1]
    rank = int(np.linalg.matrix_rank(X))

    if rank < p:
        raise FitError(
            f"{name}: rank-deficient (rank={rank}, expected={p}). "
            f"This indicates perfect multicollinearity.",
            reason='rank_deficient',
            rank=rank,
            expected_rank=p,
        )
