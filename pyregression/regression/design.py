"""
Formula Design.

FormulaDesign expands a formula string against a DataFrame into the
numeric design matrix X and response y that a backend consumes. It keeps
the patsy DesignInfo of the right-hand side as a PredictorSchema, so the
same expansion (column order, categorical levels, transforms) can be
replayed on new data at prediction time.

Nothing here is cached: every fit and every prediction expands the data
afresh.
"""

from __future__ import annotations

import ast
import builtins
import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from patsy import builtins as patsy_builtins
from patsy import (
    ModelDesc, DesignInfo, EvalEnvironment, PatsyError,
    dmatrices, build_design_matrices,
)

from pyregression.core.exceptions import SchemaError
from pyregression.core.validation import check_dataframe, check_finite

logger = logging.getLogger(__name__)

INTERCEPT_COLUMN = 'Intercept'

# Names a formula may use that are not data columns
_EVAL_ENV = EvalEnvironment([{'np': np}])
_KNOWN_NAMES = frozenset(patsy_builtins.__all__) | {'np'}
_PYTHON_BUILTINS = frozenset(dir(builtins))


@dataclass(frozen=True)
class PredictorSchema:
    """
    How to turn a DataFrame into predictor columns for one fitted model.

    Attributes:
        formula: The formula the model was fitted with
        design_info: patsy DesignInfo of the right-hand side
        drop_intercept: Whether the intercept column is removed (Bayesian
            programs carry their own intercept site)
    """
    formula: str
    design_info: DesignInfo
    drop_intercept: bool = False

    @property
    def column_names(self) -> tuple[str, ...]:
        names = tuple(self.design_info.column_names)
        if self.drop_intercept:
            names = tuple(n for n in names if n != INTERCEPT_COLUMN)
        return names

    def matrix(self, data: pd.DataFrame) -> NDArray[np.floating[Any]]:
        """
        Expand new data through this schema.

        Raises:
            SchemaError: If a predictor column is missing or cannot be
                expanded (e.g. an unseen categorical level)
        """
        check_dataframe(data, 'data')
        codes = [factor.code for factor in self.design_info.factor_infos]
        _check_columns(self.formula, codes, data)
        try:
            (X_df,) = build_design_matrices(
                [self.design_info], data, NA_action='raise', return_type='dataframe'
            )
        except PatsyError as err:
            raise SchemaError(
                f"cannot expand predictors of {self.formula!r}: {err}",
                formula=self.formula,
            ) from err
        if self.drop_intercept and INTERCEPT_COLUMN in X_df.columns:
            X_df = X_df.drop(columns=INTERCEPT_COLUMN)
        X = X_df.to_numpy(dtype=np.float64)
        check_finite(X, 'X')
        return X


@dataclass(frozen=True)
class FormulaDesign:
    """
    Regression design built from a formula and a DataFrame.

    Immutable after construction.

    Construction:
        FormulaDesign.build("y ~ x1 + x2", df)                        # with intercept column
        FormulaDesign.build("y ~ x1 + x2", df, drop_intercept=True)   # X without it
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _response_name: str
    _schema: PredictorSchema

    @classmethod
    def build(
        cls,
        formula: str,
        data: pd.DataFrame,
        *,
        drop_intercept: bool = False,
    ) -> FormulaDesign:
        """
        Expand formula against data.

        Args:
            formula: patsy formula, e.g. "y ~ x1 + np.log(x2) + C(group)"
            data: DataFrame holding every referenced column
            drop_intercept: Remove the 'Intercept' column from X

        Returns:
            FormulaDesign ready for a backend

        Raises:
            SchemaError: If the formula is malformed, has no response,
                references missing columns, or the response does not
                expand to a single numeric column
        """
        check_dataframe(data, 'data')
        if not isinstance(formula, str):
            raise SchemaError(
                f"formula: expected str, got {type(formula).__name__}"
            )

        desc = _parse(formula)
        if not desc.lhs_termlist:
            raise SchemaError(f"formula {formula!r} has no response", formula=formula)

        codes = [
            factor.code
            for term in desc.lhs_termlist + desc.rhs_termlist
            for factor in term.factors
        ]
        _check_columns(formula, codes, data)
        data = _numeric_response(desc, data)

        try:
            y_df, X_df = dmatrices(
                formula, data, eval_env=_EVAL_ENV,
                NA_action='raise', return_type='dataframe',
            )
        except PatsyError as err:
            raise SchemaError(
                f"cannot expand {formula!r}: {err}", formula=formula
            ) from err

        if y_df.shape[1] != 1:
            raise SchemaError(
                f"response of {formula!r} expands to {y_df.shape[1]} columns "
                f"{list(y_df.columns)}; expected one numeric column",
                formula=formula,
            )

        schema = PredictorSchema(
            formula=formula,
            design_info=X_df.design_info,
            drop_intercept=drop_intercept,
        )
        if drop_intercept and INTERCEPT_COLUMN in X_df.columns:
            X_df = X_df.drop(columns=INTERCEPT_COLUMN)

        X = X_df.to_numpy(dtype=np.float64)
        y = y_df.iloc[:, 0].to_numpy(dtype=np.float64)
        check_finite(X, 'X')
        check_finite(y, 'y')

        logger.debug("expanded %r: n=%d, p=%d", formula, X.shape[0], X.shape[1])
        return cls(_X=X, _y=y, _response_name=str(y_df.columns[0]), _schema=schema)

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix (n x p)."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._X.shape[0]

    @property
    def p(self) -> int:
        """Number of columns in X."""
        return self._X.shape[1]

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._schema.column_names

    @property
    def response_name(self) -> str:
        return self._response_name

    @property
    def formula(self) -> str:
        return self._schema.formula

    @property
    def schema(self) -> PredictorSchema:
        return self._schema


def _parse(formula: str) -> ModelDesc:
    try:
        return ModelDesc.from_formula(formula)
    except PatsyError as err:
        raise SchemaError(f"malformed formula {formula!r}: {err}", formula=formula) from err


def _numeric_response(desc: ModelDesc, data: pd.DataFrame) -> pd.DataFrame:
    """Cast bool response columns to 0/1 floats; patsy would treat them as categorical."""
    bool_columns = [
        factor.code
        for term in desc.lhs_termlist
        for factor in term.factors
        if factor.code in data.columns and pd.api.types.is_bool_dtype(data[factor.code])
    ]
    if not bool_columns:
        return data
    return data.assign(**{c: data[c].astype(np.float64) for c in bool_columns})


def _check_columns(formula: str, codes: list[str], data: pd.DataFrame) -> None:
    """Fail before any expansion when a formula names columns data lacks."""
    referenced: set[str] = set()
    called: set[str] = set()
    for code in codes:
        try:
            tree = ast.parse(code.strip(), mode='eval')
        except SyntaxError:
            # patsy will report it with full context
            continue
        for node in ast.walk(tree):
            if isinstance(node, ast.Name):
                referenced.add(node.id)
            elif isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
                called.add(node.func.id)
    columns = {str(c) for c in data.columns}
    # Python builtins are known only in call position, as in abs(x)
    functions = called & _PYTHON_BUILTINS
    missing = sorted(referenced - columns - _KNOWN_NAMES - functions)
    if missing:
        raise SchemaError(
            f"formula {formula!r} references columns not in data: {missing}. "
            f"Available: {sorted(columns)}",
            formula=formula,
            missing=tuple(missing),
        )
