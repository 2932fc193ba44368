"""
Exception hierarchy for pyregression.

All exceptions inherit from PyRegressionError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyRegressionError(Exception):
    """Base exception for all pyregression errors."""
    pass


class ValidationError(PyRegressionError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class SchemaError(ValidationError):
    """
    Formula and dataset do not agree.

    Raised when a formula references a column that is absent from the
    dataset, or a column whose type cannot be expanded as requested
    (e.g. a text response for a linear model).

    Attributes:
        formula: The formula being expanded
        missing: Column names referenced by the formula but not found
    """

    def __init__(
        self,
        message: str,
        formula: str | None = None,
        missing: tuple[str, ...] = (),
    ):
        super().__init__(message)
        self.formula = formula
        self.missing = tuple(missing)


class DispatchError(PyRegressionError):
    """
    No fitting routine matches the requested combination.

    Raised before any data is touched when the (model class, link, prior)
    combination has no registered routine.

    Attributes:
        model_class: Name of the requested model class
        link: Name of the requested link, if any
        prior: Name of the requested prior, if any
    """

    def __init__(
        self,
        message: str,
        model_class: str | None = None,
        link: str | None = None,
        prior: str | None = None,
    ):
        super().__init__(message)
        self.model_class = model_class
        self.link = link
        self.prior = prior


class UnsupportedLinkError(DispatchError):
    """
    A link function is not part of the model class's family.

    Raised when a result carrying a link its model class cannot invert
    reaches prediction.
    """
    pass


class NumericalError(PyRegressionError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class FitError(NumericalError):
    """
    The frequentist solver could not produce a fit.

    Raised for rank-deficient design matrices and for solver failures
    (non-convergence, perfect separation, linear algebra errors). The
    solver's own exception, when there is one, is chained as __cause__.

    Attributes:
        reason: Short machine-readable cause ('rank_deficient',
            'not_converged', 'solver_failed', 'nonfinite')
        rank: Numerical rank of the design matrix, if computed
        expected_rank: Expected rank (number of columns)
    """

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.rank = rank
        self.expected_rank = expected_rank


class SamplerError(NumericalError):
    """
    The MCMC sampler produced unusable draws.

    Attributes:
        parameter: Name of the first parameter with non-finite draws
        n_nonfinite: Number of non-finite values in that parameter
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        n_nonfinite: int | None = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.n_nonfinite = n_nonfinite
