"""
Core infrastructure for pyregression.

This module provides shared abstractions and utilities used by the
regression submodule.

Key components:
    protocols: FittedModel protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    config: SolverConfig, SamplerConfig
    random: KeyStream (reseedable PRNG keys for Bayesian fits)
    timing: Timer
"""

from pyregression.core.protocols import FittedModel
from pyregression.core.result import Result
from pyregression.core.config import SolverConfig, SamplerConfig
from pyregression.core.random import KeyStream
from pyregression.core.exceptions import (
    PyRegressionError,
    ValidationError,
    SchemaError,
    DispatchError,
    UnsupportedLinkError,
    NumericalError,
    FitError,
    SamplerError,
)

__all__ = [
    # Protocols
    "FittedModel",
    # Result
    "Result",
    # Configuration
    "SolverConfig",
    "SamplerConfig",
    "KeyStream",
    # Exceptions
    "PyRegressionError",
    "ValidationError",
    "SchemaError",
    "DispatchError",
    "UnsupportedLinkError",
    "NumericalError",
    "FitError",
    "SamplerError",
]
