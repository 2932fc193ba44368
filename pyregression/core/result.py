"""
Generic result envelope for all pyregression fits.

Both fitting paths wrap their payload in Result: the frequentist path
stores an opaque fitted-model handle, the Bayesian path stores the
posterior draws. The envelope carries the shared metadata (timing,
backend, warnings) so the result containers do not repeat it.

Design decisions:
    - Generic over payload P for type safety
    - info dict for flexible metadata (converged, divergences, dispersion)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for a single fit.

    Type Parameters:
        P: The payload type (FittedModel or PosteriorSamples)

    Attributes:
        params: The payload produced by the backend
        info: Structured metadata (method, convergence, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> # Frequentist fit
        >>> Result(
        ...     params=fitted_model,
        ...     info={'method': 'irls', 'converged': True},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='statsmodels_glm'
        ... )

        >>> # Bayesian fit
        >>> Result(
        ...     params=posterior_samples,
        ...     info={'method': 'nuts', 'divergences': 0},
        ...     timing={'total_seconds': 4.2, 'sample': 4.1},
        ...     backend_name='numpyro_nuts'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
