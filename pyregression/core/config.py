"""
Per-call configuration for solvers and samplers.

There are no configuration files or environment variables: every knob
is a field on one of these frozen dataclasses, passed to fitmodel().
Defaults reproduce the behaviour of a plain fitmodel() call.
"""

from __future__ import annotations

from dataclasses import dataclass

from pyregression.core.exceptions import ValidationError


@dataclass(frozen=True)
class SolverConfig:
    """Settings for the frequentist solver.

    Attributes:
        tol: Convergence tolerance handed to the IRLS / Newton solver.
        max_iter: Maximum solver iterations.
    """
    tol: float = 1e-8
    max_iter: int = 100

    def __post_init__(self) -> None:
        if not self.tol > 0:
            raise ValidationError(f"tol: must be positive, got {self.tol}")
        if self.max_iter <= 0:
            raise ValidationError(f"max_iter: must be positive, got {self.max_iter}")


@dataclass(frozen=True)
class SamplerConfig:
    """Settings for the NUTS sampler.

    Attributes:
        num_warmup: Adaptation steps. None means min(sim_size, 1000).
        target_accept_prob: Step-size adaptation target, in (0, 1).
        num_chains: Chains run sequentially; draws are pooled, so the
            posterior holds num_chains * sim_size draws per parameter.
        progress_bar: Show numpyro's progress bar.
    """
    num_warmup: int | None = None
    target_accept_prob: float = 0.8
    num_chains: int = 1
    progress_bar: bool = False

    def __post_init__(self) -> None:
        if self.num_warmup is not None and self.num_warmup < 0:
            raise ValidationError(
                f"num_warmup: must be non-negative, got {self.num_warmup}"
            )
        if not 0.0 < self.target_accept_prob < 1.0:
            raise ValidationError(
                f"target_accept_prob: must lie in (0, 1), got {self.target_accept_prob}"
            )
        if self.num_chains <= 0:
            raise ValidationError(
                f"num_chains: must be positive, got {self.num_chains}"
            )

    def warmup_for(self, sim_size: int) -> int:
        """Number of warmup steps to use for a run of sim_size draws."""
        if self.num_warmup is not None:
            return self.num_warmup
        return min(sim_size, 1000)
