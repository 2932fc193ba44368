"""
Bayesian backend: No-U-Turn sampling with numpyro.

The backend runs a model program built by programs.regression_program
and converts the draws to PosteriorSamples. Divergent transitions are
counted and reported as result warnings; non-finite draws raise
SamplerError. Neither is retried.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any, Callable

import numpy as np
import jax.numpy as jnp
from numpyro.infer import MCMC, NUTS

from pyregression.core.config import SamplerConfig
from pyregression.core.exceptions import SamplerError
from pyregression.core.result import Result
from pyregression.core.timing import Timer
from pyregression.regression.design import FormulaDesign
from pyregression.regression.solution import PosteriorSamples

logger = logging.getLogger(__name__)


class NUTSBackend:
    """
    Backend sampling a model program with NUTS.

    Maps a FormulaDesign to a Result[PosteriorSamples].
    Chains run sequentially in the calling thread.
    """

    def __init__(self, config: SamplerConfig | None = None):
        self._config = config or SamplerConfig()

    @property
    def name(self) -> str:
        return 'numpyro_nuts'

    def solve(
        self,
        design: FormulaDesign,
        program: Callable[..., None],
        sim_size: int,
        rng_key: Any,
    ) -> Result[PosteriorSamples]:
        """
        Draw sim_size posterior samples per chain.

        Args:
            design: Formula design; X excludes the intercept column
            program: numpyro model taking (X, y)
            sim_size: Draws kept per chain
            rng_key: JAX PRNG key; the same key gives the same draws

        Returns:
            Result containing PosteriorSamples

        Raises:
            SamplerError: If any draw is non-finite
        """
        config = self._config
        num_warmup = config.warmup_for(sim_size)

        logger.debug(
            "NUTS: warmup=%d, samples=%d, chains=%d, target_accept=%.2f",
            num_warmup, sim_size, config.num_chains, config.target_accept_prob,
        )

        with Timer() as timer:
            kernel = NUTS(program, target_accept_prob=config.target_accept_prob)
            mcmc = MCMC(
                kernel,
                num_warmup=num_warmup,
                num_samples=sim_size,
                num_chains=config.num_chains,
                progress_bar=config.progress_bar,
                chain_method='sequential',
            )

            with timer.section('sample'):
                mcmc.run(
                    rng_key,
                    jnp.asarray(design.X),
                    y=jnp.asarray(design.y),
                    extra_fields=('diverging',),
                )

            with timer.section('collect'):
                raw = mcmc.get_samples(group_by_chain=False)
                diverging = np.asarray(mcmc.get_extra_fields()['diverging'])
                samples = PosteriorSamples.from_arrays(
                    {name: np.asarray(values) for name, values in raw.items()},
                    num_chains=config.num_chains,
                    divergences=int(diverging.sum()),
                )

        for name in samples.names:
            arr = samples[name]
            bad = int(np.sum(~np.isfinite(arr)))
            if bad:
                raise SamplerError(
                    f"sampler produced {bad} non-finite draws for {name!r}",
                    parameter=name,
                    n_nonfinite=bad,
                )

        warnings_list: list[str] = []
        if samples.divergences:
            message = (
                f"{samples.divergences} of {samples.n_draws} transitions diverged; "
                f"consider a larger target_accept_prob or a different prior"
            )
            warnings.warn(message, RuntimeWarning, stacklevel=3)
            warnings_list.append(message)

        info = {
            'method': 'nuts',
            'num_warmup': num_warmup,
            'num_samples': sim_size,
            'num_chains': config.num_chains,
            'divergences': samples.divergences,
        }

        return Result(
            params=samples,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
