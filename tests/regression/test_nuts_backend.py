"""
NUTS backend tests.

Tests the sampler failure paths directly on NUTSBackend: non-finite
draws raise SamplerError, and divergent transitions are counted,
warned about and recorded on the result.
"""

import numpy as np
import pytest
import jax.numpy as jnp
import numpyro
import numpyro.distributions as dist

from pyregression import KeyStream, SamplerConfig
from pyregression.core.exceptions import SamplerError
from pyregression.regression.backends.nuts import NUTSBackend
from pyregression.regression.design import FormulaDesign


def nan_program(X, y=None):
    b = numpyro.sample('b', dist.Normal(0.0, 1.0))
    numpyro.deterministic('scaled', b * jnp.nan)


def funnel_program(X, y=None):
    v = numpyro.sample('v', dist.Normal(0.0, 3.0))
    numpyro.sample('x', dist.Normal(0.0, jnp.exp(v / 2.0)).expand([5]).to_event(1))


@pytest.fixture
def design(linear_data):
    return FormulaDesign.build("y ~ x1", linear_data, drop_intercept=True)


class TestNonFiniteDraws:

    def test_raises_sampler_error(self, design):
        backend = NUTSBackend(SamplerConfig(num_warmup=50))
        with pytest.raises(SamplerError) as excinfo:
            backend.solve(design, nan_program, 100, KeyStream(3).next_key())
        assert excinfo.value.parameter == 'scaled'
        assert excinfo.value.n_nonfinite == 100


class TestDivergences:

    def test_counted_and_warned(self, design):
        backend = NUTSBackend(SamplerConfig(num_warmup=200, target_accept_prob=0.05))
        with pytest.warns(RuntimeWarning, match="transitions diverged"):
            result = backend.solve(design, funnel_program, 500, KeyStream(5).next_key())

        divergences = result.info['divergences']
        assert divergences > 0
        assert result.params.divergences == divergences
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith(f"{divergences} of 500 transitions diverged")
        assert np.all(np.isfinite(result.params['v']))

    def test_clean_run_has_no_warnings(self, design):
        def normal_program(X, y=None):
            numpyro.sample('b', dist.Normal(0.0, 1.0))

        result = NUTSBackend(SamplerConfig(num_warmup=100)).solve(
            design, normal_program, 200, KeyStream(7).next_key()
        )
        assert result.info['divergences'] == 0
        assert result.warnings == ()
        assert result.params.n_draws == 200
