"""
Response families for each model class.

Each Family defines:
- Which link tags the caller may supply (and the link used otherwise)
- The statsmodels family handed to the frequentist solver
- The observation likelihood declared inside Bayesian model programs
- Default prior hyperparameters h per prior family
- Response validation (binary, count, real)

Families are internal: callers pick a ModelClass tag, and
family_for() maps it to the matching Family.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray
import jax.numpy as jnp
import numpyro
import numpyro.distributions as dist
from statsmodels.genmod import families as sm_families

from pyregression.core.exceptions import ValidationError
from pyregression.regression.links import (
    Link, Identity, Logit, Probit, Cauchit, Cloglog, Log,
)
from pyregression.regression.models import (
    ModelClass, LinearRegression, LogisticRegression,
    PoissonRegression, NegBinomRegression,
)
from pyregression.regression.priors import (
    Prior, Ridge, Laplace, Cauchy, StudentT, Uniform,
)

# Keeps Bernoulli probabilities away from 0/1 for non-logit links
_PROB_EPS = 1e-7


class Family(ABC):
    """
    Response family for one model class.

    Attributes:
        allowed_links: Link types the caller may pass to fitmodel(). An
            empty tuple means the family takes no link tag and always
            uses its canonical link.
        default_h: Default InverseGamma(h, h) hyperparameter per prior.
    """

    allowed_links: tuple[type[Link], ...] = ()
    default_h: dict[type[Prior], float] = {}

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def canonical_link(self) -> Link:
        ...

    @property
    def least_squares(self) -> bool:
        """Whether the frequentist fit is ordinary least squares."""
        return False

    @property
    def estimates_dispersion(self) -> bool:
        """Whether a dispersion parameter must be estimated before the GLM fit."""
        return False

    def resolve_link(self, link: Link | None) -> Link:
        """Link actually used for a fit given the caller's tag."""
        if link is None:
            return self.canonical_link
        return link

    def supports_link(self, link: Link) -> bool:
        if not self.allowed_links:
            return type(link) is type(self.canonical_link)
        return isinstance(link, self.allowed_links)

    @abstractmethod
    def statsmodels_family(self, link: Link, dispersion: float | None = None):
        """statsmodels family instance for the frequentist solver."""
        ...

    @abstractmethod
    def likelihood(self, y, z, link: Link, scale) -> None:
        """Declare the observed-data likelihood inside a model program.

        Args:
            y: Observed response (JAX array), or None when sampling
                from the prior predictive.
            z: Linear predictor α + Xβ.
            link: Link tag whose inverse maps z to the response mean.
            scale: The program's scale hyperparameter λ.
        """
        ...

    @abstractmethod
    def check_response(self, y: NDArray) -> None:
        """Raise ValidationError if y is outside the family's support."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class Gaussian(Family):
    """Gaussian family for linear regression.

    Bayesian programs add a noise scale σ ~ InverseGamma(0.1, 0.1).
    """

    default_h = {
        Ridge: 0.01, Laplace: 0.01, Cauchy: 1.0, StudentT: 2.0, Uniform: 0.01,
    }

    @property
    def name(self) -> str:
        return 'gaussian'

    @property
    def canonical_link(self) -> Link:
        return Identity()

    @property
    def least_squares(self) -> bool:
        return True

    def statsmodels_family(self, link, dispersion=None):
        return sm_families.Gaussian(link=link.statsmodels_link())

    def likelihood(self, y, z, link, scale):
        sigma = numpyro.sample("sigma", dist.InverseGamma(0.1, 0.1))
        numpyro.sample("y", dist.Normal(link.linkinv_jax(z), sigma), obs=y)

    def check_response(self, y):
        # Any finite real response is valid
        return None


class Binomial(Family):
    """Bernoulli responses for logistic regression. A link tag is required."""

    allowed_links = (Logit, Probit, Cauchit, Cloglog)
    default_h = {
        Ridge: 0.1, Laplace: 0.1, Cauchy: 0.1, StudentT: 1.0, Uniform: 0.01,
    }

    @property
    def name(self) -> str:
        return 'binomial'

    @property
    def canonical_link(self) -> Link:
        return Logit()

    def statsmodels_family(self, link, dispersion=None):
        return sm_families.Binomial(link=link.statsmodels_link())

    def likelihood(self, y, z, link, scale):
        if isinstance(link, Logit):
            numpyro.sample("y", dist.Bernoulli(logits=z), obs=y)
        else:
            p = jnp.clip(link.linkinv_jax(z), _PROB_EPS, 1.0 - _PROB_EPS)
            numpyro.sample("y", dist.Bernoulli(probs=p), obs=y)

    def check_response(self, y):
        bad = ~np.isin(y, (0.0, 1.0))
        if np.any(bad):
            raise ValidationError(
                f"y: logistic regression requires a 0/1 response, "
                f"found {int(bad.sum())} other values (e.g. {y[bad][0]!r})"
            )


class Poisson(Family):
    """Poisson counts with log link."""

    default_h = {
        Ridge: 0.1, Laplace: 0.1, Cauchy: 1.0, StudentT: 2.0, Uniform: 1.0,
    }

    @property
    def name(self) -> str:
        return 'poisson'

    @property
    def canonical_link(self) -> Link:
        return Log()

    def statsmodels_family(self, link, dispersion=None):
        return sm_families.Poisson(link=link.statsmodels_link())

    def likelihood(self, y, z, link, scale):
        numpyro.sample("y", dist.Poisson(link.linkinv_jax(z)), obs=y)

    def check_response(self, y):
        _check_counts(y, 'Poisson')


class NegativeBinomial(Family):
    """NB2 counts with log link.

    Frequentist fits estimate the dispersion α first; Bayesian programs
    use λ as the concentration (1/α) of NegativeBinomial2.
    """

    default_h = {
        Ridge: 0.1, Laplace: 0.01, Cauchy: 1.0, StudentT: 1.0, Uniform: 0.1,
    }

    @property
    def name(self) -> str:
        return 'negative_binomial'

    @property
    def canonical_link(self) -> Link:
        return Log()

    @property
    def estimates_dispersion(self) -> bool:
        return True

    def statsmodels_family(self, link, dispersion=None):
        if dispersion is None:
            raise ValueError("negative binomial family requires an estimated dispersion")
        return sm_families.NegativeBinomial(
            link=link.statsmodels_link(), alpha=float(dispersion)
        )

    def likelihood(self, y, z, link, scale):
        numpyro.sample(
            "y",
            dist.NegativeBinomial2(mean=link.linkinv_jax(z), concentration=scale),
            obs=y,
        )

    def check_response(self, y):
        _check_counts(y, 'negative binomial')


def _check_counts(y: NDArray, label: str) -> None:
    bad = (y < 0) | (y != np.floor(y))
    if np.any(bad):
        raise ValidationError(
            f"y: {label} regression requires non-negative integer counts, "
            f"found {int(bad.sum())} other values (e.g. {y[bad][0]!r})"
        )


# =====================================================================
# Model class → family mapping
# =====================================================================

_FAMILIES: dict[type[ModelClass], Family] = {
    LinearRegression: Gaussian(),
    LogisticRegression: Binomial(),
    PoissonRegression: Poisson(),
    NegBinomRegression: NegativeBinomial(),
}


def family_for(model_class: ModelClass | type[ModelClass]) -> Family:
    """Family serving a model-class tag (instance or type).

    Raises:
        TypeError: If the argument is not a known model class.
    """
    cls = model_class if isinstance(model_class, type) else type(model_class)
    family = _FAMILIES.get(cls)
    if family is None:
        raise TypeError(f"No family for model class {cls.__name__}")
    return family
