"""
Link function tags.

Each Link is an immutable marker that also carries its inverse link
g⁻¹(η) → μ in three forms: a NumPy transform used for prediction, a JAX
transform used inside Bayesian model programs, and the equivalent
statsmodels link used by the frequentist solver. One tag drives all
three paths.

References:
    McCullagh, P., & Nelder, J. A. (1989). Generalized Linear Models (2nd ed.)
    R Core Team. stats::make.link
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy import special
import jax.numpy as jnp
import jax.scipy.special as jsp_special
from jax.nn import sigmoid
from statsmodels.genmod.families import links as sm_links


class Link(ABC):
    """Abstract link function g(μ) mapping mean to linear predictor."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def linkinv(self, eta: NDArray) -> NDArray:
        """g⁻¹(η) → μ."""
        ...

    @abstractmethod
    def linkinv_jax(self, eta: jnp.ndarray) -> jnp.ndarray:
        """g⁻¹(η) on JAX arrays, differentiable for NUTS."""
        ...

    @abstractmethod
    def statsmodels_link(self) -> sm_links.Link:
        """Equivalent statsmodels link instance."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


@dataclass(frozen=True, repr=False)
class Identity(Link):
    """Identity link: g(μ) = μ. Canonical for linear regression."""

    @property
    def name(self) -> str:
        return 'identity'

    def linkinv(self, eta: NDArray) -> NDArray:
        return np.array(eta, dtype=np.float64)

    def linkinv_jax(self, eta):
        return eta

    def statsmodels_link(self):
        return sm_links.Identity()


@dataclass(frozen=True, repr=False)
class Logit(Link):
    """Logit link: g(μ) = log(μ/(1-μ)). Canonical for logistic regression."""

    @property
    def name(self) -> str:
        return 'logit'

    def linkinv(self, eta: NDArray) -> NDArray:
        return special.expit(eta)

    def linkinv_jax(self, eta):
        return sigmoid(eta)

    def statsmodels_link(self):
        return sm_links.Logit()


@dataclass(frozen=True, repr=False)
class Probit(Link):
    """Probit link: g(μ) = Φ⁻¹(μ)."""

    @property
    def name(self) -> str:
        return 'probit'

    def linkinv(self, eta: NDArray) -> NDArray:
        return special.ndtr(eta)

    def linkinv_jax(self, eta):
        return jsp_special.ndtr(eta)

    def statsmodels_link(self):
        return sm_links.Probit()


@dataclass(frozen=True, repr=False)
class Cauchit(Link):
    """Cauchit link: g(μ) = tan(π(μ - ½)), the standard Cauchy quantile."""

    @property
    def name(self) -> str:
        return 'cauchit'

    def linkinv(self, eta: NDArray) -> NDArray:
        return 0.5 + np.arctan(eta) / np.pi

    def linkinv_jax(self, eta):
        return 0.5 + jnp.arctan(eta) / jnp.pi

    def statsmodels_link(self):
        return sm_links.Cauchy()


@dataclass(frozen=True, repr=False)
class Cloglog(Link):
    """Complementary log-log link: g(μ) = log(-log(1 - μ))."""

    @property
    def name(self) -> str:
        return 'cloglog'

    def linkinv(self, eta: NDArray) -> NDArray:
        return -np.expm1(-np.exp(eta))

    def linkinv_jax(self, eta):
        return -jnp.expm1(-jnp.exp(eta))

    def statsmodels_link(self):
        return sm_links.CLogLog()


@dataclass(frozen=True, repr=False)
class Log(Link):
    """Log link: g(μ) = log(μ). Canonical for Poisson and negative binomial."""

    @property
    def name(self) -> str:
        return 'log'

    def linkinv(self, eta: NDArray) -> NDArray:
        # Clip to prevent overflow
        eta = np.clip(eta, -500, 500)
        return np.exp(eta)

    def linkinv_jax(self, eta):
        return jnp.exp(eta)

    def statsmodels_link(self):
        return sm_links.Log()


# =====================================================================
# Link name → class mapping
# =====================================================================

_LINK_CLASSES: dict[str, type[Link]] = {
    'identity': Identity,
    'logit': Logit,
    'probit': Probit,
    'cauchit': Cauchit,
    'cloglog': Cloglog,
    'log': Log,
}


def resolve_link(link: str | Link) -> Link:
    """Resolve a link argument to a Link instance.

    Raises:
        ValueError: If string name is not recognized.
        TypeError: If argument is neither string nor Link.
    """
    if isinstance(link, Link):
        return link
    if isinstance(link, str):
        cls = _LINK_CLASSES.get(link.lower())
        if cls is None:
            valid = ', '.join(sorted(_LINK_CLASSES.keys()))
            raise ValueError(f"Unknown link: {link!r}. Valid links: {valid}")
        return cls()
    raise TypeError(f"link must be str or Link, got {type(link).__name__}")
