"""Error taxonomy for the pricing engine."""

from __future__ import annotations


class PricingError(ValueError):
    """Base class for pricing engine failures."""


class ConfigurationError(PricingError):
    """A time window is malformed and can never match."""


class DomainError(PricingError):
    """A calculation was asked to operate outside its mathematical domain."""


class SurgeComputationError(DomainError):
    """Surge factor is undefined for the supplied demand/supply parameters."""


class InvariantViolation(PricingError):
    """A layer toggle would leave no enabled level default price."""


class InvalidRangeError(PricingError):
    """The queried time range is empty or inverted."""


__all__ = [
    "ConfigurationError",
    "DomainError",
    "InvalidRangeError",
    "InvariantViolation",
    "PricingError",
    "SurgeComputationError",
]
