"""
Indicator Registry.

Usage:
    from indicators import get_indicator
    bb = get_indicator("BOLLINGER", period=20, multiplier=2.0)
    band = bb.push(close_price)
"""

from indicators.base import Indicator
from indicators.bollinger import BandValue, RollingBandIndicator

# Registry: maps indicator type string to class
_REGISTRY = {
    "BOLLINGER": RollingBandIndicator,
}


def get_indicator(indicator_type: str, **params) -> Indicator:
    """
    Factory function to create an indicator by type string.

    Args:
        indicator_type: one of the registered type strings (e.g., "BOLLINGER")
        **params: indicator-specific parameters (e.g., period=20)

    Returns:
        Fresh Indicator instance (no shared state between calls)

    Raises:
        ValueError: if indicator_type is not recognized
        ConfigurationError: if params are outside their valid ranges
    """
    cls = _REGISTRY.get(indicator_type.upper())
    if cls is None:
        valid = ", ".join(_REGISTRY.keys())
        raise ValueError(f"Unknown indicator type '{indicator_type}'. Valid: {valid}")
    return cls(**params)


def list_indicators():
    """Return list of available indicator type strings."""
    return list(_REGISTRY.keys())


__all__ = ["BandValue", "Indicator", "RollingBandIndicator", "get_indicator", "list_indicators"]
