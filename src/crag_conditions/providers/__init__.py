"""Weather data providers."""

from crag_conditions.providers.base import WeatherProvider, ProviderError, RateLimitError
from crag_conditions.providers.openmeteo import OpenMeteoProvider

__all__ = [
    "WeatherProvider",
    "ProviderError",
    "RateLimitError",
    "OpenMeteoProvider",
]
