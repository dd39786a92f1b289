"""Error taxonomy for the weather engine. All errors are terminal for a request."""


class WeatherEngineError(Exception):
    """Base class for engine failures."""


class NotFound(WeatherEngineError):
    """Raised when a location is unknown to the city registry."""

    def __init__(self, location: str):
        super().__init__(f"City not found: {location}")
        self.location = location


class CityExists(WeatherEngineError):
    """Raised when adding a city that is already registered."""

    def __init__(self, location: str):
        super().__init__(f"City already exists: {location}")
        self.location = location


class UpstreamError(WeatherEngineError):
    """Raised when the weather provider is unreachable or returns bad data."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(WeatherEngineError):
    """Raised when a persistence read or write fails."""
