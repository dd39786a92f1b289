"""Normalized forecast data models."""

from dataclasses import asdict, dataclass, field
from typing import TypeAlias

from cityweather.models.city import CityInfo


@dataclass(frozen=True)
class DailyForecast:
    date: str  # YYYY-MM-DD
    temperature: float = 0.0
    tmin: float = 0.0
    tmax: float = 0.0
    humidity: float = 0.0
    pressure: float = 0.0
    wind_speed: float = 0.0
    wind_gust: float = 0.0
    wind_direction: float = 0.0
    weather_code: int = 0
    rain_probability: float = 0.0

    def details(self) -> dict:
        """Every field except the date, as stored in the details blob."""
        data = asdict(self)
        data.pop("date")
        return data

    def to_dict(self) -> dict:
        return asdict(self)


# Today plus the following days, at most ``window_days`` entries.
ForecastWindow: TypeAlias = tuple[DailyForecast, ...]


@dataclass(frozen=True)
class Statistics:
    rain_sum: float
    avg_temperature: float
    day_count: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class StoredForecastRow:
    location: str
    date: str
    details: str  # JSON blob of DailyForecast.details()


@dataclass(frozen=True)
class WeatherReport:
    city: CityInfo
    window: ForecastWindow
    statistics: Statistics
    from_cache: bool = field(default=False, compare=False)

    def to_dict(self) -> dict:
        return {
            "city": self.city.to_dict(),
            "forecast": [day.to_dict() for day in self.window],
            "statistics": self.statistics.to_dict(),
        }
