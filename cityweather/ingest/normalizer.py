"""Normalizer: reconciles provider field spellings into DailyForecast records.

The daily endpoint reports ``tmin``/``tmax`` while the next-hours endpoint
reports a single ``temp2m``, and several other fields have two spellings.
Each canonical field takes the first usable alias, falling back to 0, so the
loose provider shape never leaks past this module.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from cityweather.errors import UpstreamError
from cityweather.models.forecast import DailyForecast, ForecastWindow

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 4

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "rain_probability": ("probarain", "probrain"),
    "humidity": ("rh2m", "humidity"),
    "pressure": ("pmer", "pressure"),
    "wind_speed": ("wind10m", "wind_speed"),
    "wind_gust": ("gust10m", "wind_gust"),
    "wind_direction": ("dirwind10m", "wind_direction"),
    "weather_code": ("weather", "weather_code"),
}

TIMESTAMP_ALIASES = ("datetime", "date")


def normalize(raw: Mapping[str, Any]) -> DailyForecast:
    """Convert one raw provider day into a fully populated DailyForecast."""
    temperature = _temperature(raw)
    tmin = _number(raw.get("tmin"))
    tmax = _number(raw.get("tmax"))

    values = {name: _first_number(raw, aliases) for name, aliases in FIELD_ALIASES.items()}

    return DailyForecast(
        date=_date(raw),
        temperature=temperature,
        tmin=tmin if tmin is not None else temperature,
        tmax=tmax if tmax is not None else temperature,
        humidity=values["humidity"],
        pressure=values["pressure"],
        wind_speed=values["wind_speed"],
        wind_gust=values["wind_gust"],
        wind_direction=values["wind_direction"],
        weather_code=int(values["weather_code"]),
        rain_probability=values["rain_probability"],
    )


def build_window(
    raw_days: Iterable[Mapping[str, Any]], limit: int = DEFAULT_WINDOW_DAYS
) -> ForecastWindow:
    """Normalize the first ``limit`` raw days in provider order. Never padded."""
    window: list[DailyForecast] = []
    for raw in raw_days:
        if len(window) >= limit:
            break
        window.append(normalize(raw))
    return tuple(window)


def _temperature(raw: Mapping[str, Any]) -> float:
    temp2m = _number(raw.get("temp2m"))
    if temp2m is not None:
        return temp2m
    tmin = _number(raw.get("tmin"))
    tmax = _number(raw.get("tmax"))
    if tmin is not None and tmax is not None:
        return (tmin + tmax) / 2
    return 0.0


def _first_number(raw: Mapping[str, Any], aliases: tuple[str, ...]) -> float:
    for key in aliases:
        value = _number(raw.get(key))
        if value is not None:
            return value
    return 0.0


def _number(value: Any) -> float | None:
    """Coerce a provider value to float; None when absent or unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _date(raw: Mapping[str, Any]) -> str:
    for key in TIMESTAMP_ALIASES:
        value = raw.get(key)
        if not isinstance(value, str):
            continue
        # "2026-10-19T01:00:00+0200" -> "2026-10-19"
        try:
            return date.fromisoformat(value.split("T")[0][:10]).isoformat()
        except ValueError:
            logger.warning("Provider day with unparseable %s: %r", key, value)
    raise UpstreamError("Malformed forecast payload: day without a valid timestamp")
