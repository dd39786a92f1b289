"""Summary statistics over a forecast window."""

from cityweather.models.forecast import ForecastWindow, Statistics


def summarize(window: ForecastWindow) -> Statistics:
    """Rain total, mean positive temperature and day count. Pure and total."""
    rain_sum = sum((day.rain_probability for day in window), 0.0)
    positive = [day.temperature for day in window if day.temperature > 0]
    avg_temperature = sum(positive) / len(positive) if positive else 0.0
    return Statistics(
        rain_sum=rain_sum,
        avg_temperature=avg_temperature,
        day_count=len(window),
    )
