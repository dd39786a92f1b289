"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

METEO_CONCEPT_BASE_URL = "https://api.meteo-concept.com/api"


class CityConfig(BaseModel):
    model_config = {"extra": "forbid"}

    insee: str = Field(pattern=r"^\d{5,6}$")
    name: str = Field(min_length=1)
    zipcode: str = Field(min_length=5)
    population: int = Field(gt=0)


class ProviderConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = METEO_CONCEPT_BASE_URL
    # Empty means fall back to the API_KEY / API_TOKEN environment variables
    token: str = ""
    timeout_seconds: float = Field(default=10.0, gt=0.0)


class StorageConfig(BaseModel):
    model_config = {"extra": "forbid"}

    db_path: str = "data/weather.db"
    timeout_seconds: float = Field(default=5.0, gt=0.0)


class ForecastConfig(BaseModel):
    model_config = {"extra": "forbid"}

    window_days: int = Field(default=4, ge=1, le=14)


class AppConfig(BaseModel):
    model_config = {"extra": "forbid"}

    provider: ProviderConfig = ProviderConfig()
    storage: StorageConfig = StorageConfig()
    forecast: ForecastConfig = ForecastConfig()
    cities: list[CityConfig] = []
