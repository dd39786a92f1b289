"""City weather HTTP API: FastAPI routes over the weather pipeline."""

import logging
import sqlite3
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from cityweather.config.defaults import DEFAULT_CITIES
from cityweather.config.loader import load_config
from cityweather.config.schema import AppConfig
from cityweather.errors import CityExists, NotFound, StorageError, UpstreamError
from cityweather.ingest.meteo_concept_client import MeteoConceptClient
from cityweather.models.city import CityInfo
from cityweather.models.common import is_valid_location
from cityweather.pipeline.weather_pipeline import WeatherPipeline
from cityweather.storage.database import open_database
from cityweather.storage.stores import CityRegistry, ForecastStore

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).parent.parent / "ops" / "configs" / "default.yaml"
DEFAULT_POPULATION = 1000


class CreateCityRequest(BaseModel):
    insee: str = Field(min_length=5)


def create_app(
    config: AppConfig | None = None,
    conn: sqlite3.Connection | None = None,
    provider: MeteoConceptClient | None = None,
) -> FastAPI:
    """Build the app. The connection is opened once here and shared by all requests."""
    if config is None:
        config = _default_config()
    if conn is None:
        conn = open_database(
            config.storage.db_path, config.cities, timeout=config.storage.timeout_seconds
        )
    if provider is None:
        provider = MeteoConceptClient(
            token=config.provider.token or None,
            base_url=config.provider.base_url,
            timeout=config.provider.timeout_seconds,
        )

    registry = CityRegistry(conn)
    store = ForecastStore(conn, lock=registry.lock)
    pipeline = WeatherPipeline(registry, store, provider, config)

    app = FastAPI(title="City Weather API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request data", "details": str(exc)},
        )

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.get("/")
    def root():
        return {"message": "City Weather API", "version": app.version}

    @app.get("/cities")
    def get_cities():
        """Registered cities ordered by name."""
        try:
            return [c.to_dict() for c in registry.list_cities()]
        except StorageError:
            logger.exception("Error fetching cities")
            raise HTTPException(status_code=500, detail="Failed to fetch cities")

    @app.get("/weather/{insee}")
    def get_weather(insee: str):
        """Forecast window for today plus the following days, with statistics."""
        if not is_valid_location(insee):
            raise HTTPException(status_code=400, detail="Invalid INSEE code format")
        try:
            return pipeline.get_weather(insee).to_dict()
        except NotFound:
            raise HTTPException(status_code=404, detail="City not found")
        except UpstreamError as e:
            logger.error("Upstream failure for %s: %s", insee, e)
            raise HTTPException(status_code=502, detail="Failed to fetch weather data")
        except StorageError:
            logger.exception("Storage failure for %s", insee)
            raise HTTPException(status_code=500, detail="Failed to fetch weather data")

    @app.post("/cities", status_code=201)
    def add_city(body: CreateCityRequest):
        """Register a city using the provider's description of it."""
        if not is_valid_location(body.insee):
            raise HTTPException(status_code=400, detail="Invalid request data")
        try:
            if registry.exists(body.insee):
                raise CityExists(body.insee)
            city = city_from_provider(body.insee, provider.fetch_city(body.insee))
            return registry.add(city).to_dict()
        except CityExists:
            raise HTTPException(status_code=409, detail="City already exists")
        except UpstreamError as e:
            logger.error("Upstream failure adding %s: %s", body.insee, e)
            raise HTTPException(status_code=502, detail=f"Failed to add city: {e}")
        except StorageError as e:
            logger.exception("Storage failure adding %s", body.insee)
            raise HTTPException(status_code=500, detail=f"Failed to add city: {e}")

    return app


def _default_config() -> AppConfig:
    """Shipped YAML config, or the built-in defaults when it is not installed."""
    if CONFIG_PATH.is_file():
        return load_config(CONFIG_PATH)
    logger.warning("Config %s not found, using built-in defaults", CONFIG_PATH)
    return AppConfig(cities=DEFAULT_CITIES)


def city_from_provider(insee: str, info: dict) -> CityInfo:
    """Fill a CityInfo from the provider's city object, with fallbacks."""
    code = str(info.get("insee") or insee)
    cp = info.get("cp")
    zipcode = str(cp) if cp else str(info.get("zipcode") or code[:5])
    population = info.get("population")
    if not isinstance(population, int) or isinstance(population, bool) or population <= 0:
        population = DEFAULT_POPULATION
    return CityInfo(
        insee=code,
        name=info.get("name") or "Unknown City",
        zipcode=zipcode,
        population=population,
    )
