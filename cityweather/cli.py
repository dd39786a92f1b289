"""CLI entry point for the city weather engine."""

import argparse
import json
import logging

from cityweather.api import city_from_provider
from cityweather.config.loader import get_config_value, load_config, set_config_value
from cityweather.config.schema import AppConfig
from cityweather.errors import NotFound, WeatherEngineError
from cityweather.ingest.meteo_concept_client import MeteoConceptClient
from cityweather.models.common import is_valid_location
from cityweather.pipeline.weather_pipeline import WeatherPipeline
from cityweather.storage.database import open_database
from cityweather.storage.stores import CityRegistry, ForecastStore

DEFAULT_CONFIG = "ops/configs/default.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cityweather",
        description="City weather forecast engine",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument("--db", default=None, help="SQLite DB path (overrides config)")

    sub = parser.add_subparsers(dest="command")

    # weather
    weather_p = sub.add_parser("weather", help="Show the forecast window for a city")
    weather_p.add_argument("insee", help="INSEE code (5-6 digits)")
    weather_p.add_argument("--date", default=None, help="Override today (YYYY-MM-DD)")
    weather_p.add_argument("--json", action="store_true", help="Print raw JSON")

    # cities list / cities add
    cities_p = sub.add_parser("cities", help="City registry operations")
    cities_sub = cities_p.add_subparsers(dest="cities_command")
    cities_sub.add_parser("list", help="List registered cities")
    add_p = cities_sub.add_parser("add", help="Register a city from the provider")
    add_p.add_argument("insee", help="INSEE code (5-6 digits)")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    if args.db:
        config = set_config_value(config, "storage.db_path", args.db)

    if args.command == "weather":
        return _cmd_weather(config, args)
    elif args.command == "cities":
        return _cmd_cities(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _provider(config: AppConfig) -> MeteoConceptClient:
    return MeteoConceptClient(
        token=config.provider.token or None,
        base_url=config.provider.base_url,
        timeout=config.provider.timeout_seconds,
    )


def _open(config: AppConfig):
    return open_database(
        config.storage.db_path, config.cities, timeout=config.storage.timeout_seconds
    )


def _cmd_weather(config: AppConfig, args) -> int:
    if not is_valid_location(args.insee):
        print("Error: invalid INSEE code format")
        return 1
    conn = _open(config)
    try:
        registry = CityRegistry(conn)
        pipeline = WeatherPipeline(
            registry, ForecastStore(conn, lock=registry.lock), _provider(config), config
        )
        report = pipeline.get_weather(args.insee, today=args.date)
    except NotFound:
        print(f"City not found: {args.insee}")
        return 1
    except WeatherEngineError as e:
        print(f"Error: {e}")
        return 1
    finally:
        conn.close()

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return 0

    city = report.city
    stats = report.statistics
    source = "cache" if report.from_cache else "provider"
    print(f"{city.name} ({city.insee}, {city.zipcode}) | source: {source}")
    for day in report.window:
        print(
            f"  {day.date}: {day.temperature:.1f}° "
            f"({day.tmin:.0f}/{day.tmax:.0f}) rain {day.rain_probability:.0f}%"
        )
    print(
        f"Rain sum: {stats.rain_sum:.0f} | Avg temperature: "
        f"{stats.avg_temperature:.2f} | Days: {stats.day_count}"
    )
    return 0


def _cmd_cities(config: AppConfig, args) -> int:
    if args.cities_command not in ("list", "add"):
        print("Use: cities list | cities add <insee>")
        return 1
    conn = _open(config)
    try:
        registry = CityRegistry(conn)
        if args.cities_command == "list":
            for c in registry.list_cities():
                print(f"{c.insee}  {c.name}  {c.zipcode}  pop. {c.population}")
            return 0

        if not is_valid_location(args.insee):
            print("Error: invalid INSEE code format")
            return 1
        if registry.exists(args.insee):
            print(f"City already exists: {args.insee}")
            return 1
        info = _provider(config).fetch_city(args.insee)
        city = registry.add(city_from_provider(args.insee, info))
        print(f"Added {city.name} ({city.insee})")
        return 0
    except WeatherEngineError as e:
        print(f"Error: {e}")
        return 1
    finally:
        conn.close()


def _cmd_config(config: AppConfig, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except Exception as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
