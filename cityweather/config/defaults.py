"""Default seed cities for an empty registry."""

from cityweather.config.schema import CityConfig

DEFAULT_CITIES: list[CityConfig] = [
    CityConfig(insee="75101", name="Paris 1er Arrondissement", zipcode="75001", population=16888),
    CityConfig(insee="75102", name="Paris 2e Arrondissement", zipcode="75002", population=22169),
    CityConfig(insee="75103", name="Paris 3e Arrondissement", zipcode="75003", population=34248),
    CityConfig(insee="69123", name="Lyon", zipcode="69000", population=515695),
    CityConfig(insee="13055", name="Marseille", zipcode="13000", population=861635),
    CityConfig(insee="31555", name="Toulouse", zipcode="31000", population=479553),
    CityConfig(insee="06088", name="Nice", zipcode="06000", population=343629),
    CityConfig(insee="44109", name="Nantes", zipcode="44000", population=309346),
    CityConfig(insee="67482", name="Strasbourg", zipcode="67000", population=280966),
    CityConfig(insee="34172", name="Montpellier", zipcode="34000", population=285121),
]
