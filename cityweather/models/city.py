"""City registry data models."""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class CityInfo:
    insee: str
    name: str
    zipcode: str
    population: int

    def to_dict(self) -> dict:
        return asdict(self)
