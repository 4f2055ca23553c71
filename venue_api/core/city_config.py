"""
City configuration: currency and range tables per (country, city)
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from venue_api.core.constants import VENUE_CAPACITY_RANGES
from venue_api.core.exceptions import ConfigNotFoundError, InvalidCityConfigError
from venue_api.services.ranges import validate_boundaries

logger = logging.getLogger(__name__)

Number = Union[int, float]


def _ascending(v: List[Number]) -> List[Number]:
    validate_boundaries(v)
    return v


class _ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PriceClassRanges(_ConfigModel):
    coke: List[Number] = Field(..., min_length=1)
    beer: List[Number] = Field(..., min_length=1)

    @field_validator("coke", "beer")
    @classmethod
    def validate_ascending(cls, v: List[Number]) -> List[Number]:
        return _ascending(v)


class CityConfig(_ConfigModel):
    country: str
    city: str
    currency: str = Field(..., min_length=3, max_length=3)
    price_class_ranges: PriceClassRanges
    entrance_fee_ranges: List[Number] = Field(..., min_length=1)

    @field_validator("entrance_fee_ranges")
    @classmethod
    def validate_ascending(cls, v: List[Number]) -> List[Number]:
        return _ascending(v)


class CityConfigFile(_ConfigModel):
    capacity_ranges: List[Number] = Field(default_factory=lambda: list(VENUE_CAPACITY_RANGES))
    cities: List[CityConfig] = []

    @field_validator("capacity_ranges")
    @classmethod
    def validate_ascending(cls, v: List[Number]) -> List[Number]:
        return _ascending(v)


def _key(country: Optional[str], city: Optional[str]) -> Tuple[str, str]:
    return ((country or "").strip().casefold(), (city or "").strip().casefold())


class CityConfigRegistry:
    """
    Read-only lookup of city configurations.

    Built once at startup and shared by every request.
    """

    def __init__(self, cities: List[CityConfig], capacity_ranges: Optional[List[Number]] = None):
        self._cities: Dict[Tuple[str, str], CityConfig] = {}
        for config in cities:
            key = _key(config.country, config.city)
            if key in self._cities:
                raise InvalidCityConfigError(
                    f"Duplicate city configuration for {config.country}/{config.city}"
                )
            self._cities[key] = config

        if capacity_ranges is None:
            capacity_ranges = list(VENUE_CAPACITY_RANGES)
        try:
            validate_boundaries(capacity_ranges)
        except ValueError as e:
            raise InvalidCityConfigError(str(e)) from e
        self.capacity_ranges = tuple(capacity_ranges)

    def get(self, country: Optional[str], city: Optional[str]) -> CityConfig:
        try:
            return self._cities[_key(country, city)]
        except KeyError:
            raise ConfigNotFoundError(country, city) from None

    def find(self, country: Optional[str], city: Optional[str]) -> Optional[CityConfig]:
        return self._cities.get(_key(country, city))

    def __len__(self) -> int:
        return len(self._cities)

    @classmethod
    def from_dict(cls, data: dict) -> "CityConfigRegistry":
        try:
            parsed = CityConfigFile.model_validate(data)
        except ValidationError as e:
            raise InvalidCityConfigError(
                "Invalid city configuration",
                details={"errors": e.errors(include_url=False, include_context=False)}
            ) from e
        return cls(parsed.cities, parsed.capacity_ranges)


def load_city_configs(path: Union[str, Path]) -> CityConfigRegistry:
    """
    Load and validate the city configuration file
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidCityConfigError(f"Could not read city configuration {path}: {e}") from e

    registry = CityConfigRegistry.from_dict(data)
    logger.info(f"Loaded {len(registry)} city configurations from {path}")
    return registry
