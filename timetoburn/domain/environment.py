"""EnvironmentalModel — immutable description of where and when UV is read.

The model carries the situational factors that amplify or dampen a raw
UV index: altitude, snow on the ground, nearby water, terrain, season and
cloud cover.  Values arrive from collaborators that may report garbage
(negative depths, NaN distances); every field is clamped into range
rather than rejected, so building an EnvironmentalModel never fails on
numeric input.

Factor tables are module constants and are the only place the numbers live.
"""

from __future__ import annotations

import math
from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, field_validator


# ── Helpers ──────────────────────────────────────────────────────────────────

def _finite_or(value: object, default: float) -> float:
    """NaN and None become *default*; integers too large for a float saturate to ±inf."""
    if value is None:
        return default
    try:
        number = float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf
    return default if math.isnan(number) else number


def _clamp_pct(value: object) -> float:
    number = _finite_or(value, 0.0)
    return min(max(number, 0.0), 100.0)


def _clamp_int(value: object, low: int, high: int, default: int) -> int:
    number = _finite_or(value, float(default))
    return int(min(max(number, low), high))


def _non_negative(value: object) -> float:
    number = _finite_or(value, 0.0)
    return number if number > 0.0 and not math.isinf(number) else 0.0


# ── Snow ─────────────────────────────────────────────────────────────────────

class SnowType(str, Enum):
    NONE = "none"
    FRESH = "fresh"
    PACKED = "packed"
    MELTING = "melting"
    ICY = "icy"

    @property
    def reflection_factor(self) -> float:
        return SNOW_REFLECTION[self]


SNOW_REFLECTION: dict[SnowType, float] = {
    SnowType.NONE: 0.0,
    SnowType.FRESH: 0.8,
    SnowType.PACKED: 0.6,
    SnowType.MELTING: 0.4,
    SnowType.ICY: 0.7,
}

MAX_SNOW_AGE_DAYS = 3650


class SnowConditions(BaseModel):
    has_recent_fall: bool = False
    depth_cm: float = Field(default=0.0, ge=0.0)
    coverage_pct: float = Field(default=0.0, ge=0.0, le=100.0)
    age_days: int = Field(default=0, ge=0, le=MAX_SNOW_AGE_DAYS)
    type: SnowType = SnowType.NONE

    model_config = {"frozen": True}

    @field_validator("depth_cm", mode="before")
    @classmethod
    def clamp_depth(cls, v: object) -> float:
        return _non_negative(v)

    @field_validator("coverage_pct", mode="before")
    @classmethod
    def clamp_coverage(cls, v: object) -> float:
        return _clamp_pct(v)

    @field_validator("age_days", mode="before")
    @classmethod
    def clamp_age(cls, v: object) -> int:
        return _clamp_int(v, 0, MAX_SNOW_AGE_DAYS, 0)


# ── Water ────────────────────────────────────────────────────────────────────

class WaterBodyType(str, Enum):
    NONE = "none"
    OCEAN = "ocean"
    SEA = "sea"
    LAKE = "lake"
    RIVER = "river"
    STREAM = "stream"
    POND = "pond"
    POOL = "pool"

    @property
    def reflection_factor(self) -> float:
        return WATER_REFLECTION[self]


WATER_REFLECTION: dict[WaterBodyType, float] = {
    WaterBodyType.NONE: 0.0,
    WaterBodyType.OCEAN: 0.25,
    WaterBodyType.SEA: 0.25,
    WaterBodyType.LAKE: 0.20,
    WaterBodyType.RIVER: 0.15,
    WaterBodyType.STREAM: 0.10,
    WaterBodyType.POND: 0.18,
    WaterBodyType.POOL: 0.12,
}


class WaterBodySize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    MASSIVE = "massive"

    @property
    def multiplier(self) -> float:
        return WATER_SIZE_MULTIPLIER[self]


WATER_SIZE_MULTIPLIER: dict[WaterBodySize, float] = {
    WaterBodySize.SMALL: 0.5,
    WaterBodySize.MEDIUM: 0.75,
    WaterBodySize.LARGE: 1.0,
    WaterBodySize.MASSIVE: 1.25,
}


class WaterProximity(BaseModel):
    """Distance to the nearest water body; infinite when there is none."""

    distance_meters: float = Field(default=math.inf, ge=0.0)
    body_type: WaterBodyType = WaterBodyType.NONE
    size: WaterBodySize = WaterBodySize.LARGE

    model_config = {"frozen": True}

    @field_validator("distance_meters", mode="before")
    @classmethod
    def clamp_distance(cls, v: object) -> float:
        return max(_finite_or(v, math.inf), 0.0)


# ── Terrain ──────────────────────────────────────────────────────────────────

class TerrainType(str, Enum):
    UNKNOWN = "unknown"
    COASTAL = "coastal"
    MOUNTAINOUS = "mountainous"
    URBAN = "urban"
    RURAL = "rural"
    DESERT = "desert"
    FOREST = "forest"
    GRASSLAND = "grassland"
    ARCTIC = "arctic"

    @property
    def uv_multiplier(self) -> float:
        return TERRAIN_MULTIPLIER[self]


TERRAIN_MULTIPLIER: dict[TerrainType, float] = {
    TerrainType.UNKNOWN: 1.0,
    TerrainType.COASTAL: 1.05,
    TerrainType.MOUNTAINOUS: 1.15,
    TerrainType.URBAN: 1.0,
    TerrainType.RURAL: 1.02,
    TerrainType.DESERT: 1.10,
    TerrainType.FOREST: 0.95,
    TerrainType.GRASSLAND: 1.03,
    TerrainType.ARCTIC: 1.20,
}


# ── Season ───────────────────────────────────────────────────────────────────

class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"
    UNKNOWN = "unknown"

    @property
    def uv_multiplier(self) -> float:
        return SEASON_MULTIPLIER[self]


SEASON_MULTIPLIER: dict[Season, float] = {
    Season.SPRING: 0.8,
    Season.SUMMER: 1.0,
    Season.AUTUMN: 0.7,
    Season.WINTER: 0.5,
    Season.UNKNOWN: 1.0,
}

_SEASON_BY_MONTH: dict[int, Season] = {
    12: Season.WINTER, 1: Season.WINTER, 2: Season.WINTER,
    3: Season.SPRING, 4: Season.SPRING, 5: Season.SPRING,
    6: Season.SUMMER, 7: Season.SUMMER, 8: Season.SUMMER,
    9: Season.AUTUMN, 10: Season.AUTUMN, 11: Season.AUTUMN,
}


class SeasonalFactors(BaseModel):
    season: Season = Season.UNKNOWN
    day_of_year: int = Field(default=1, ge=1, le=366)
    is_winter_solstice: bool = False
    is_summer_solstice: bool = False
    is_equinox: bool = False

    model_config = {"frozen": True}

    @field_validator("day_of_year", mode="before")
    @classmethod
    def clamp_day(cls, v: object) -> int:
        return _clamp_int(v, 1, 366, 1)

    @property
    def uv_multiplier(self) -> float:
        return self.season.uv_multiplier

    @classmethod
    def from_date(cls, day: date) -> SeasonalFactors:
        """Meteorological (northern-hemisphere) season for a calendar date."""
        month, dom = day.month, day.day
        return cls(
            season=_SEASON_BY_MONTH[month],
            day_of_year=day.timetuple().tm_yday,
            is_winter_solstice=month == 12 and dom in (21, 22),
            is_summer_solstice=month == 6 and dom in (20, 21),
            is_equinox=(month == 3 and dom in (20, 21)) or (month == 9 and dom in (22, 23)),
        )


# ── EnvironmentalModel ───────────────────────────────────────────────────────

class EnvironmentalModel(BaseModel):
    """Situational factors for one location fix at one point in time.

    Immutable.  The default instance is neutral: every reflective factor
    is zero and every multiplier is 1.0.
    """

    altitude_meters: float = Field(default=0.0, ge=0.0)
    snow: SnowConditions = Field(default_factory=SnowConditions)
    water: WaterProximity = Field(default_factory=WaterProximity)
    terrain: TerrainType = TerrainType.UNKNOWN
    season: SeasonalFactors = Field(default_factory=SeasonalFactors)
    cloud_cover_pct: float = Field(default=0.0, ge=0.0, le=100.0)

    model_config = {"frozen": True}

    @field_validator("altitude_meters", mode="before")
    @classmethod
    def clamp_altitude(cls, v: object) -> float:
        return _non_negative(v)

    @field_validator("cloud_cover_pct", mode="before")
    @classmethod
    def clamp_cloud_cover(cls, v: object) -> float:
        return _clamp_pct(v)

    @property
    def has_water_nearby(self) -> bool:
        return self.water.distance_meters < 1000.0
