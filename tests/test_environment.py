"""Tests for the EnvironmentalModel value types."""

import math
from datetime import date

import pytest
from pydantic import ValidationError

from timetoburn.domain.environment import (
    MAX_SNOW_AGE_DAYS,
    EnvironmentalModel,
    Season,
    SeasonalFactors,
    SnowConditions,
    SnowType,
    TerrainType,
    WaterBodySize,
    WaterBodyType,
    WaterProximity,
)


class TestDefaults:
    def test_default_model_is_neutral(self) -> None:
        env = EnvironmentalModel()
        assert env.altitude_meters == 0.0
        assert env.snow.coverage_pct == 0.0
        assert math.isinf(env.water.distance_meters)
        assert env.terrain.uv_multiplier == 1.0
        assert env.season.uv_multiplier == 1.0
        assert env.cloud_cover_pct == 0.0
        assert env.has_water_nearby is False

    def test_model_is_frozen(self) -> None:
        env = EnvironmentalModel()
        with pytest.raises(ValidationError):
            env.altitude_meters = 100.0


class TestClamping:
    def test_negative_altitude_clamped_to_zero(self) -> None:
        assert EnvironmentalModel(altitude_meters=-50).altitude_meters == 0.0

    def test_nan_altitude_clamped_to_zero(self) -> None:
        assert EnvironmentalModel(altitude_meters=float("nan")).altitude_meters == 0.0

    def test_snow_coverage_clamped_to_percentage(self) -> None:
        assert SnowConditions(coverage_pct=140).coverage_pct == 100.0
        assert SnowConditions(coverage_pct=-5).coverage_pct == 0.0

    def test_snow_depth_and_age_never_negative(self) -> None:
        snow = SnowConditions(depth_cm=-3, age_days=-2)
        assert snow.depth_cm == 0.0
        assert snow.age_days == 0

    def test_cloud_cover_clamped(self) -> None:
        assert EnvironmentalModel(cloud_cover_pct=250).cloud_cover_pct == 100.0

    def test_nan_water_distance_means_no_water(self) -> None:
        water = WaterProximity(distance_meters=float("nan"), body_type=WaterBodyType.LAKE)
        assert math.isinf(water.distance_meters)

    def test_negative_water_distance_clamped_to_zero(self) -> None:
        assert WaterProximity(distance_meters=-10).distance_meters == 0.0

    def test_day_of_year_clamped(self) -> None:
        assert SeasonalFactors(day_of_year=0).day_of_year == 1
        assert SeasonalFactors(day_of_year=400).day_of_year == 366

    @pytest.mark.parametrize(
        "value, expected",
        [(math.inf, 366), (-math.inf, 1), (math.nan, 1), (10**400, 366), (-(10**400), 1)],
    )
    def test_day_of_year_non_finite(self, value: float, expected: int) -> None:
        assert SeasonalFactors(day_of_year=value).day_of_year == expected

    @pytest.mark.parametrize(
        "value, expected",
        [(math.inf, MAX_SNOW_AGE_DAYS), (-math.inf, 0), (math.nan, 0), (10**400, MAX_SNOW_AGE_DAYS)],
    )
    def test_snow_age_non_finite(self, value: float, expected: int) -> None:
        assert SnowConditions(age_days=value).age_days == expected

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_snow_depth_non_finite(self, value: float) -> None:
        assert SnowConditions(depth_cm=value).depth_cm == 0.0

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan, 10**400])
    def test_altitude_non_finite(self, value: float) -> None:
        assert EnvironmentalModel(altitude_meters=value).altitude_meters == 0.0

    def test_non_finite_nested_fields_clamped(self) -> None:
        env = EnvironmentalModel(
            altitude_meters=math.inf,
            snow=SnowConditions(depth_cm=math.inf, age_days=math.inf, coverage_pct=math.inf),
            season=SeasonalFactors(day_of_year=-math.inf),
            cloud_cover_pct=-math.inf,
        )
        assert env.snow.coverage_pct == 100.0
        assert env.cloud_cover_pct == 0.0
        assert env.season.day_of_year == 1


class TestFactorTables:
    def test_snow_reflection(self) -> None:
        assert SnowType.FRESH.reflection_factor == 0.8
        assert SnowType.PACKED.reflection_factor == 0.6
        assert SnowType.MELTING.reflection_factor == 0.4
        assert SnowType.ICY.reflection_factor == 0.7
        assert SnowType.NONE.reflection_factor == 0.0

    def test_water_reflection_and_size(self) -> None:
        assert WaterBodyType.OCEAN.reflection_factor == 0.25
        assert WaterBodyType.POOL.reflection_factor == 0.12
        assert WaterBodySize.SMALL.multiplier == 0.5
        assert WaterBodySize.MASSIVE.multiplier == 1.25
        assert WaterProximity().size is WaterBodySize.LARGE

    def test_terrain_and_season(self) -> None:
        assert TerrainType.ARCTIC.uv_multiplier == 1.20
        assert TerrainType.FOREST.uv_multiplier == 0.95
        assert Season.WINTER.uv_multiplier == 0.5
        assert Season.UNKNOWN.uv_multiplier == 1.0


class TestSeasonFromDate:
    def test_meteorological_seasons(self) -> None:
        assert SeasonalFactors.from_date(date(2026, 1, 15)).season is Season.WINTER
        assert SeasonalFactors.from_date(date(2026, 4, 15)).season is Season.SPRING
        assert SeasonalFactors.from_date(date(2026, 7, 15)).season is Season.SUMMER
        assert SeasonalFactors.from_date(date(2026, 10, 15)).season is Season.AUTUMN

    def test_day_of_year(self) -> None:
        assert SeasonalFactors.from_date(date(2026, 2, 1)).day_of_year == 32

    def test_solstice_and_equinox_flags(self) -> None:
        assert SeasonalFactors.from_date(date(2026, 12, 21)).is_winter_solstice
        assert SeasonalFactors.from_date(date(2026, 6, 20)).is_summer_solstice
        assert SeasonalFactors.from_date(date(2026, 9, 22)).is_equinox
        ordinary = SeasonalFactors.from_date(date(2026, 5, 5))
        assert not (ordinary.is_equinox or ordinary.is_summer_solstice or ordinary.is_winter_solstice)
