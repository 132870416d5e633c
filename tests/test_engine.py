"""Tests for the conditions engine entry points."""

import math
from datetime import timedelta

import pytest

from crag_conditions.models.conditions import RatingCategory
from crag_conditions.models.rock import RockType
from crag_conditions.models.weather import CurrentReading, WeatherSnapshot
from crag_conditions.rules.engine import (
    ConditionsEngine,
    ConditionsOptions,
    compute_conditions,
    find_optimal_windows,
)


def _with_current(snapshot: WeatherSnapshot, **changes) -> WeatherSnapshot:
    current = snapshot.current.model_copy(update=changes)
    return snapshot.model_copy(update={"current": current})


class TestComputeConditions:
    """Tests for compute_conditions."""

    def test_dry_granite(self, sample_snapshot):
        """Test granite, which has long dried from the morning shower."""
        result = compute_conditions(sample_snapshot, RockType.GRANITE)

        assert result.rock_type == RockType.GRANITE
        assert result.rating == RatingCategory.EXCELLENT
        assert result.friction_score == pytest.approx(4.806, abs=1e-3)
        assert result.friction_rating == 5
        assert result.is_dry is True
        assert result.drying_time_hours is None
        assert [r.kind for r in result.reasons] == ["perfect_temp", "ideal_humidity"]
        assert result.warnings == []

    def test_damp_sandstone(self, sample_snapshot):
        """Test sandstone four hours after 1 mm: still damp, so capped."""
        result = compute_conditions(sample_snapshot, RockType.SANDSTONE)

        assert result.rating == RatingCategory.POOR
        assert result.friction_score <= 1.5
        assert result.is_dry is False
        assert result.drying_time_hours == 1
        assert "wet_dangerous" in [w.kind for w in result.warnings]

    def test_series_and_daily(self, sample_snapshot):
        result = compute_conditions(sample_snapshot, "granite")
        assert len(result.hourly) == 48
        assert len(result.daily) == 2
        assert result.optimal_windows is None

    def test_night_hours_filtered(self, sample_snapshot):
        options = ConditionsOptions(include_night_hours=False)
        result = compute_conditions(sample_snapshot, "granite", options=options)
        assert len(result.hourly) == 32
        assert all(4 <= h.time.hour <= 19 for h in result.hourly)

    def test_windows_on_request(self, sample_snapshot):
        options = ConditionsOptions(include_windows=True)
        result = compute_conditions(sample_snapshot, "granite", options=options)
        assert result.optimal_windows
        best = result.optimal_windows[0]
        assert best.rating >= RatingCategory.GOOD

    def test_currently_raining(self, sample_snapshot):
        snapshot = _with_current(sample_snapshot, precip_mm=2.0)
        result = compute_conditions(snapshot, RockType.SANDSTONE)

        assert result.rating == RatingCategory.POOR
        assert result.friction_score <= 1.5
        assert "currently_wet_dangerous" in [w.kind for w in result.warnings]
        # 0.8 h left from the morning shower plus 2 mm * 6 h/mm * 0.8
        assert result.drying_time_hours == 11

    def test_raining_after_rainy_series(self, make_reading, base_time):
        """Test that light rain now keeps the drying time of the whole spell."""
        weather = dict(temp_c=12.0, humidity_pct=55.0)
        hourly = [make_reading(hour=i, precip_mm=5.0, **weather) for i in range(6)]
        snapshot = WeatherSnapshot(
            current=CurrentReading(
                time=base_time + timedelta(hours=5, minutes=30),
                wind_kph=5.0,
                precip_mm=0.1,
                **weather,
            ),
            hourly=hourly,
        )
        result = compute_conditions(snapshot, RockType.LIMESTONE)

        anchor = result.hourly[5]
        assert anchor.wetness.hours_to_dry == pytest.approx(45.0)
        assert result.drying_time_hours == 45
        ready = [r for r in result.reasons if r.kind == "ready_in_hours"]
        assert ready[0].hours == 45

    def test_raining_after_dry_spell_adds_residual(self, make_reading, base_time):
        weather = dict(temp_c=12.0, humidity_pct=55.0)
        hourly = [
            make_reading(hour=0, precip_mm=2.0, **weather),
            make_reading(hour=1, **weather),
        ]
        snapshot = WeatherSnapshot(
            current=CurrentReading(
                time=base_time + timedelta(hours=1, minutes=15),
                wind_kph=5.0,
                precip_mm=1.0,
                **weather,
            ),
            hourly=hourly,
        )
        result = compute_conditions(snapshot, RockType.LIMESTONE)
        # 2 h left of the first 3 h, then 1.5 h for the new millimetre
        assert result.drying_time_hours == 4
        assert result.is_dry is False

    def test_unknown_rock(self, sample_snapshot):
        result = compute_conditions(sample_snapshot, "marble")
        assert result.rock_type == RockType.UNKNOWN

    def test_deterministic(self, sample_snapshot):
        options = ConditionsOptions(include_windows=True)
        first = compute_conditions(sample_snapshot, "limestone", 3.0, options)
        second = compute_conditions(sample_snapshot, "limestone", 3.0, options)
        assert first == second

    def test_current_between_hours(self, sample_snapshot, base_time):
        """Test that the latest hour before the observation sets the wetness."""
        snapshot = _with_current(sample_snapshot, time=base_time + timedelta(hours=9, minutes=30))
        result = compute_conditions(snapshot, RockType.SANDSTONE)
        anchor = result.hourly[9]
        assert result.is_dry is False
        assert result.drying_time_hours == math.ceil(anchor.wetness.hours_to_dry)

    def test_current_outside_series_uses_seed(self, sample_snapshot, base_time):
        snapshot = _with_current(sample_snapshot, time=base_time + timedelta(days=10))
        dry = compute_conditions(snapshot, RockType.GRANITE)
        wet = compute_conditions(snapshot, RockType.GRANITE, recent_precip_mm=5.0)
        assert dry.is_dry is True
        assert wet.is_dry is False

    def test_current_without_time_uses_seed(self, make_reading):
        """Test that an untimed reading is not tied to the first forecast hour."""
        snapshot = WeatherSnapshot(
            current=CurrentReading(temp_c=15.0, humidity_pct=40.0, wind_kph=5.0),
            hourly=[make_reading(hour=0, precip_mm=3.0), make_reading(hour=1)],
        )
        assert compute_conditions(snapshot, RockType.SANDSTONE).is_dry is True

        wet = compute_conditions(snapshot, RockType.SANDSTONE, recent_precip_mm=1.0)
        # 1 mm * 6 h/mm * 0.8 for warm, dry air
        assert wet.drying_time_hours == 5

    def test_invalid_current_uses_anchor_hour(self, sample_snapshot):
        snapshot = _with_current(sample_snapshot, temp_c=float("nan"))
        result = compute_conditions(snapshot, RockType.GRANITE)
        assert result.friction_score == pytest.approx(result.hourly[12].friction_score)
        assert result.rating == result.hourly[12].rating

    def test_invalid_current_without_hours(self, sample_coordinates):
        snapshot = WeatherSnapshot(
            current=CurrentReading(temp_c=float("nan"), humidity_pct=40.0),
            latitude=sample_coordinates.latitude,
            longitude=sample_coordinates.longitude,
        )
        result = compute_conditions(snapshot, "granite")
        assert result.friction_score == 0.0
        assert result.friction_rating == 0
        assert result.rating == RatingCategory.POOR
        assert result.reasons == []
        assert result.warnings == []
        assert result.hourly == []

    def test_no_hourly_series(self):
        """Test that a current reading alone is enough."""
        snapshot = WeatherSnapshot(
            current=CurrentReading(temp_c=18.0, humidity_pct=40.0, wind_kph=10.0)
        )
        result = compute_conditions(snapshot, RockType.GRANITE)
        assert result.rating == RatingCategory.GREAT
        assert result.friction_rating == 4
        assert result.hourly == []
        assert result.daily == []

    def test_seed_without_series(self):
        snapshot = WeatherSnapshot(
            current=CurrentReading(temp_c=12.0, humidity_pct=55.0)
        )
        options = ConditionsOptions(hours_since_recent_precip=2.0)
        result = compute_conditions(snapshot, RockType.LIMESTONE, 5.0, options)
        assert result.is_dry is False
        assert result.drying_time_hours == 6
        assert "wet_slippery" in [w.kind for w in result.warnings]


class TestConditionsEngine:
    """Tests for ConditionsEngine configuration."""

    def test_min_rating_from_string(self):
        engine = ConditionsEngine(min_rating="great", max_windows=2)
        assert engine.min_rating == RatingCategory.GREAT
        assert engine.window_finder.min_rating == RatingCategory.GREAT

    def test_invalid_min_rating(self):
        with pytest.raises(ValueError):
            ConditionsEngine(min_rating="stellar")

    def test_find_windows(self, scenario_series, base_time):
        engine = ConditionsEngine()
        windows = engine.find_windows(scenario_series, RockType.GRANITE)
        assert len(windows) == 1
        assert windows[0].start_time == base_time + timedelta(hours=10)
        assert windows[0].duration_hours == 4

    def test_max_windows(self, make_reading):
        series = []
        for h in range(0, 20, 2):
            series.append(make_reading(hour=h))
            series.append(make_reading(hour=h + 1, wind_kph=60))
        engine = ConditionsEngine(max_windows=2)
        assert len(engine.find_windows(series, "granite")) == 2

    def test_engine_min_rating_filters(self, scenario_series):
        engine = ConditionsEngine(min_rating=RatingCategory.OK)
        windows = engine.find_windows(scenario_series, RockType.GRANITE)
        assert len(windows) == 1
        assert windows[0].duration_hours == 48


class TestFindOptimalWindows:
    """Tests for find_optimal_windows."""

    def test_scenario(self, scenario_series, base_time):
        windows = find_optimal_windows(scenario_series, RockType.GRANITE)
        assert len(windows) == 1
        assert windows[0].end_time == base_time + timedelta(hours=14)
        assert windows[0].rating == RatingCategory.EXCELLENT

    def test_night_hours_excluded(self, scenario_series):
        windows = find_optimal_windows(
            scenario_series,
            RockType.GRANITE,
            min_rating=RatingCategory.OK,
            include_night_hours=False,
        )
        # 06:00-20:00 on both days
        assert [w.duration_hours for w in windows] == [15, 15]

    def test_wet_start_delays_window(self, scenario_series):
        """Test that a seed of rain keeps sandstone out of the morning run."""
        dry = find_optimal_windows(scenario_series, RockType.SANDSTONE, min_rating="ok")
        wet = find_optimal_windows(
            scenario_series, RockType.SANDSTONE, recent_precip_mm=5.0, min_rating="ok"
        )
        assert dry
        assert all(w.start_time > scenario_series[0].time for w in wet)
