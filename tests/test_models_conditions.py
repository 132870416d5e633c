"""Tests for rock, code and result models."""

from datetime import timedelta

import pytest
from pydantic import TypeAdapter, ValidationError

from crag_conditions.models.codes import (
    CurrentlyWetDangerous,
    PerfectTemp,
    ReadyInHours,
    ReasonCode,
    Severity,
    VeryHighWind,
    WarningCode,
    WetSlippery,
)
from crag_conditions.models.conditions import RatingCategory, WetnessInfo, Window
from crag_conditions.models.rock import RockType, TemperatureBand


class TestRockType:
    """Tests for rock type parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("granite", RockType.GRANITE),
            ("  Sandstone ", RockType.SANDSTONE),
            ("LIMESTONE", RockType.LIMESTONE),
            ("marble", RockType.UNKNOWN),
            ("", RockType.UNKNOWN),
            (None, RockType.UNKNOWN),
            (RockType.BASALT, RockType.BASALT),
        ],
    )
    def test_parse(self, value, expected):
        """Test that anything unrecognized maps to unknown."""
        assert RockType.parse(value) == expected


class TestTemperatureBand:
    """Tests for the TemperatureBand model."""

    def test_midpoint_and_half_width(self):
        band = TemperatureBand(min_c=6, max_c=24)
        assert band.midpoint == 15
        assert band.half_width == 9

    def test_contains_edges(self):
        band = TemperatureBand(min_c=5, max_c=20)
        assert band.contains(5)
        assert band.contains(20)
        assert not band.contains(20.1)


class TestRatingCategory:
    """Tests for rating ordering."""

    def test_ordering(self):
        """Test that ratings compare by rank, not alphabetically."""
        assert RatingCategory.POOR < RatingCategory.OK < RatingCategory.GOOD
        assert RatingCategory.GOOD < RatingCategory.GREAT < RatingCategory.EXCELLENT
        assert RatingCategory.EXCELLENT >= RatingCategory.GREAT
        assert not RatingCategory.OK > RatingCategory.GOOD

    def test_rank(self):
        assert RatingCategory.POOR.rank == 0
        assert RatingCategory.EXCELLENT.rank == 4

    def test_sorted(self):
        ratings = [RatingCategory.GREAT, RatingCategory.POOR, RatingCategory.GOOD]
        assert sorted(ratings) == [
            RatingCategory.POOR,
            RatingCategory.GOOD,
            RatingCategory.GREAT,
        ]

    def test_parse(self):
        assert RatingCategory.parse("Great") == RatingCategory.GREAT
        with pytest.raises(ValueError):
            RatingCategory.parse("superb")

    def test_serializes_as_name(self):
        """Test that ratings serialize to their lowercase value."""
        assert RatingCategory.GOOD.value == "good"


class TestCodes:
    """Tests for structured reason and warning codes."""

    def test_reason_discriminator(self):
        """Test that the kind tag selects the reason type."""
        reason = TypeAdapter(ReasonCode).validate_python(
            {"kind": "ready_in_hours", "hours": 3}
        )
        assert isinstance(reason, ReadyInHours)
        assert reason.hours == 3

    def test_warning_discriminator(self):
        """Test that the kind tag selects the warning type."""
        warning = TypeAdapter(WarningCode).validate_python(
            {"kind": "currently_wet_dangerous", "rock_type": "sandstone"}
        )
        assert isinstance(warning, CurrentlyWetDangerous)
        assert warning.rock_type == RockType.SANDSTONE
        assert warning.severity == Severity.CRITICAL

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(ReasonCode).validate_python({"kind": "nice_weather"})

    def test_serialized_codes_carry_parameters(self):
        """Test that a presentation layer gets the kind and typed values."""
        assert PerfectTemp(temp_c=18.0).model_dump(mode="json") == {
            "kind": "perfect_temp",
            "temp_c": 18.0,
        }
        assert VeryHighWind(wind_kph=70).model_dump(mode="json") == {
            "kind": "very_high_wind",
            "severity": "critical",
            "wind_kph": 70.0,
        }

    def test_default_severities(self):
        assert WetSlippery().severity == Severity.WARNING
        assert VeryHighWind(wind_kph=50).severity == Severity.CRITICAL

    def test_negative_hours_rejected(self):
        with pytest.raises(ValidationError):
            ReadyInHours(hours=-1)


class TestWetnessInfo:
    """Tests for the WetnessInfo model."""

    def test_dry(self):
        dry = WetnessInfo.dry()
        assert dry.fraction == 0
        assert dry.is_wet is False
        assert dry.hours_to_dry is None

    def test_fraction_bounds(self):
        with pytest.raises(ValidationError):
            WetnessInfo(fraction=1.2)


class TestWindow:
    """Tests for the Window model."""

    def test_duration(self, base_time):
        window = Window(
            start_time=base_time + timedelta(hours=10),
            end_time=base_time + timedelta(hours=14),
            duration_hours=4,
            average_score=4.8,
            rating=RatingCategory.EXCELLENT,
        )
        assert window.duration == timedelta(hours=4)

    def test_zero_duration_rejected(self, base_time):
        with pytest.raises(ValidationError):
            Window(
                start_time=base_time,
                end_time=base_time,
                duration_hours=0,
                average_score=3.0,
                rating=RatingCategory.GOOD,
            )
