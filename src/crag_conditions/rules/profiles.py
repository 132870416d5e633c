"""Rock profile table.

Scoring code looks rock-specific constants up here instead of branching on the
rock type, so adding a rock type is a new table entry and nothing else.
"""

from __future__ import annotations

from crag_conditions.models.rock import RockProfile, RockType, TemperatureBand

ROCK_PROFILES: dict[RockType, RockProfile] = {
    RockType.GRANITE: RockProfile(
        rock_type=RockType.GRANITE,
        optimal_temp=TemperatureBand(min_c=6, max_c=24),
        ideal_humidity_max=50,
        high_humidity_pct=65,
        drying_rate_hours_per_mm=0.4,  # Impermeable, dries fast
        cold_friction=True,
        dry_air_friction=True,
    ),
    RockType.SANDSTONE: RockProfile(
        rock_type=RockType.SANDSTONE,
        optimal_temp=TemperatureBand(min_c=5, max_c=20),
        ideal_humidity_max=45,
        high_humidity_pct=50,
        wet_is_dangerous=True,  # Holds break when saturated
        drying_rate_hours_per_mm=6.0,  # Very porous, slow drying
    ),
    RockType.LIMESTONE: RockProfile(
        rock_type=RockType.LIMESTONE,
        optimal_temp=TemperatureBand(min_c=10, max_c=25),
        ideal_humidity_max=70,
        high_humidity_pct=80,
        drying_rate_hours_per_mm=1.5,
    ),
    RockType.BASALT: RockProfile(
        rock_type=RockType.BASALT,
        optimal_temp=TemperatureBand(min_c=5, max_c=18),
        ideal_humidity_max=60,
        high_humidity_pct=70,
        drying_rate_hours_per_mm=0.6,
    ),
    RockType.GNEISS: RockProfile(
        rock_type=RockType.GNEISS,
        optimal_temp=TemperatureBand(min_c=4, max_c=22),
        ideal_humidity_max=50,
        high_humidity_pct=60,
        drying_rate_hours_per_mm=0.4,
        cold_friction=True,
        dry_air_friction=True,
    ),
    RockType.QUARTZITE: RockProfile(
        rock_type=RockType.QUARTZITE,
        optimal_temp=TemperatureBand(min_c=5, max_c=20),
        ideal_humidity_max=50,
        high_humidity_pct=60,
        drying_rate_hours_per_mm=0.5,
    ),
}

# Conservative profile for unknown rock
GENERIC_PROFILE = RockProfile(
    rock_type=RockType.UNKNOWN,
    optimal_temp=TemperatureBand(min_c=5, max_c=20),
    ideal_humidity_max=60,
    high_humidity_pct=70,
    drying_rate_hours_per_mm=2.0,
)


def profile_for(rock_type: RockType | str | None) -> RockProfile:
    """Get the profile for a rock type.

    Total function: `unknown`, None and unrecognized names all return the
    generic profile.
    """
    return ROCK_PROFILES.get(RockType.parse(rock_type), GENERIC_PROFILE)
