"""
DAYFLOW Planner API - Energy Pattern Tests
"""

from datetime import datetime, timezone

from dayflow.scheduling.energy import DEFAULT_ENERGY_PATTERN, analyze_energy_pattern


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 10, hour, minute, tzinfo=timezone.utc)


class TestAnalyzeEnergyPattern:

    def test_no_history_gives_default(self):
        pattern = analyze_energy_pattern([])
        assert pattern == DEFAULT_ENERGY_PATTERN
        assert pattern.type == "Standard"
        assert pattern.peak == "09:00-11:00"
        assert pattern.low == "14:00-16:00"
        assert pattern.secondary_peak == "19:00-21:00"

    def test_default_is_not_shared(self):
        pattern = analyze_energy_pattern([])
        pattern.peak = "01:00-02:00"
        assert DEFAULT_ENERGY_PATTERN.peak == "09:00-11:00"

    def test_densest_hour_becomes_peak(self):
        pattern = analyze_energy_pattern([at(10), at(10, 30), at(10, 45), at(15), at(15)])
        assert pattern.type == "Analyzed"
        assert pattern.peak == "10:00-12:00"
        assert pattern.low == "14:00-16:00"
        assert pattern.secondary_peak == "19:00-21:00"

    def test_afternoon_peak_gets_morning_secondary(self):
        pattern = analyze_energy_pattern([at(16), at(16), at(9)])
        assert pattern.peak == "16:00-18:00"
        assert pattern.secondary_peak == "09:00-11:00"

    def test_tie_goes_to_earliest_hour(self):
        pattern = analyze_energy_pattern([at(18), at(8), at(18), at(8)])
        assert pattern.peak == "08:00-10:00"

    def test_hours_outside_day_are_ignored(self):
        pattern = analyze_energy_pattern([at(3), at(3), at(23), at(7)])
        assert pattern.peak == "07:00-09:00"

    def test_only_night_completions_give_default(self):
        assert analyze_energy_pattern([at(2), at(23), None]) == DEFAULT_ENERGY_PATTERN

    def test_late_peak_stays_inside_the_day(self):
        pattern = analyze_energy_pattern([at(22)])
        assert pattern.peak == "22:00-24:00"
