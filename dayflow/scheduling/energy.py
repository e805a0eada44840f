"""
DAYFLOW Planner API - Energy Pattern Analyzer

Infers a user's daily energy windows from when they complete tasks.
Every record fed in is a completion, so per-hour success ratio reduces to
completion density. This is a heuristic ranking, not a statistical model.
"""

from collections import Counter
from datetime import datetime
from typing import Iterable, Optional

from dayflow.scheduling.schemas import EnergyPattern
from dayflow.scheduling.timeutils import format_window


HISTORY_LIMIT = 50
EARLIEST_HOUR = 6
LATEST_HOUR = 22
PEAK_WINDOW_HOURS = 2

LOW_WINDOW = "14:00-16:00"
MORNING_WINDOW = "09:00-11:00"
EVENING_WINDOW = "19:00-21:00"

DEFAULT_ENERGY_PATTERN = EnergyPattern(
    type="Standard",
    peak=MORNING_WINDOW,
    low=LOW_WINDOW,
    secondary_peak=EVENING_WINDOW,
)


def analyze_energy_pattern(completion_times: Iterable[Optional[datetime]]) -> EnergyPattern:
    """
    Build an EnergyPattern from completion timestamps.

    Only completions between 06:00 and 22:59 count. The densest hour
    becomes a two-hour peak window (ties go to the earliest hour). The
    secondary peak is the evening window for a morning peak and the
    morning window otherwise. No usable history gives the default pattern.
    """
    density = Counter(
        completed_at.hour
        for completed_at in completion_times
        if completed_at is not None and EARLIEST_HOUR <= completed_at.hour <= LATEST_HOUR
    )
    if not density:
        return DEFAULT_ENERGY_PATTERN.model_copy()

    peak_hour = min(density, key=lambda hour: (-density[hour], hour))
    peak_start = peak_hour * 60
    peak_end = (peak_hour + PEAK_WINDOW_HOURS) * 60

    return EnergyPattern(
        type="Analyzed",
        peak=format_window(peak_start, peak_end),
        low=LOW_WINDOW,
        secondary_peak=EVENING_WINDOW if peak_hour < 12 else MORNING_WINDOW,
    )
