"""Learning-step notation helpers.

Study settings store learning and relearning steps as bare minute counts,
while the memory model works with durations. Custom parameter blobs may also
carry the ``"<n><unit>"`` notation used by other FSRS front ends
(``"30s"``, ``"10m"``, ``"1h"``, ``"2d"``).
"""
from __future__ import annotations

import datetime as dt
import re
from typing import Iterable, Sequence, Union

StepValue = Union[int, float, str, dt.timedelta]

_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}
_STEP_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd])\s*$")

# Slack when matching a persisted gap against a configured step
STEP_MATCH_TOLERANCE = dt.timedelta(seconds=30)


def parse_step(step: StepValue) -> dt.timedelta:
    """Convert a step given in minutes or unit notation to a duration."""
    if isinstance(step, dt.timedelta):
        duration = step
    elif isinstance(step, bool):
        raise ValueError(f"Invalid learning step: {step!r}")
    elif isinstance(step, (int, float)):
        duration = dt.timedelta(minutes=step)
    elif isinstance(step, str):
        match = _STEP_PATTERN.match(step)
        if match is None:
            raise ValueError(f"Unrecognised step notation: {step!r}")
        value, unit = match.groups()
        duration = dt.timedelta(**{_UNITS[unit]: float(value)})
    else:
        raise ValueError(f"Invalid learning step: {step!r}")

    if duration < dt.timedelta(0):
        raise ValueError(f"Learning steps must not be negative: {step!r}")
    return duration


def to_step_durations(steps: Iterable[StepValue]) -> tuple[dt.timedelta, ...]:
    return tuple(parse_step(step) for step in steps)


def format_step(duration: dt.timedelta) -> str:
    """Render a duration in the compact ``10m`` notation."""
    seconds = duration.total_seconds()
    for unit, size in (("d", 86400), ("h", 3600), ("m", 60)):
        if seconds >= size and seconds % size == 0:
            return f"{int(seconds // size)}{unit}"
    if seconds % 60 == 0:
        return "0m"
    return f"{seconds:g}s"


def locate_step(gap: dt.timedelta | None, steps: Sequence[dt.timedelta]) -> int:
    """Return the index of the step a card is currently waiting on.

    The step position is not persisted, so it is recovered from the time
    between the last review and the due date: the furthest step that fits in
    that gap. Unknown gaps map to the first step. Repeated or descending step
    lengths cannot be told apart this way and resolve to the last matching
    position, so a card on such a schedule may skip ahead.
    """
    if gap is None or not steps:
        return 0

    index = 0
    for position, step in enumerate(steps):
        if step <= gap + STEP_MATCH_TOLERANCE:
            index = position
    return index
