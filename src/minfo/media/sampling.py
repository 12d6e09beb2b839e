"""Screenshot timestamp sampling.

Sample points are spread evenly across the stream with a small random
jitter so repeated requests show different frames. Timestamps are
de-duplicated at millisecond resolution on a best-effort basis: very short
clips may still repeat a value once the nudge budget runs out.
"""

from __future__ import annotations

import math
import random
import time

DEFAULT_SAMPLE_COUNT = 8

# Keep capture seeks away from the very end of the stream
TAIL_MARGIN_SECONDS = 0.2

# Fraction of one interval used as the jitter amplitude
JITTER_FRACTION = 0.25

COLLISION_NUDGE_SECONDS = 0.137
MAX_COLLISION_NUDGES = 10


def _clamp(value: float, upper: float, duration: float) -> float:
    value = min(max(value, 0.0), upper)
    if value >= duration:
        value = math.nextafter(duration, 0.0)
    return value


def _millis(value: float) -> int:
    return int(value * 1000)


def sample_timestamps(
    duration: float,
    *,
    count: int = DEFAULT_SAMPLE_COUNT,
    rng: random.Random | None = None,
) -> tuple[float, ...]:
    """Pick capture timestamps for a stream.

    The duration is split into count + 1 equal intervals; sample i sits on
    the i-th interval boundary plus a jitter of up to a quarter interval in
    either direction, clamped to [0, duration - 0.2] (or [0, duration) for
    clips shorter than the margin).

    Clips of a few tenths of a second leave too little room to separate
    every sample, so several may clamp to 0.0 (a 0.3s clip typically yields
    about half as many distinct values as samples).

    Args:
        duration: Stream duration in seconds.
        count: Number of timestamps to produce.
        rng: Random source. None seeds a fresh generator from the clock.

    Returns:
        count timestamps in ascending sample order, each in [0, duration).

    Raises:
        ValueError: If duration is not a positive finite number.
    """
    if not (math.isfinite(duration) and duration > 0):
        raise ValueError(f"duration must be positive, got {duration}")
    if rng is None:
        rng = random.Random(time.time_ns())

    step = duration / (count + 1)
    upper = duration - TAIL_MARGIN_SECONDS
    if upper < 0:
        upper = duration
    jitter = step * JITTER_FRACTION
    if jitter <= 0:
        jitter = duration * 0.05

    used: set[int] = set()
    timestamps: list[float] = []
    for i in range(count):
        if duration < 1:
            base = duration * (i + 1) / (count + 1)
        else:
            base = step * (i + 1)
        value = _clamp(base + (rng.random() * 2 - 1) * jitter, upper, duration)

        nudges = 0
        while _millis(value) in used and nudges < MAX_COLLISION_NUDGES:
            value += COLLISION_NUDGE_SECONDS
            if value > upper:
                value = upper - COLLISION_NUDGE_SECONDS
            value = _clamp(value, upper, duration)
            nudges += 1

        used.add(_millis(value))
        timestamps.append(value)
    return tuple(timestamps)
