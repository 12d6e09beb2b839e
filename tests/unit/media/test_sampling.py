"""Tests for screenshot timestamp sampling."""

import math
import random

import pytest

from minfo.media.sampling import DEFAULT_SAMPLE_COUNT, sample_timestamps


class TestSampleTimestamps:
    """Tests for sample_timestamps."""

    @pytest.mark.parametrize("duration", [0.05, 0.5, 3.0, 59.9, 7200.0])
    def test_values_within_stream(self, duration):
        """Every timestamp lies in [0, duration)."""
        timestamps = sample_timestamps(duration, rng=random.Random(7))

        assert len(timestamps) == DEFAULT_SAMPLE_COUNT
        assert all(0 <= t < duration for t in timestamps)

    @pytest.mark.parametrize("duration", [3.0, 10.0, 5400.0])
    def test_distinct_at_millisecond_resolution(self, duration):
        """Longer streams produce distinct millisecond timestamps."""
        for seed in range(20):
            timestamps = sample_timestamps(duration, rng=random.Random(seed))
            assert len({int(t * 1000) for t in timestamps}) == len(timestamps)

    def test_tail_margin(self):
        """Streams longer than the margin never seek into the last 0.2s."""
        for seed in range(20):
            timestamps = sample_timestamps(2.0, rng=random.Random(seed))
            assert max(timestamps) <= 1.8

    def test_spread_across_stream(self):
        """Samples stay near their evenly spaced anchors."""
        duration = 900.0
        step = duration / (DEFAULT_SAMPLE_COUNT + 1)
        timestamps = sample_timestamps(duration, rng=random.Random(1))

        for i, value in enumerate(timestamps):
            assert abs(value - step * (i + 1)) <= step * 0.25 + 1e-9

    def test_seeded_rng_is_reproducible(self):
        """The same seed yields the same timestamps."""
        first = sample_timestamps(120.0, rng=random.Random(42))
        second = sample_timestamps(120.0, rng=random.Random(42))
        assert first == second

    def test_custom_count(self):
        """The count argument controls the number of samples."""
        assert len(sample_timestamps(60.0, count=3, rng=random.Random(0))) == 3

    @pytest.mark.parametrize("duration", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_duration(self, duration):
        """Non-positive or non-finite durations raise ValueError."""
        with pytest.raises(ValueError):
            sample_timestamps(duration)

    def test_returns_tuple(self):
        """The sample set is an immutable tuple."""
        timestamps = sample_timestamps(90.5, rng=random.Random(3))
        assert isinstance(timestamps, tuple)
        assert len(timestamps) == DEFAULT_SAMPLE_COUNT

    def test_very_short_clip_may_repeat(self):
        """A 0.3s clip still yields a full, in-range sample set."""
        for seed in range(20):
            timestamps = sample_timestamps(0.3, rng=random.Random(seed))
            assert len(timestamps) == DEFAULT_SAMPLE_COUNT
            assert all(0 <= t < 0.3 for t in timestamps)
