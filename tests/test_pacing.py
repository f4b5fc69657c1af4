"""Pacing between batch items."""

import asyncio
import random
import time
from unittest.mock import AsyncMock, patch

import pytest

from pydantic import ValidationError as OptionsError

from paapi_search.request.options import AdditionalOptions
from paapi_search.utils.pacing import DEFAULT_MAX_JITTER_MS, compute_delay, pace


class _FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


class TestComputeDelay:
    def test_first_item_never_waits(self):
        assert compute_delay(0, 5000, jitter=True, max_jitter=500) == 0

    def test_fixed_delay(self):
        assert compute_delay(1, 200) == 200
        assert compute_delay(7, 200) == 200

    @pytest.mark.parametrize("delay", [0, None, -100])
    def test_non_positive_delay(self, delay):
        assert compute_delay(3, delay, jitter=True) == 0

    def test_jitter_bounds(self):
        assert compute_delay(1, 200, jitter=True, max_jitter=500, rng=_FixedRandom(0.0)) == 200
        assert compute_delay(1, 200, jitter=True, max_jitter=500, rng=_FixedRandom(0.999999)) == 699

    def test_jitter_default_bound(self):
        delay = compute_delay(1, 100, jitter=True, max_jitter=0, rng=_FixedRandom(0.5))
        assert delay == 100 + DEFAULT_MAX_JITTER_MS // 2

    def test_negative_jitter_bound_never_shortens_delay(self):
        delay = compute_delay(1, 200, jitter=True, max_jitter=-300, rng=_FixedRandom(0.5))
        assert delay == 200 + DEFAULT_MAX_JITTER_MS // 2

    def test_jitter_random_range(self):
        rng = random.Random(42)
        for _ in range(200):
            assert 200 <= compute_delay(2, 200, jitter=True, max_jitter=500, rng=rng) < 700


class TestPace:
    @patch("paapi_search.utils.pacing.asyncio.sleep", new_callable=AsyncMock)
    def test_no_sleep_for_first_item(self, mock_sleep):
        assert asyncio.run(pace(0, 200)) == 0
        mock_sleep.assert_not_called()

    @patch("paapi_search.utils.pacing.asyncio.sleep", new_callable=AsyncMock)
    def test_sleeps_in_seconds(self, mock_sleep):
        assert asyncio.run(pace(1, 200)) == 200
        mock_sleep.assert_awaited_once_with(0.2)

    def test_real_delay_duration(self):
        start = time.monotonic()
        asyncio.run(pace(1, 200))
        elapsed = time.monotonic() - start
        assert 0.19 <= elapsed < 0.6

    def test_does_not_block_event_loop(self):
        ticks = []

        async def ticker():
            for _ in range(5):
                ticks.append(time.monotonic())
                await asyncio.sleep(0.02)

        async def main():
            await asyncio.gather(pace(1, 150), ticker())

        asyncio.run(main())
        assert len(ticks) == 5


def test_negative_max_jitter_rejected_by_options():
    with pytest.raises(OptionsError):
        AdditionalOptions.model_validate({"maxJitter": -1})
