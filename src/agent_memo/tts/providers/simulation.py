"""
Simulation provider: silent mock audio, no network.

Each call waits a random delay from the configured window (default
1.0-2.0 s) and returns an 8-byte frame-like header followed by a run
of zero bytes. The payload length tracks a random clip duration in
[1.0, 2.0] seconds of 16-bit silence, scaled so that the longest clip
fills the 10,000 byte payload budget:

    payload = floor(10000 * duration / 2.0), rounded down to even

giving 5,000-10,000 payload bytes. The text is accepted and ignored.
"""
from __future__ import annotations

import asyncio
import random
from typing import Optional

from agent_memo.core.config import MemoServiceConfig
from agent_memo.core.logging import verbose
from agent_memo.tts.provider import SIMULATION, BaseTTSProvider, SynthResult
from agent_memo.tts.voices import Voice
from agent_memo.utils.timeit import timeit

MP3_HEADER = bytes([0xFF, 0xFB, 0x90, 0x00, 0xFF, 0xFA, 0x1C, 0x80])
PAYLOAD_BUDGET = 10_000
SAMPLE_BYTES = 2
MIN_DURATION_S = 1.0
MAX_DURATION_S = 2.0


def payload_length(duration_s: float) -> int:
    """Payload bytes for a clip of the given duration."""
    n = int(PAYLOAD_BUDGET * duration_s / MAX_DURATION_S)
    n = min(n, PAYLOAD_BUDGET)
    return n - (n % SAMPLE_BYTES)


class SimulationProvider(BaseTTSProvider):
    """Mock provider for tests and demos. Never fails for external reasons."""
    name = SIMULATION

    def __init__(self, config: MemoServiceConfig, rng: Optional[random.Random] = None):
        super().__init__(config)
        self._rng = rng or random.Random()

    async def synthesize(self, text: str, voice: Voice) -> SynthResult:
        sim = self.config.tts.simulation
        delay = self._rng.uniform(sim.min_delay_s, sim.max_delay_s)
        duration = self._rng.uniform(MIN_DURATION_S, MAX_DURATION_S)

        with timeit("simulated_latency") as t:
            if delay > 0:
                await asyncio.sleep(delay)

        audio = MP3_HEADER + bytes(payload_length(duration))
        verbose(
            self.logger, "simulated",
            voice=voice.key, duration=round(duration, 2), bytes=len(audio),
            seconds=t.timing.seconds,
        )
        return SynthResult(audio_bytes=audio, timings_s={"synthesize": t.timing.seconds})
