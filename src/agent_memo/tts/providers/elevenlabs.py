"""
Paid API provider: ElevenLabs text-to-speech.

Request:
    POST {base_url}/text-to-speech/{primary_provider_id}
    xi-api-key: <key>
    Content-Type: application/json
    Accept: audio/mpeg

    {"text": ..., "model_id": "eleven_monolingual_v1",
     "voice_settings": {"stability": 0.5, "similarity_boost": 0.75}}

A missing API key raises MissingCredentialsError before any request
is built.
"""
from __future__ import annotations

from typing import Any, Dict

import httpx

from agent_memo.core.errors import MissingCredentialsError, ProviderError
from agent_memo.core.logging import fail, verbose
from agent_memo.tts.provider import PAID_API, HttpTTSProvider, SynthResult
from agent_memo.tts.voices import Voice
from agent_memo.utils.timeit import timeit

VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.75}


class ElevenLabsProvider(HttpTTSProvider):
    name = PAID_API

    def payload(self, text: str) -> Dict[str, Any]:
        return {
            "text": text,
            "model_id": self.config.tts.elevenlabs.model_id,
            "voice_settings": dict(VOICE_SETTINGS),
        }

    def build_request(self, text: str, voice: Voice) -> httpx.Request:
        """
        Build the upstream request without sending it.

        Raises:
            MissingCredentialsError: If no API key is configured.
        """
        cfg = self.config.tts.elevenlabs
        if not cfg.api_key:
            raise MissingCredentialsError()
        return self._get_client().build_request(
            "POST",
            f"{cfg.base_url}/text-to-speech/{voice.primary_provider_id}",
            headers={
                "xi-api-key": cfg.api_key,
                "Content-Type": "application/json",
                "Accept": "audio/mpeg",
            },
            json=self.payload(text),
        )

    async def synthesize(self, text: str, voice: Voice) -> SynthResult:
        request = self.build_request(text, voice)

        with timeit("elevenlabs_request") as t:
            try:
                response = await self._get_client().send(request)
            except httpx.HTTPError as e:
                fail(self.logger, "upstream_unreachable", voice=voice.key, error=str(e))
                raise ProviderError("elevenlabs", None, str(e)) from e

        if not response.is_success:
            body = response.text
            fail(self.logger, "upstream_error", voice=voice.key, status=response.status_code, body=body[:200])
            raise ProviderError("elevenlabs", response.status_code, body)

        audio = response.content
        verbose(self.logger, "upstream_ok", voice=voice.key, status=response.status_code,
                bytes=len(audio), seconds=t.timing.seconds)
        return SynthResult(audio_bytes=audio, timings_s={"synthesize": t.timing.seconds})
