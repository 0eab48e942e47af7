"""
Free streaming provider: Microsoft Edge read-aloud service.

No credentials are needed. Each voice must carry an alternate provider
id (an Edge neural voice name such as ``en-US-JennyNeural``), which is
sent as the ``voice`` query parameter alongside ``mkt``. The body is a
minimal SSML document with the text XML-escaped.

Request:
    POST <endpoint>?mkt=en-US&voice=en-US-JennyNeural
    Content-Type: application/ssml+xml
    X-Microsoft-EdgeTTS-OutputFormat: audio-24khz-48kbitrate-mono-mp3

    <speak version='1.0' xml:lang='en-US'><voice><speak>...</speak></voice></speak>
"""
from __future__ import annotations

import httpx

from agent_memo.core.errors import MissingVoiceMappingError, ProviderError
from agent_memo.core.logging import fail, verbose
from agent_memo.tts.provider import FREE_STREAMING, HttpTTSProvider, SynthResult
from agent_memo.tts.voices import Voice
from agent_memo.utils.text import build_ssml
from agent_memo.utils.timeit import timeit

OUTPUT_FORMAT = "audio-24khz-48kbitrate-mono-mp3"


class EdgeProvider(HttpTTSProvider):
    name = FREE_STREAMING

    def build_request(self, text: str, voice: Voice) -> httpx.Request:
        """
        Build the upstream request without sending it.

        Raises:
            MissingVoiceMappingError: If the voice has no Edge voice name.
        """
        if not voice.alternate_provider_id:
            raise MissingVoiceMappingError(voice.key, self.name)
        edge = self.config.tts.edge
        return self._get_client().build_request(
            "POST",
            edge.endpoint,
            params={"mkt": edge.market, "voice": voice.alternate_provider_id},
            headers={
                "Content-Type": "application/ssml+xml",
                "X-Microsoft-EdgeTTS-OutputFormat": OUTPUT_FORMAT,
            },
            content=build_ssml(text, edge.market).encode("utf-8"),
        )

    async def synthesize(self, text: str, voice: Voice) -> SynthResult:
        request = self.build_request(text, voice)

        with timeit("edge_request") as t:
            try:
                response = await self._get_client().send(request)
            except httpx.HTTPError as e:
                fail(self.logger, "upstream_unreachable", voice=voice.key, error=str(e))
                raise ProviderError("edge", None, str(e)) from e

        if not response.is_success:
            body = response.text
            fail(self.logger, "upstream_error", voice=voice.key, status=response.status_code, body=body[:200])
            raise ProviderError("edge", response.status_code, body)

        audio = response.content
        verbose(self.logger, "upstream_ok", voice=voice.key, status=response.status_code,
                bytes=len(audio), seconds=t.timing.seconds)
        return SynthResult(audio_bytes=audio, timings_s={"synthesize": t.timing.seconds})
