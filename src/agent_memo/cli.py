"""
Command-Line Interface for agent-memo.

Synthesizes a single memo to a local file without running the HTTP
server, lists the voice table, or starts the server itself.

Usage Examples:
    # Synthesize with the configured TTS mode
    agent-memo --text "Deploy finished" --voice fred --out deploy.mp3

    # Positional text (same as above, default voice june)
    agent-memo "Deploy finished"

    # Dry-run (resolve voice and provider id, no synthesis)
    agent-memo "Test" --voice sally --dry-run --json

    # Show the voice table
    agent-memo --voices

    # Run the HTTP service
    agent-memo --serve --port 3000

Environment Variables:
    AGENT_MEMO_SETTINGS: Settings file (default config/settings.yaml)
    TTS_MODE: simulation, free-streaming or paid-api
    ELEVENLABS_API_KEY: Credential for paid-api mode
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from agent_memo.core.config import ConfigValidationError, Settings, resolve_settings
from agent_memo.core.errors import ErrorCode, MemoError, UnknownVoiceError
from agent_memo.core.logging import configure_logging, get_logger, info, set_request_id
from agent_memo.services.validators import validate_text
from agent_memo.tts.provider import PAID_API, create_provider, resolve_tts_mode
from agent_memo.tts.voices import Voice, VoiceRegistry


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="agent-memo CLI (text to spoken memo)")

    parser.add_argument("text_pos", nargs="?", help="Text to speak (positional)")
    parser.add_argument("--text", help="Text to speak")
    parser.add_argument("--voice", default="june", help="Voice key (default: june)")
    parser.add_argument("--out", default="memo.mp3", help="Output audio path")
    parser.add_argument("--settings", help="Settings file (overrides AGENT_MEMO_SETTINGS)")

    parser.add_argument("--voices", action="store_true", help="List available voices")
    parser.add_argument("--dry-run", action="store_true",
                        help="Resolve voice and provider without synthesis")
    parser.add_argument("--json", action="store_true", help="Print JSON summary")

    parser.add_argument("--serve", action="store_true", help="Run the HTTP service")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host for --serve")
    parser.add_argument("--port", type=int, help="Bind port for --serve (default: server.port)")

    return parser.parse_args(argv)


def _print_voices(registry: VoiceRegistry, as_json: bool) -> None:
    if as_json:
        print(json.dumps({"voices": registry.describe()}, ensure_ascii=False))
        return
    for voice in registry.list():
        alt = voice.alternate_provider_id or "-"
        print(f"{voice.key:<10} {voice.display_name:<10} {voice.gender.value:<7} "
              f"{voice.primary_provider_id}  {alt}")


def _provider_voice_id(mode: str, voice: Voice) -> Optional[str]:
    """Identifier the selected provider would receive for this voice."""
    if mode == PAID_API:
        return voice.primary_provider_id
    return voice.alternate_provider_id


async def _synthesize(settings: Settings, text: str, voice: Voice) -> bytes:
    provider = create_provider(settings)
    try:
        result = await provider.synthesize(text, voice)
    finally:
        await provider.aclose()
    return result.audio_bytes


def _serve(settings: Settings, host: str, port: Optional[int]) -> int:
    """Run uvicorn on an app built from the given settings."""
    import uvicorn

    from agent_memo.main import create_app

    config = settings.get_service_config()
    uvicorn.run(create_app(settings=settings), host=host, port=port or config.server.port)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for memo errors such as an unknown
        voice or a failed provider call, and for invalid settings).
    """
    args = _parse_args(argv)

    configure_logging()
    log = get_logger("agent-memo.cli")
    set_request_id(str(uuid4())[:12])

    settings = resolve_settings(args.settings)

    try:
        if args.serve:
            return _serve(settings, args.host, args.port)

        registry = VoiceRegistry.from_settings(settings)
        if args.voices:
            _print_voices(registry, args.json)
            return 0

        config = settings.get_service_config()
        text = validate_text(args.text or args.text_pos, config.memo.max_text_chars)
        voice = registry.resolve(args.voice)
        if voice is None:
            raise UnknownVoiceError(args.voice, registry.describe())
        mode = resolve_tts_mode(config.tts.mode)
        out_path = Path(args.out)

        if args.dry_run:
            payload = {
                "ok": True,
                "dry_run": True,
                "mode": mode,
                "voice": voice.key,
                "provider_voice_id": _provider_voice_id(mode, voice),
                "chars": len(text),
                "out": str(out_path),
            }
            if args.json:
                print(json.dumps(payload, ensure_ascii=False))
            else:
                info(log, "dry_run", mode=mode, voice=voice.key, chars=len(text))
                print(payload)
            print("DRY_RUN_OK")
            return 0

        info(log, "synth_start", mode=mode, voice=voice.key, chars=len(text), out=str(out_path))
        audio = asyncio.run(_synthesize(settings, text, voice))
    except MemoError as e:
        print(f"[{e.code}] {e.message}")
        return 1
    except ConfigValidationError as e:
        print(f"[{ErrorCode.CONFIG_ERROR}] {e}")
        return 1

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(audio)

    payload = {"ok": True, "dry_run": False, "mode": mode, "voice": voice.key,
               "out": str(out_path), "bytes": len(audio)}
    if args.json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)
    print("CLI_OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
