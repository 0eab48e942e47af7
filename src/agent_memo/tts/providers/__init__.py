"""
TTS provider implementations.

    - simulation.py: SimulationProvider (mock audio, no network)
    - edge.py: EdgeProvider (free streaming)
    - elevenlabs.py: ElevenLabsProvider (paid API)

Providers are imported lazily by agent_memo.tts.provider.create_provider().
"""
