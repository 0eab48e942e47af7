"""
Text-to-speech providers, voice registry and artifact stores.

    - voices.py: Voice and VoiceRegistry
    - provider.py: BaseTTSProvider, SynthResult, create_provider()
    - providers/: simulation, free streaming and paid API providers
    - store.py: BaseArtifactStore, AudioArtifact, create_store()
    - storage.py: DirectoryArtifactStore (files + memo index)
    - cache.py: CacheArtifactStore (TTL cache, no index)
"""
