"""
FastAPI REST API layer for agent-memo.

    - routes.py: Memo, voice, audio, health and metrics endpoints
    - schemas.py: Request/response Pydantic models
    - dependencies.py: Settings and service providers
"""
