"""
Core infrastructure for agent-memo.

    - config.py: Settings loading, defaults and validation
    - errors.py: Error codes and exception hierarchy
    - metrics.py: Prometheus metrics
    - logging/: Structured logging
"""
