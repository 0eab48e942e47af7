"""
Utility modules for agent-memo.

    - text.py: Log previews and speech-markup escaping
    - timeit.py: Timing context manager
"""
