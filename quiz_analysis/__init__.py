"""
Quiz Analysis Engine.

Ranks quiz responses against the endings of a versioned analysis engine.
"""

__version__ = "0.1.0"
