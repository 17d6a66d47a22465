"""
Core configuration, logging and the analysis engine.
"""
