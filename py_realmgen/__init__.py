"""
Deterministic generation of tile-based feudal world maps.
"""

__version__ = "0.1.0"
