"""Tableside - table lifecycle service for restaurant point-of-sale"""

__version__ = "1.0.0"
