"""
profilebook - profile transformation and persistence core.
"""

__version__ = "1.0.0"
