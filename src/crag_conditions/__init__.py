"""Crag Conditions.

Rates rock climbing conditions from a weather forecast: per-hour friction
scores, structured reasons and warnings, and the best climbing windows.
"""

__version__ = "0.1.0"
