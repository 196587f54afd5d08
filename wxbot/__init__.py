"""
Weather Bot package
Discord bot relaying OpenWeatherMap conditions and forecasts
"""

__version__ = "3.1.0"
