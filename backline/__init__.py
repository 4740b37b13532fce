"""
backline: point-in-time rating and walk-forward backtest engine for
sports-betting spread and total models.
"""

__version__ = "0.1.0"
