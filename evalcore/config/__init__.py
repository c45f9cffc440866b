"""
Configuration Module

Evaluation engine settings.
"""

from evalcore.config.settings import EvaluationSettings, get_settings

__all__ = [
    "EvaluationSettings",
    "get_settings",
]
