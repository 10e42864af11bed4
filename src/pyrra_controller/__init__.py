"""Synthesizes and reconciles Prometheus rules for Pyrra ServiceLevelObjectives."""

__version__ = "0.1.0"
