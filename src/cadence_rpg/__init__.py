"""Cadence RPG - a two-actor combat timeline engine."""

__version__ = "0.1.0"
