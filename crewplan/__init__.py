"""Crew scheduling conflict detection and resolution engine."""

__version__ = "0.1.0"
