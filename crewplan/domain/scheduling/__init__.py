"""Crew scheduling domain."""
