"""Generators for derived collections and sample property data."""
