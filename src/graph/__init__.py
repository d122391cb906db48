"""Dependency graph construction for asmdeps."""
