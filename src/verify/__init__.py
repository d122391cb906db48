"""Determinism verification for asmdeps."""
