"""Module file discovery for asmdeps."""
