"""Relman command line interface."""
