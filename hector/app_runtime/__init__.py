"""Hector app runtime: action execution engine and app persistence."""
