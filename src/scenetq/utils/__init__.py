"""Utility functions for scenetq."""
