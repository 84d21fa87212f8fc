"""Utility functions for serpbot."""
