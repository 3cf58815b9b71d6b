"""Logging, scratch directory and validation utilities."""
