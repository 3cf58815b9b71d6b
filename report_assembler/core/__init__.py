"""Core orchestration, configuration and data model."""
