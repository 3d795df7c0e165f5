"""Tick loops, environment settings, health endpoints, job read validation and OpenAPI YAML rendering."""

__version__ = "0.1.0"