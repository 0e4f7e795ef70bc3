"""peridot: REST API for software provenance tracking."""

__version__ = "0.1.0"
