"""PresX: prescription and patient management service."""

__version__ = "0.1.0"
