"""Transcribes long-form audio by splitting it into service-sized segments."""

__version__ = "0.1.0"
