"""Freelancer match scoring and AI-assisted job matching."""

__version__ = "0.1.0"
