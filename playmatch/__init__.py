"""Playmatch - matching and proposals for pickup games."""

__version__ = "0.1.0"
