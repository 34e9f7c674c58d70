"""Consumers: matching logic and background processing."""
