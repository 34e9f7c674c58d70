"""Outbound webhook delivery."""

from playmatch.webhooks.client import WebhookClient

__all__ = ["WebhookClient"]
