"""Webhook relay: signed inbound webhooks, storage, forwarding and inspection."""

__version__ = "0.5.0"
