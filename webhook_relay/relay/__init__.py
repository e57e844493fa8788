"""Receive pipeline, forwarding, summarizers and query service."""
