"""Test factories for creating test data."""

from tests.factories.relay import SECRET, HitFactory, LinePayloadFactory, make_settings

__all__ = [
    "SECRET",
    "HitFactory",
    "LinePayloadFactory",
    "make_settings",
]
