"""Shared fixtures for StateToken tests."""

from datetime import datetime, timedelta, timezone

import pytest

from statetoken.auth.keys import KeyContext


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(scope="session")
def key_context():
    """One RSA keypair for the whole run; generation is slow."""
    return KeyContext.generate()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc))
