"""Test fakes for host integration testing."""

from tests.fakes.fake_host import FakeHost

__all__ = [
    "FakeHost",
]
