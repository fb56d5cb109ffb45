"""Test doubles injected in place of real providers."""

from tests.unit.fakes.fake_compute_provider import FakeComputeProvider

__all__ = ["FakeComputeProvider"]
