"""Shared fixtures for rook-reset tests."""

import json

import pytest


class FakeStore:
    """In-memory stand-in for EtcdStore that records every call."""

    def __init__(self, records=None):
        self.records = dict(records or {})
        self.calls = []

    def get(self, key):
        self.calls.append(("get", key))
        return self.records.get(key)

    def put(self, key, value):
        self.calls.append(("put", key))
        self.records[key] = value


def record(name, **metadata):
    """Encoded resource with the given extra metadata fields."""
    return json.dumps({"metadata": {"name": name, **metadata}}).encode()


@pytest.fixture
def fake_store():
    return FakeStore()
