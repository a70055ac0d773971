"""Pytest configuration and fixtures for flowrun tests."""

from typing import Any, Dict, List, Optional

import pytest

from flowrun import (
    EventEmitter,
    ExecutionContext,
    MemoryCredentialStore,
    ProviderInput,
    ProviderRegistry,
    WorkflowExecutor,
)

TEST_KEY_HEX = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"


class RecordingProvider:
    """Provider that records every call and returns a canned result."""

    def __init__(self, result: Any = None, fail_on: Optional[int] = None):
        self.result = result if result is not None else {"ok": True}
        self.fail_on = fail_on
        self.calls: List[ProviderInput] = []

    async def __call__(self, input: ProviderInput) -> Any:
        self.calls.append(input)
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise RuntimeError(f"provider call {self.fail_on} failed")
        return self.result


def trigger_node(node_id: str = "t", **extra: Any) -> Dict[str, Any]:
    return {"id": node_id, "type": "trigger", "appId": "manual", "name": "Trigger", **extra}


def action_node(
    node_id: str,
    app_id: str = "recorder",
    action_id: str = "run",
    config: Optional[Dict[str, Any]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    return {
        "id": node_id,
        "type": "action",
        "appId": app_id,
        "actionId": action_id,
        "config": config or {},
        **extra,
    }


def connect(*pairs: str) -> List[Dict[str, str]]:
    """Build connections from ``"a->b"`` strings."""
    connections = []
    for pair in pairs:
        source, target = pair.split("->")
        connections.append({"from": source, "to": target})
    return connections


def workflow(nodes: List[Dict[str, Any]], *pairs: str, **extra: Any) -> Dict[str, Any]:
    return {"nodes": nodes, "connections": connect(*pairs), **extra}


@pytest.fixture(autouse=True)
def encryption_key(monkeypatch):
    """Pin the credential encryption key for every test."""
    monkeypatch.setenv("CREDENTIAL_ENCRYPTION_KEY", TEST_KEY_HEX)
    return bytes.fromhex(TEST_KEY_HEX)


@pytest.fixture
def recorder():
    """A provider that records calls."""
    return RecordingProvider()


@pytest.fixture
def registry(recorder):
    """Built-in registry plus the recording provider under ``recorder``."""
    registry = ProviderRegistry()
    registry.register("recorder", recorder)
    return registry


@pytest.fixture
def credential_store():
    """Create an in-memory credential store."""
    return MemoryCredentialStore()


@pytest.fixture
def events():
    """Event emitter that collects every event."""
    emitter = EventEmitter()
    emitter.collected = []

    async def collect(event):
        emitter.collected.append(event)

    emitter.on(collect)
    return emitter


@pytest.fixture
def executor(registry, credential_store, events):
    """Create an executor wired to the test registry and store."""
    return WorkflowExecutor(registry, credential_store, events)


@pytest.fixture
def context():
    """Create a seeded execution context."""
    context = ExecutionContext.seeded(
        "t",
        {"user": {"name": "Ada", "tags": ["admin", "ops"]}, "count": 3, "active": True},
    )
    context.nodes["fetch"] = {"items": [{"id": 1}, {"id": 2}], "status": "ok"}
    context.variables["region"] = "eu"
    return context
