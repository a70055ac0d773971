"""Tests for node dispatch and credential resolution."""

import pytest

from flowrun.core.dispatcher import CredentialResolver, NodeDispatcher
from flowrun.core.graph import NodeKind, WorkflowNode
from flowrun.utils.errors import (
    CredentialForbiddenError,
    CredentialInvalidError,
    CredentialNotFoundError,
)


def make_node(app_id="recorder", action_id="run", config=None, credential_id=None):
    return WorkflowNode(
        id="n1",
        kind=NodeKind.ACTION,
        app_id=app_id,
        action_id=action_id,
        config=config or {},
        name="Node 1",
        credential_id=credential_id,
    )


@pytest.mark.asyncio
async def test_dispatch_interpolates_config(registry, recorder, context):
    dispatcher = NodeDispatcher(registry)
    node = make_node(config={"greeting": "Hi {{trigger.user.name}}", "n": 1})

    result = await dispatcher.dispatch(node, "user-1", context)

    assert result == {"ok": True}
    call = recorder.calls[0]
    assert call.action_id == "run"
    assert call.config == {"greeting": "Hi Ada", "n": 1}
    assert call.credential is None
    assert node.config["greeting"] == "Hi {{trigger.user.name}}"


@pytest.mark.asyncio
async def test_unregistered_app_is_skipped(registry, context):
    dispatcher = NodeDispatcher(registry)

    result = await dispatcher.dispatch(make_node(app_id="crm", action_id="create"), "u", context)

    assert result == {"status": "skipped", "reason": "Executor not implemented for crm:create"}


@pytest.mark.asyncio
async def test_dispatch_passes_decrypted_credential(registry, recorder, credential_store, context):
    credential_store.add("user-1", {"token": "abc"}, credential_id="cred-1")
    dispatcher = NodeDispatcher(registry, credential_store)

    await dispatcher.dispatch(make_node(credential_id="cred-1"), "user-1", context)

    assert recorder.calls[0].credential == {"token": "abc"}


@pytest.mark.asyncio
async def test_credential_checked_before_provider_lookup(registry, context):
    """A bad credential fails even when the app has no provider."""
    dispatcher = NodeDispatcher(registry)

    with pytest.raises(CredentialNotFoundError):
        await dispatcher.dispatch(make_node(app_id="crm", credential_id="nope"), "u", context)


@pytest.mark.asyncio
async def test_provider_errors_propagate(registry, context):
    async def broken(input):
        raise ValueError("upstream down")

    registry.register("broken", broken)
    dispatcher = NodeDispatcher(registry)

    with pytest.raises(ValueError, match="upstream down"):
        await dispatcher.dispatch(make_node(app_id="broken"), "u", context)


class TestCredentialResolver:
    """Test ownership and validity checks."""

    @pytest.mark.asyncio
    async def test_not_found(self, credential_store):
        resolver = CredentialResolver(credential_store)

        with pytest.raises(CredentialNotFoundError, match="Credential not found") as exc_info:
            await resolver.resolve("user-1", "missing")

        assert exc_info.value.credential_id == "missing"

    @pytest.mark.asyncio
    async def test_no_store_means_not_found(self):
        with pytest.raises(CredentialNotFoundError):
            await CredentialResolver(None).resolve("user-1", "cred-1")

    @pytest.mark.asyncio
    async def test_wrong_owner(self, credential_store):
        credential_store.add("someone-else", {"token": "x"}, credential_id="cred-1")

        with pytest.raises(CredentialForbiddenError, match="Forbidden"):
            await CredentialResolver(credential_store).resolve("user-1", "cred-1")

    @pytest.mark.asyncio
    async def test_not_valid(self, credential_store):
        credential_store.add("user-1", {"token": "x"}, is_valid=False, credential_id="cred-1")

        with pytest.raises(CredentialInvalidError, match="not verified"):
            await CredentialResolver(credential_store).resolve("user-1", "cred-1")

    @pytest.mark.asyncio
    async def test_cached_per_resolver_and_copied(self, credential_store):
        credential_store.add("user-1", {"token": "x"}, credential_id="cred-1")
        decrypt_calls = []

        def decrypt(encrypted_data):
            decrypt_calls.append(encrypted_data)
            return {"token": "x"}

        resolver = CredentialResolver(credential_store, decrypt)
        first = await resolver.resolve("user-1", "cred-1")
        first["token"] = "mutated"
        second = await resolver.resolve("user-1", "cred-1")

        assert second == {"token": "x"}
        assert len(decrypt_calls) == 1
