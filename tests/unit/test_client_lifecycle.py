# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import threading

import httpx
import pytest

from managedhttp import ApiClient, ClientHooks
from managedhttp.config import ClientSettings
from managedhttp.http.adapters import TransportFactory
from managedhttp.http.models import ResetLevel
from managedhttp.http.transport import create_default_transport

SETTINGS = ClientSettings(user_agent="lifecycle-tests/1.0")


class ReadyRecorder:
    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, transport, rebuilt):
        with self._lock:
            self.calls.append((transport, rebuilt))


@pytest.fixture
def factory():
    return TransportFactory()


@pytest.fixture
def ready():
    return ReadyRecorder()


@pytest.fixture
def client(factory, ready):
    api = ApiClient(settings=SETTINGS, handler_factory=factory, hooks=ClientHooks(on_transport_ready=ready))
    yield api
    api.close()


def test_new_client_starts_with_full_reset_pending(client, factory):
    assert client.reset_signal is ResetLevel.FULL
    assert factory.created == []
    assert client.user_agent == "lifecycle-tests/1.0"


def test_concurrent_acquire_rebuilds_once(client, factory, ready):
    client.headers["X-One"] = "1"
    client.headers["X-Two"] = "2"
    client.authorization = "Bearer token"

    workers = 8
    barrier = threading.Barrier(workers)
    seen = []
    seen_lock = threading.Lock()

    def worker():
        barrier.wait()
        with client.acquire() as transport:
            with seen_lock:
                seen.append(transport)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(seen) == workers
    assert all(transport is seen[0] for transport in seen)
    assert len(ready.calls) == 1
    assert len(factory.created) == 1
    assert client.transport_generation == 1
    assert seen[0].headers["x-one"] == "1"
    assert seen[0].headers["x-two"] == "2"
    assert seen[0].headers["authorization"] == "Bearer token"
    assert seen[0].headers["user-agent"] == "lifecycle-tests/1.0"
    assert client.reset_signal is ResetLevel.CLEAN


def test_headers_only_reset_keeps_transport(client, factory, ready):
    with client.acquire() as first:
        pass
    client.headers["X-Added"] = "yes"
    assert client.reset_signal is ResetLevel.HEADERS

    with client.acquire() as second:
        assert second is first
        assert second.headers["x-added"] == "yes"

    client.headers["X-Added"] = None
    with client.acquire() as third:
        assert third is first
        assert "x-added" not in third.headers

    assert len(factory.created) == 1
    assert not factory.created[0].closed
    assert [rebuilt for _, rebuilt in ready.calls] == [True, False, False]


def test_headers_change_does_not_downgrade_full_reset(client):
    with client.acquire():
        pass
    client.request_client_reset(True)
    client.headers["X-Late"] = "1"
    assert client.reset_signal is ResetLevel.FULL


def test_full_reset_discards_previous_transport(client, factory):
    client.headers["X-Kept"] = "1"
    with client.acquire() as first:
        pass
    old_handler = factory.latest

    client.request_client_reset(True)
    with client.acquire() as second:
        assert second is not first
        assert second.headers["x-kept"] == "1"

    assert old_handler.closed
    assert first.is_closed
    assert len(factory.created) == 2
    assert client.transport_generation == 2


def test_replacing_handler_factory_forces_full_reset(client, factory):
    with client.acquire():
        pass
    replacement = TransportFactory()
    client.handler_factory = replacement
    assert client.reset_signal is ResetLevel.FULL

    with client.acquire():
        pass
    assert factory.created[0].closed
    assert len(replacement.created) == 1


def test_failed_rebuild_restores_reset_signal():
    attempts = []

    def flaky_handler():
        attempts.append(1)
        if len(attempts) == 1:
            raise OSError("handler unavailable")
        return httpx.MockTransport(lambda request: httpx.Response(204))

    with ApiClient(settings=SETTINGS, handler_factory=flaky_handler) as client:
        with pytest.raises(OSError):
            client.get_transport()
        assert client.reset_signal is ResetLevel.FULL

        with client.acquire() as transport:
            assert isinstance(transport, httpx.Client)
        assert len(attempts) == 2


def test_acquire_releases_lease_on_error(client):
    with pytest.raises(ValueError):
        with client.acquire():
            raise ValueError("boom")
    assert client._lock.readers == 0


def test_close_disposes_transport(factory):
    client = ApiClient(settings=SETTINGS, handler_factory=factory)
    with client.acquire() as transport:
        pass
    client.close()

    assert client.closed
    assert transport.is_closed
    assert factory.created[0].closed
    with pytest.raises(RuntimeError):
        client.get_transport()


def test_default_handler_builds_pooled_client():
    with ApiClient(settings=ClientSettings(timeout=12.0, allow_redirects=False)) as client:
        with client.acquire() as transport:
            assert isinstance(transport, httpx.Client)
            assert transport.timeout.read == 12.0
            assert transport.follow_redirects is False


class LateMutationClient(ApiClient):
    """Applies queued header changes right before the transport is acquired."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.before_acquire = []

    def get_transport(self):
        while self.before_acquire:
            self.before_acquire.pop(0)(self)
        return super().get_transport()


def _set_tenant(api):
    api.headers["X-Tenant"] = "new"


def _revoke(api):
    api.authorization = None


def test_header_change_completed_before_acquire_reaches_the_wire():
    factory = TransportFactory(lambda request: httpx.Response(204))
    with LateMutationClient(settings=SETTINGS, handler_factory=factory) as client:
        client.headers["X-Tenant"] = "old"
        client.authorization = "Bearer revoked"
        client.perform("https://api.example.com/ping")

        client.before_acquire.append(_set_tenant)
        client.perform("https://api.example.com/ping")
        assert factory.latest.requests[-1].headers.get_list("x-tenant") == ["new"]

        client.before_acquire.append(_revoke)
        client.perform("https://api.example.com/ping")
        assert "authorization" not in factory.latest.requests[-1].headers

    assert len(factory.created) == 1


def test_changing_http2_rebuilds_transport(client, factory, monkeypatch):
    requested = []

    def record_http2(settings, handler, *, http2=None):
        requested.append(http2)
        return create_default_transport(settings, handler, http2=False)

    monkeypatch.setattr("managedhttp.client.create_default_transport", record_http2)
    with client.acquire():
        pass
    assert client.http2 is False

    client.http2 = True
    assert client.reset_signal is ResetLevel.FULL
    with client.acquire():
        pass

    assert requested == [False, True]
    assert factory.created[0].closed
