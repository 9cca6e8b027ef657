# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Managed API client.

ApiClient owns one pooled httpx.Client and rebuilds it lazily: header changes
and handler changes only raise a reset signal, and the next request to acquire
the transport applies them under exclusive access. Requests otherwise share
the transport through a reader/writer lock, so reconfiguration never blocks
steady-state traffic and no request observes a half-applied configuration.
"""

from __future__ import annotations

import io
import logging
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

import httpx

from .config import ClientSettings, load_client_settings
from .errors import AuthRequiredError, HttpStatusError, NullRequestError, categorize_exception
from .http.headers import HeaderCollection, has_header
from .http.locking import ReadLease, ReadWriteLock
from .http.models import DataDirection, ResetLevel, WireRequest
from .http.transport import HandlerFactory, create_default_transport
from .log import redact_headers
from .requests.basic import BasicApiRequest
from .requests.compiler import compile_request, header_pairs, validate_path
from .requests.request import ApiFileRequest, ApiRequest
from .serializers import ApiSerializer, SerializerResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")
ProgressCallback = Callable[[int, "int | None"], None]
RequestLike = ApiRequest | WireRequest | str


@dataclass
class ClientHooks:
    """Optional callbacks invoked at the client's extension points."""

    # (transport, rebuilt) after headers were (re)applied; rebuilt is True for a new transport
    on_transport_ready: Callable[[httpx.Client, bool], None] | None = None
    # the httpx.Request about to be sent
    on_request_prepared: Callable[[httpx.Request], None] | None = None
    # (client, request) before the auth check
    on_validate: Callable[["ApiClient", ApiRequest], None] | None = None


class ApiClient:
    """
    Managed wrapper around an httpx.Client.

    One instance is meant to be shared by many threads for the lifetime of an
    API integration. Use ``with ApiClient() as client:`` or call ``close()``
    to release the pooled connections.
    """

    def __init__(
        self,
        serializer: ApiSerializer | None = None,
        *,
        settings: ClientSettings | None = None,
        hooks: ClientHooks | None = None,
        handler_factory: HandlerFactory | None = None,
        headers: Mapping[str, str] | None = None,
    ):
        self.settings = settings or load_client_settings()
        self.hooks = hooks or ClientHooks()
        self.serializer = SerializerResolver(serializer) if serializer is not None else SerializerResolver()

        self._lock = ReadWriteLock()
        self._signal_lock = threading.Lock()
        self._reset_signal = ResetLevel.FULL
        self._transport: httpx.Client | None = None
        self._handler_factory = handler_factory
        self._http2 = self.settings.http2
        self._closed = False
        self.transport_generation = 0

        self.headers = HeaderCollection(self)
        if self.settings.user_agent:
            self.headers["User-Agent"] = self.settings.user_agent
        for name, value in (headers or {}).items():
            self.headers[name] = value

    # configuration

    @property
    def user_agent(self) -> str | None:
        return self.headers.get("User-Agent")

    @user_agent.setter
    def user_agent(self, value: str | None) -> None:
        self.headers["User-Agent"] = value

    @property
    def authorization(self) -> str | None:
        return self.headers.get("Authorization")

    @authorization.setter
    def authorization(self, value: str | None) -> None:
        self.headers["Authorization"] = value

    @property
    def handler_factory(self) -> HandlerFactory | None:
        """
        Factory for the httpx transport wrapped by the client.

        It must return a new transport on every call, since the previous one is
        closed together with the client it belonged to.
        """
        return self._handler_factory

    @handler_factory.setter
    def handler_factory(self, factory: HandlerFactory | None) -> None:
        self._handler_factory = factory
        self.request_client_reset(True)

    @property
    def http2(self) -> bool:
        """Whether httpx's own connection pool negotiates HTTP/2; changing it rebuilds the transport."""
        return self._http2

    @http2.setter
    def http2(self, enabled: bool) -> None:
        self._http2 = enabled
        self.request_client_reset(True)

    @property
    def reset_signal(self) -> ResetLevel:
        with self._signal_lock:
            return self._reset_signal

    @property
    def closed(self) -> bool:
        return self._closed

    def request_client_reset(self, full_reset: bool) -> None:
        """Ask for the transport (``full_reset``) or only its headers to be refreshed on the next request."""
        with self._signal_lock:
            if full_reset:
                self._reset_signal = ResetLevel.FULL
            elif self._reset_signal is ResetLevel.CLEAN:
                self._reset_signal = ResetLevel.HEADERS

    def _take_reset_signal(self) -> ResetLevel:
        with self._signal_lock:
            level = self._reset_signal
            self._reset_signal = ResetLevel.CLEAN
            return level

    # extension points

    def create_handler(self) -> httpx.BaseTransport | None:
        """Build the low-level transport; subclasses may wrap the user's handler here."""
        if self._handler_factory is None:
            return None
        return self._handler_factory()

    def create_transport(self, handler: httpx.BaseTransport | None) -> httpx.Client:
        return create_default_transport(self.settings, handler, http2=self._http2)

    def setup_transport(self, transport: httpx.Client, rebuilt: bool) -> None:
        """Customise the transport after headers were applied; ``rebuilt`` is True for a new transport."""
        if self.hooks.on_transport_ready is not None:
            self.hooks.on_transport_ready(transport, rebuilt)

    def setup_request(self, request: httpx.Request) -> None:
        """Adjust every outgoing httpx.Request."""
        if self.hooks.on_request_prepared is not None:
            self.hooks.on_request_prepared(request)

    def validate_request(self, request: ApiRequest) -> None:
        """
        Pre-flight checks run before compilation.

        Raises AuthRequiredError when the request needs an Authorization header
        and neither the client, the request headers nor a header binding
        supplies one.
        """
        request.on_request_executing(self)
        if self.hooks.on_validate is not None:
            self.hooks.on_validate(self, request)

        if request.require_auth and not self._carries_authorization(request):
            raise AuthRequiredError()

    def _carries_authorization(self, request: ApiRequest) -> bool:
        if self.authorization:
            return True
        if request.custom_headers_created and has_header(request.headers, "Authorization"):
            return True
        return has_header(header_pairs(request), "Authorization")

    # transport lifecycle

    def _rebuild(self, level: ResetLevel) -> None:
        rebuilt = level is ResetLevel.FULL or self._transport is None
        if rebuilt:
            handler = self.create_handler()
            previous, self._transport = self._transport, None
            if previous is not None:
                previous.close()
            self._transport = self.create_transport(handler)
            self.transport_generation += 1

        self.headers.apply_to(self._transport)
        self.setup_transport(self._transport, rebuilt)
        logger.debug(
            "Transport %s (generation %d)",
            "rebuilt" if rebuilt else "headers refreshed",
            self.transport_generation,
        )

    def get_transport(self) -> tuple[httpx.Client, ReadLease]:
        """
        Return the up-to-date transport and a shared-access lease.

        Pending configuration changes are applied first, under exclusive access.
        The lease must be released exactly once, after the response was obtained.
        """
        if self._closed:
            raise RuntimeError("ApiClient is closed")

        if self.reset_signal is not ResetLevel.CLEAN:
            with self._lock.write_locked():
                # only the thread that clears the signal rebuilds; later writers find it clean
                level = self._take_reset_signal()
                if level is not ResetLevel.CLEAN:
                    try:
                        self._rebuild(level)
                    except BaseException:
                        self.request_client_reset(level is ResetLevel.FULL or self._transport is None)
                        raise

        self._lock.acquire_read()
        lease = ReadLease(self._lock)
        transport = self._transport
        if transport is None:
            lease.release()
            raise RuntimeError("ApiClient is closed")
        return transport, lease

    @contextmanager
    def acquire(self) -> Iterator[httpx.Client]:
        """Context-managed form of get_transport()."""
        transport, lease = self.get_transport()
        try:
            yield transport
        finally:
            lease.release()

    def close(self) -> None:
        with self._lock.write_locked():
            self._closed = True
            transport, self._transport = self._transport, None
            if transport is not None:
                transport.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()

    # request pipeline

    def compile(self, request: ApiRequest) -> WireRequest:
        """Compile ``request`` against this client's serializers and current headers."""
        return compile_request(request, self.serializer, self.headers.snapshot())

    def _prepare(self, request: RequestLike) -> ApiRequest | WireRequest:
        """Run the pre-flight checks; compilation waits until the transport is held."""
        if isinstance(request, WireRequest):
            return request
        if isinstance(request, str):
            request = BasicApiRequest(request)
        self.validate_request(request)
        validate_path(request.path)
        return request

    def _wire(self, prepared: ApiRequest | WireRequest) -> WireRequest:
        # runs under the read lease: the client header layer is the one just applied to the transport
        if isinstance(prepared, WireRequest):
            return prepared
        return self.compile(prepared)

    def _send(self, transport: httpx.Client, wire: WireRequest, timeout: Any) -> httpx.Response:
        extra: dict[str, Any] = {}
        if timeout is not None:
            extra["timeout"] = timeout
        http_request = transport.build_request(
            wire.method,
            wire.url,
            headers=dict(wire.headers),
            content=wire.body,
            **extra,
        )
        self.setup_request(http_request)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s %s headers=%s", wire.method, wire.url, redact_headers(dict(http_request.headers)))
        try:
            return transport.send(http_request, stream=True)
        except httpx.HTTPError as exc:
            logger.debug(
                "%s %s failed (%s): %s",
                wire.method,
                wire.url,
                categorize_exception(exc).value,
                exc,
            )
            raise

    def _internal_perform(
        self,
        prepared: ApiRequest | WireRequest,
        process: Callable[[httpx.Response], T],
        dispose_response: bool,
        timeout: Any = None,
    ) -> T:
        """
        Compile and send ``prepared``, then hand the streamed response to ``process``.

        The response is closed afterwards unless ``dispose_response`` is False;
        the shared-access lease is released on every path.
        """
        transport, lease = self.get_transport()
        response: httpx.Response | None = None
        try:
            response = self._send(transport, self._wire(prepared), timeout)
            return process(response)
        finally:
            if dispose_response and response is not None:
                response.close()
            lease.release()

    def ensure_success(self, response: httpx.Response) -> None:
        if not response.is_success:
            raise HttpStatusError(response.status_code, response.reason_phrase, str(response.url))

    def validate_and_process(self, response: httpx.Response, response_type: type[T]) -> T:
        """Check the status code, then decode the body with the inbound serializer for ``response_type``."""
        self.ensure_success(response)
        serializer = self.serializer.resolve(response_type, DataDirection.IN)
        body = io.BytesIO(response.read())
        return serializer.deserialize(body, response_type)

    def perform(self, request: RequestLike, response_type: type[T] | None = None, *, timeout: Any = None) -> T:
        """
        Perform ``request`` and decode the response.

        ``response_type`` defaults to the request's ``response_type``; without
        either, the decoded JSON value is returned as-is.
        """
        target = response_type or getattr(request, "response_type", None) or object
        prepared = self._prepare(request)
        return self._internal_perform(prepared, lambda response: self.validate_and_process(response, target), True, timeout)

    def perform_raw(self, request: RequestLike, *, timeout: Any = None) -> httpx.Response:
        """
        Perform ``request`` and return the buffered httpx.Response without checking its status.

        The caller owns the response.
        """

        def _buffer(response: httpx.Response) -> httpx.Response:
            response.read()
            return response

        prepared = self._prepare(request)
        return self._internal_perform(prepared, _buffer, False, timeout)

    @contextmanager
    def stream(self, request: RequestLike, *, timeout: Any = None) -> Iterator[httpx.Response]:
        """
        Perform ``request`` and yield the unread response.

        The transport stays shared-locked until the block exits, so a concurrent
        rebuild cannot close the connection the body is read from.
        """
        prepared = self._prepare(request)
        transport, lease = self.get_transport()
        response: httpx.Response | None = None
        try:
            response = self._send(transport, self._wire(prepared), timeout)
            yield response
        finally:
            if response is not None:
                response.close()
            lease.release()

    def download(
        self,
        request: ApiFileRequest,
        progress: ProgressCallback | None = None,
        *,
        timeout: Any = None,
    ) -> Path:
        """
        Stream the response body of ``request`` into ``request.destination``.

        ``progress(written, total)`` is called every ``progress_interval`` chunks
        and once when the copy completes; ``total`` is None when the server did
        not send a Content-Length.
        """
        self.validate_request(request)
        if request.destination is None or not str(request.destination).strip():
            raise NullRequestError()
        validate_path(request.path)

        destination = Path(request.destination)
        buffer_size = request.buffer_size or self.settings.download_buffer_bytes
        interval = max(1, self.settings.progress_interval)

        def _copy(response: httpx.Response) -> Path:
            self.ensure_success(response)
            total = _content_length(response)
            written = 0
            chunks = 0
            with open(destination, request.file_mode) as handle:
                for chunk in response.iter_bytes(chunk_size=buffer_size):
                    handle.write(chunk)
                    written += len(chunk)
                    chunks += 1
                    if progress is not None and chunks == interval:
                        chunks = 0
                        progress(written, total)
                handle.flush()

            if progress is not None:
                progress(written, total)
            logger.debug("Downloaded %d bytes from %s to %s", written, response.url, destination)
            return destination

        return self._internal_perform(request, _copy, True, timeout)


def _content_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


__all__ = ["ApiClient", "ClientHooks", "ProgressCallback"]
