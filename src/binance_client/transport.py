from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import requests
from requests.exceptions import RequestException, Timeout

from .errors import RequestCancelledError, TransportError, ValidationError
from .request import Request

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class CancelToken:
    """
    Cancellation signal for a single call.

    `cancel()` may be called from any thread; it fires every registered
    callback once. A `timeout` (seconds) turns the token into a deadline:
    once it passes the token counts as cancelled and the transport's socket
    timeout is bounded by the time left.
    """

    def __init__(self, timeout: float | None = None):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self.deadline: float | None = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
        for fn in callbacks:
            fn()

    def add_callback(self, fn: Callable[[], None]) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(fn)
                return
        fn()

    def remove_callback(self, fn: Callable[[], None]) -> None:
        with self._lock:
            if fn in self._callbacks:
                self._callbacks.remove(fn)

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def bound(self, timeout: float) -> float:
        left = self.remaining()
        if left is None:
            return timeout
        # requests treats 0 as "no timeout" on some adapters
        return max(min(timeout, left), 0.001)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelledError("Request cancelled")
        if self.expired:
            raise RequestCancelledError("Request deadline exceeded")


@dataclass(frozen=True)
class RawResponse:
    body: bytes
    status_code: int


class Transport(Protocol):
    def execute(self, request: Request, token: CancelToken | None = None) -> RawResponse:
        ...


class RequestsTransport:
    """
    Sends exactly one HTTP request through a `requests.Session`. No retries.

    With a `CancelToken` the request runs on a worker thread and the caller
    waits for whichever comes first: the response, `cancel()`, or the
    deadline. A cancelled call returns at once; the abandoned worker is
    bounded by the socket timeout and its outcome is dropped.
    """

    def __init__(self, session: requests.Session | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.session = session or requests.Session()
        self.timeout = timeout

    def execute(self, request: Request, token: CancelToken | None = None) -> RawResponse:
        if request.full_url is None:
            raise ValidationError("request must be built before it is sent")

        if token is None:
            return self._send(request, self.timeout, None)

        token.raise_if_cancelled()
        timeout = token.bound(self.timeout)

        outcome: dict[str, Any] = {}
        wake = threading.Event()

        def run() -> None:
            try:
                outcome["response"] = self._send(request, timeout, token)
            except Exception as e:  # re-raised on the calling thread
                outcome["error"] = e
            finally:
                wake.set()

        token.add_callback(wake.set)
        try:
            worker = threading.Thread(target=run, name=f"binance-{request.path}", daemon=True)
            worker.start()
            wake.wait(token.remaining())
        finally:
            token.remove_callback(wake.set)

        if "response" not in outcome and "error" not in outcome:
            logger.debug("%s %s abandoned after cancellation", request.method, request.path)
            token.raise_if_cancelled()
            raise RequestCancelledError("Request cancelled")

        if "error" in outcome:
            raise outcome["error"]

        token.raise_if_cancelled()
        return outcome["response"]

    def _send(self, request: Request, timeout: float, token: CancelToken | None) -> RawResponse:
        try:
            resp = self.session.request(
                request.method,
                request.full_url,
                headers=request.headers,
                data=request.body.encode("utf-8") if request.body else None,
                timeout=timeout,
            )
            # reading the body can fail on its own (truncated chunked stream etc.)
            body = resp.content
        except Timeout as e:
            if token is not None and token.cancelled:
                raise RequestCancelledError("Request deadline exceeded", cause=e) from e
            logger.error("%s %s timed out", request.method, request.path)
            raise TransportError(f"Timeout calling {request.path}", cause=e) from e
        except RequestException as e:
            if token is not None and token.cancelled:
                raise RequestCancelledError("Request cancelled", cause=e) from e
            logger.error("%s %s network error: %s", request.method, request.path, e)
            raise TransportError(f"Network error calling {request.path}: {e}", cause=e) from e

        return RawResponse(body=body or b"", status_code=resp.status_code)
