from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, TypeVar

from .config import BinanceConfig
from .endpoints.broker import BrokerEndpoints
from .endpoints.bswap import BSwapEndpoints
from .endpoints.deposit import DepositEndpoints
from .errors import APIError, DecodeError, ValidationError
from .params import Params
from .request import Request, RequestOption, SecurityLevel, apply_options
from .signing import sign, signature_payload
from .transport import CancelToken, RawResponse, RequestsTransport, Transport

T = TypeVar("T")

API_KEY_HEADER = "X-MBX-APIKEY"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

TIMESTAMP_KEY = "timestamp"
SIGNATURE_KEY = "signature"
RECV_WINDOW_KEY = "recvWindow"


def now_ms() -> int:
    return int(time.time() * 1000)


def _snippet(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")[:300]


def classify_response(
    raw: RawResponse,
    request: Request | None = None,
    *,
    log: logging.Logger | None = None,
) -> bytes:
    """
    Return the raw body for status < 400, raise `APIError` otherwise.

    A 4xx/5xx body that is not a valid error payload still yields an
    `APIError` (zero code, empty message); the decode failure only goes to
    the debug log.
    """
    if raw.status_code < 400:
        return raw.body

    code, message = 0, ""
    try:
        payload = json.loads(raw.body)
        code = int(payload.get("code") or 0)
        message = str(payload.get("msg") or "")
    except (ValueError, TypeError, AttributeError) as e:
        if log is not None:
            log.debug("failed to unmarshal json: %s", e)

    raise APIError(
        code,
        message,
        status_code=raw.status_code,
        method=request.method if request is not None else None,
        path=request.path if request is not None else None,
        body=_snippet(raw.body),
    )


class BinanceClient(BrokerEndpoints, BSwapEndpoints, DepositEndpoints):
    """
    Binance REST client.

    Signing:
      query  += recvWindow (if any), timestamp
      sign    = HMAC-SHA256(secretKey, encodedQuery + encodedForm)
      query  += signature=<hex>

    Headers:
      X-MBX-APIKEY for API-key and signed endpoints,
      Content-Type: application/x-www-form-urlencoded when a form body is sent
    """

    def __init__(
        self,
        config: BinanceConfig = BinanceConfig(),
        *,
        transport: Transport | None = None,
        clock: Callable[[], int] | None = None,
        logger: logging.Logger | None = None,
    ):
        self.config = config
        self.transport = transport or RequestsTransport(timeout=config.timeout)
        self.clock = clock or now_ms
        self.logger = logger or logging.getLogger(__name__)
        # ms subtracted from the local clock for signed timestamps
        self.time_offset: int = 0

    @property
    def base_url(self) -> str:
        return self.config.endpoint

    def _debug(self, msg: str, *args: Any) -> None:
        if self.config.debug:
            self.logger.debug(msg, *args)

    def _masked_headers(self, headers: dict[str, str]) -> dict[str, str]:
        out = dict(headers)
        key = out.get(API_KEY_HEADER)
        if key:
            out[API_KEY_HEADER] = key[:4] + "***"
        return out

    # ---------- request building ----------
    def build_request(self, request: Request, *opts: RequestOption) -> Request:
        if request.built:
            raise ValidationError(f"request {request.method} {request.path} was already built")

        request = apply_options(request, opts)
        request.validate()

        security = request.security
        if security.needs_api_key and not self.config.api_key:
            raise ValidationError.mandatory("apiKey")
        if security is SecurityLevel.SIGNED and not self.config.secret_key:
            raise ValidationError.mandatory("secretKey")

        recv_window = request.recv_window
        if recv_window is None and security is SecurityLevel.SIGNED:
            recv_window = self.config.recv_window
        if recv_window is not None:
            if recv_window <= 0:
                raise ValidationError(
                    f"{RECV_WINDOW_KEY}: must be positive, got {recv_window}",
                    field=RECV_WINDOW_KEY,
                )
            request.query.set(RECV_WINDOW_KEY, recv_window)

        if security is SecurityLevel.SIGNED:
            request.query.set(TIMESTAMP_KEY, self.clock() - self.time_offset)

        query_string = request.query.encode()
        body_string = request.form.encode()

        headers: dict[str, str] = {}
        if body_string:
            headers["Content-Type"] = FORM_CONTENT_TYPE
        if security.needs_api_key:
            headers[API_KEY_HEADER] = self.config.api_key

        if security is SecurityLevel.SIGNED:
            sig = sign(self.config.secret_key, signature_payload(query_string, body_string))
            sig_param = Params().set(SIGNATURE_KEY, sig).encode()
            query_string = f"{query_string}&{sig_param}" if query_string else sig_param

        full_url = f"{self.base_url}{request.path}"
        if query_string:
            full_url = f"{full_url}?{query_string}"
        self._debug("full url: %s, body: %s", full_url, body_string)

        request.full_url = full_url
        request.headers = headers
        request.body = body_string
        return request

    # ---------- request core ----------
    def call_api(
        self,
        request: Request,
        *opts: RequestOption,
        token: CancelToken | None = None,
    ) -> bytes:
        request = self.build_request(request, *opts)
        self._debug(
            "request: %s %s headers=%s",
            request.method,
            request.full_url,
            self._masked_headers(request.headers),
        )

        raw = self.transport.execute(request, token)

        self._debug("response status code: %d", raw.status_code)
        self._debug("response body: %s", _snippet(raw.body))
        return classify_response(raw, request, log=self.logger if self.config.debug else None)

    def _call(
        self,
        request: Request,
        opts: tuple[RequestOption, ...],
        token: CancelToken | None,
        decoder: Callable[[Any], T] | None = None,
    ) -> T | None:
        data = self.call_api(request, *opts, token=token)
        if decoder is None:
            return None

        try:
            payload = json.loads(data)
        except ValueError as e:
            raise DecodeError(f"Invalid JSON in response from {request.path}", cause=e) from e

        try:
            return decoder(payload)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodeError(f"Unexpected response shape from {request.path}", cause=e) from e
