from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

BASE_URL_MAIN = "https://api.binance.com"
BASE_URL_TESTNET = "https://testnet.binance.vision"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class BinanceConfig:
    api_key: str = ""
    secret_key: str = field(default="", repr=False)
    testnet: bool = False
    # explicit base URL wins over the testnet switch
    base_url: str | None = None
    timeout: float = 5.0
    # applied to signed requests that do not carry their own
    recv_window: int | None = None
    debug: bool = False

    @property
    def endpoint(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        return BASE_URL_TESTNET if self.testnet else BASE_URL_MAIN

    @classmethod
    def from_env(cls, prefix: str = "BINANCE_", environ: Mapping[str, str] | None = None) -> "BinanceConfig":
        env = os.environ if environ is None else environ

        def raw(name: str) -> str | None:
            value = env.get(prefix + name)
            if value is None:
                return None
            value = value.strip()
            return value or None

        def as_bool(name: str) -> bool:
            value = (raw(name) or "").lower()
            if value in _TRUE:
                return True
            if value in _FALSE:
                return False
            raise ValueError(f"{prefix}{name}: expected a boolean, got {value!r}")

        def as_number(name: str, conv):
            value = raw(name)
            if value is None:
                return None
            try:
                return conv(value)
            except ValueError as e:
                raise ValueError(f"{prefix}{name}: expected {conv.__name__}, got {value!r}") from e

        timeout = as_number("TIMEOUT", float)
        return cls(
            api_key=raw("API_KEY") or "",
            secret_key=raw("SECRET_KEY") or "",
            testnet=as_bool("TESTNET"),
            base_url=raw("BASE_URL"),
            timeout=timeout if timeout is not None else cls.timeout,
            recv_window=as_number("RECV_WINDOW", int),
            debug=as_bool("DEBUG"),
        )
