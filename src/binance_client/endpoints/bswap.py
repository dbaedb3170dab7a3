from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from ..request import Request, RequestOption, SecurityLevel
from ..transport import CancelToken


class OperationType(str, Enum):
    ADD = "ADD"
    REMOVE = "REMOVE"


def _floats(d: dict[str, Any] | None) -> dict[str, float]:
    return {k: float(v) for k, v in (d or {}).items()}


@dataclass(frozen=True)
class Pool:
    pool_id: int
    pool_name: str
    assets: list[str]

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Pool":
        return cls(
            pool_id=int(d.get("poolId", 0)),
            pool_name=d.get("poolName", ""),
            assets=list(d.get("assets") or []),
        )


@dataclass(frozen=True)
class Quote:
    quote_asset: str
    base_asset: str
    quote_qty: float
    base_qty: float
    price: float
    slippage: float
    fee: float

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Quote":
        return cls(
            quote_asset=d.get("quoteAsset", ""),
            base_asset=d.get("baseAsset", ""),
            quote_qty=float(d.get("quoteQty", 0)),
            base_qty=float(d.get("baseQty", 0)),
            price=float(d.get("price", 0)),
            slippage=float(d.get("slippage", 0)),
            fee=float(d.get("fee", 0)),
        )


@dataclass(frozen=True)
class Swap:
    swap_id: int
    swap_time: int
    status: int
    quote_asset: str
    base_asset: str
    quote_qty: float
    base_qty: float
    price: float
    fee: float

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Swap":
        return cls(
            swap_id=int(d.get("swapId", 0)),
            swap_time=int(d.get("swapTime", 0)),
            status=int(d.get("status", 0)),
            quote_asset=d.get("quoteAsset", ""),
            base_asset=d.get("baseAsset", ""),
            quote_qty=float(d.get("quoteQty", 0)),
            base_qty=float(d.get("baseQty", 0)),
            price=float(d.get("price", 0)),
            fee=float(d.get("fee", 0)),
        )


@dataclass(frozen=True)
class ShareLiquidity:
    share_amount: float = 0.0
    share_percentage: float = 0.0
    asset: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ShareLiquidity":
        return cls(
            share_amount=float(d.get("shareAmount", 0)),
            share_percentage=float(d.get("sharePercentage", 0)),
            asset=_floats(d.get("asset")),
        )


@dataclass(frozen=True)
class PoolLiquidity:
    pool_id: int
    pool_name: str
    update_time: int
    liquidity: dict[str, float]
    share: ShareLiquidity

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "PoolLiquidity":
        return cls(
            pool_id=int(d.get("poolId", 0)),
            pool_name=d.get("poolName", ""),
            update_time=int(d.get("updateTime", 0)),
            liquidity=_floats(d.get("liquidity")),
            share=ShareLiquidity.from_dict(d.get("share") or {}),
        )


@dataclass(frozen=True)
class LiquidityOperation:
    operation_id: int
    pool_id: int
    pool_name: str
    operation: str
    status: int
    update_time: int
    share_amount: float

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "LiquidityOperation":
        return cls(
            operation_id=int(d.get("operationId", 0)),
            pool_id=int(d.get("poolId", 0)),
            pool_name=d.get("poolName", ""),
            operation=d.get("operation", ""),
            status=int(d.get("status", 0)),
            update_time=int(d.get("updateTime", 0)),
            share_amount=float(d.get("shareAmount", 0)),
        )


def _swap_id(d: dict[str, Any]) -> int:
    return int(d.get("swapId", 0))


def _operation_id(d: dict[str, Any]) -> int:
    return int(d.get("operationId", 0))


class BSwapEndpoints:
    """Liquidity pools and swaps (`/sapi/v1/bswap/...`)."""

    def list_swap_pools(self, *opts: RequestOption, token: CancelToken | None = None) -> list[Pool]:
        r = Request(method="GET", path="/sapi/v1/bswap/pools", security=SecurityLevel.NONE)
        return self._call(r, opts, token, lambda data: [Pool.from_dict(p) for p in data])

    def request_quote(
        self,
        quote_asset: str,
        base_asset: str,
        quote_qty: float,
        *opts: RequestOption,
        token: CancelToken | None = None,
    ) -> Quote:
        r = Request(method="GET", path="/sapi/v1/bswap/quote", security=SecurityLevel.SIGNED)
        r.set_param("quoteAsset", quote_asset)
        r.set_param("baseAsset", base_asset)
        r.set_param("quoteQty", quote_qty)
        return self._call(r, opts, token, Quote.from_dict)

    def swap(
        self,
        quote_asset: str,
        base_asset: str,
        quote_qty: float,
        *opts: RequestOption,
        token: CancelToken | None = None,
    ) -> int:
        """Swap `quote_qty` of `quote_asset` into `base_asset`; returns the swap id."""
        r = Request(method="POST", path="/sapi/v1/bswap/swap", security=SecurityLevel.SIGNED)
        r.set_form_param("quoteAsset", quote_asset)
        r.set_form_param("baseAsset", base_asset)
        r.set_form_param("quoteQty", quote_qty)
        return self._call(r, opts, token, _swap_id)

    def swap_history(
        self,
        *opts: RequestOption,
        swap_id: int | None = None,
        start_time: int | None = None,
        end_time: int | None = None,
        status: int | None = None,
        quote_asset: str | None = None,
        base_asset: str | None = None,
        limit: int | None = None,
        token: CancelToken | None = None,
    ) -> list[Swap]:
        r = Request(method="GET", path="/sapi/v1/bswap/swap", security=SecurityLevel.SIGNED)
        for key, value in (
            ("swapId", swap_id),
            ("startTime", start_time),
            ("endTime", end_time),
            ("status", status),
            ("quoteAsset", quote_asset),
            ("baseAsset", base_asset),
            ("limit", limit),
        ):
            if value is not None:
                r.set_param(key, value)
        return self._call(r, opts, token, lambda data: [Swap.from_dict(s) for s in data])

    def liquidity_information(
        self,
        *opts: RequestOption,
        pool_id: int | None = None,
        token: CancelToken | None = None,
    ) -> list[PoolLiquidity]:
        r = Request(method="GET", path="/sapi/v1/bswap/liquidity", security=SecurityLevel.SIGNED)
        if pool_id is not None:
            r.set_param("poolId", pool_id)
        return self._call(r, opts, token, lambda data: [PoolLiquidity.from_dict(p) for p in data])

    def add_liquidity(
        self,
        pool_id: int,
        asset: str,
        quantity: float,
        *opts: RequestOption,
        token: CancelToken | None = None,
    ) -> int:
        """Returns the liquidity operation id."""
        r = Request(method="POST", path="/sapi/v1/bswap/liquidityAdd", security=SecurityLevel.SIGNED)
        r.set_form_param("poolId", pool_id)
        r.set_form_param("asset", asset)
        r.set_form_param("quantity", quantity)
        return self._call(r, opts, token, _operation_id)

    def remove_liquidity(
        self,
        pool_id: int,
        removal_type: str,
        share_amount: float,
        *opts: RequestOption,
        assets: Iterable[str] = (),
        token: CancelToken | None = None,
    ) -> int:
        """
        Remove liquidity from a pool; returns the liquidity operation id.

        `removal_type` is SINGLE (pay out in one asset, name it in `assets`) or
        COMBINATION. Assets go out as repeated `asset` query parameters.
        """
        r = Request(method="POST", path="/sapi/v1/bswap/liquidityRemove", security=SecurityLevel.SIGNED)
        r.set_form_param("type", removal_type)
        r.set_form_param("poolId", pool_id)
        r.set_form_param("shareAmount", share_amount)
        for a in assets:
            r.add_param("asset", a)
        return self._call(r, opts, token, _operation_id)

    def liquidity_operations(
        self,
        *opts: RequestOption,
        operation_id: int | None = None,
        pool_id: int | None = None,
        operation: OperationType | None = None,
        start_time: int | None = None,
        end_time: int | None = None,
        limit: int | None = None,
        token: CancelToken | None = None,
    ) -> list[LiquidityOperation]:
        r = Request(method="GET", path="/sapi/v1/bswap/liquidityOps", security=SecurityLevel.SIGNED)
        for key, value in (
            ("operationId", operation_id),
            ("poolId", pool_id),
            ("operation", operation.value if operation is not None else None),
            ("startTime", start_time),
            ("endTime", end_time),
            ("limit", limit),
        ):
            if value is not None:
                r.set_param(key, value)
        return self._call(r, opts, token, lambda data: [LiquidityOperation.from_dict(o) for o in data])
