from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..request import Request, RequestOption, SecurityLevel, required, required_together
from ..transport import CancelToken


@dataclass(frozen=True)
class Deposit:
    # amount stays a string, the exchange sends fixed-point text
    amount: str
    coin: str
    network: str
    status: int
    address: str
    address_tag: str
    tx_id: str
    insert_time: int
    transfer_type: int
    confirm_times: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Deposit":
        return cls(
            amount=str(d.get("amount", "")),
            coin=d.get("coin", ""),
            network=d.get("network", ""),
            status=int(d.get("status", 0)),
            address=d.get("address", ""),
            address_tag=d.get("addressTag", ""),
            tx_id=d.get("txId", ""),
            insert_time=int(d.get("insertTime", 0)),
            transfer_type=int(d.get("transferType", 0)),
            confirm_times=d.get("confirmTimes", ""),
        )


@dataclass(frozen=True)
class DepositAddress:
    address: str
    coin: str
    tag: str
    url: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "DepositAddress":
        return cls(
            address=d.get("address", ""),
            coin=d.get("coin", ""),
            tag=d.get("tag", ""),
            url=d.get("url", ""),
        )


class DepositEndpoints:
    """Deposit history and addresses (`/sapi/v1/capital/deposit/...`)."""

    def list_deposits(
        self,
        *opts: RequestOption,
        coin: str | None = None,
        status: int | None = None,
        start_time: int | None = None,
        end_time: int | None = None,
        offset: int | None = None,
        limit: int | None = None,
        token: CancelToken | None = None,
    ) -> list[Deposit]:
        """
        Deposit history.

        `start_time` and `end_time` go together; the exchange also caps the
        window at 90 days.
        """
        r = Request(method="GET", path="/sapi/v1/capital/deposit/hisrec", security=SecurityLevel.SIGNED)
        for key, value in (
            ("coin", coin),
            ("status", status),
            ("startTime", start_time),
            ("endTime", end_time),
            ("offset", offset),
            ("limit", limit),
        ):
            if value is not None:
                r.set_param(key, value)
        r.require(required_together("startTime", "endTime"))
        return self._call(r, opts, token, lambda data: [Deposit.from_dict(d) for d in data])

    def get_deposit_address(
        self,
        coin: str,
        *opts: RequestOption,
        network: str | None = None,
        token: CancelToken | None = None,
    ) -> DepositAddress:
        r = Request(method="GET", path="/sapi/v1/capital/deposit/address", security=SecurityLevel.SIGNED)
        if coin:
            r.set_param("coin", coin)
        if network:
            r.set_param("network", network)
        r.require(required("coin"))
        return self._call(r, opts, token, DepositAddress.from_dict)
