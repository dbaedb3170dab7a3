from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..request import Request, RequestOption, SecurityLevel, required, required_one_of
from ..transport import CancelToken


# ---------- request payloads ----------
@dataclass
class CreateApiKeyRequest:
    sub_account_id: str = ""
    can_trade: bool = False
    margin_trade: bool = False
    futures_trade: bool = False


@dataclass
class DeleteSubApiKeyRequest:
    sub_account_id: str = ""
    api_key: str = ""


@dataclass
class ChangeApiPermissionRequest:
    sub_account_id: str = ""
    sub_account_api_key: str = ""
    can_trade: bool = False
    margin_trade: bool = False
    futures_trade: bool = False


@dataclass
class ChangeCommissionRequest:
    sub_account_id: str = ""
    maker_commission: float = 0.0
    taker_commission: float = 0.0
    margin_maker_commission: float = 0.0
    margin_taker_commission: float = 0.0


@dataclass
class SubAccountTransferRequest:
    from_id: str = ""
    to_id: str = ""
    client_transfer_id: str = ""
    asset: str = ""
    amount: float = 0.0


@dataclass
class SubAccountTransferHistoryRequest:
    from_id: str = ""
    to_id: str = ""
    client_transfer_id: str = ""
    start_time: int = 0
    end_time: int = 0
    limit: int = 0
    page: int = 0


# ---------- responses ----------
@dataclass(frozen=True)
class SubAccount:
    sub_account_id: str
    email: str
    tag: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SubAccount":
        return cls(
            sub_account_id=str(d.get("subaccountId", "")),
            email=d.get("email", ""),
            tag=d.get("tag", ""),
        )


@dataclass(frozen=True)
class EnableFuturesResponse:
    sub_account_id: str
    enable_futures: bool
    update_time: int

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "EnableFuturesResponse":
        return cls(
            sub_account_id=str(d.get("subaccountId", "")),
            enable_futures=bool(d.get("enableFutures", False)),
            update_time=int(d.get("updateTime", 0)),
        )


@dataclass(frozen=True)
class EnableMarginResponse:
    sub_account_id: str
    enable_margin: bool
    update_time: int

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "EnableMarginResponse":
        return cls(
            sub_account_id=str(d.get("subaccountId", "")),
            enable_margin=bool(d.get("enableMargin", False)),
            update_time=int(d.get("updateTime", 0)),
        )


@dataclass(frozen=True)
class CreateApiKeyResponse:
    sub_account_id: str
    api_key: str
    secret_key: str
    can_trade: bool
    margin_trade: bool
    futures_trade: bool

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "CreateApiKeyResponse":
        return cls(
            sub_account_id=str(d.get("subaccountId", "")),
            api_key=d.get("apiKey", ""),
            secret_key=d.get("secretKey", ""),
            can_trade=bool(d.get("canTrade", False)),
            margin_trade=bool(d.get("marginTrade", False)),
            futures_trade=bool(d.get("futuresTrade", False)),
        )


@dataclass(frozen=True)
class ChangeApiPermissionResponse:
    sub_account_id: str
    api_key: str
    can_trade: bool
    margin_trade: bool
    futures_trade: bool

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ChangeApiPermissionResponse":
        return cls(
            sub_account_id=str(d.get("subaccountId", "")),
            api_key=d.get("apiKey", ""),
            can_trade=bool(d.get("canTrade", False)),
            margin_trade=bool(d.get("marginTrade", False)),
            futures_trade=bool(d.get("futuresTrade", False)),
        )


@dataclass(frozen=True)
class ChangeCommissionResponse:
    sub_account_id: str
    maker_commission: float
    taker_commission: float
    margin_maker_commission: float
    margin_taker_commission: float

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ChangeCommissionResponse":
        return cls(
            sub_account_id=str(d.get("subaccountId", "")),
            maker_commission=float(d.get("makerCommission", 0)),
            taker_commission=float(d.get("takerCommission", 0)),
            margin_maker_commission=float(d.get("marginMakerCommission", 0)),
            margin_taker_commission=float(d.get("marginTakerCommission", 0)),
        )


@dataclass(frozen=True)
class SubAccountTransferResponse:
    txn_id: str
    client_tran_id: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SubAccountTransferResponse":
        return cls(
            txn_id=str(d.get("txnId", "")),
            client_tran_id=d.get("clientTranId", ""),
        )


@dataclass(frozen=True)
class Transfer:
    from_id: str
    to_id: str
    asset: str
    qty: str
    time: int
    txn_id: str
    client_tran_id: str
    status: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Transfer":
        return cls(
            from_id=str(d.get("fromId", "")),
            to_id=str(d.get("toId", "")),
            asset=d.get("asset", ""),
            qty=str(d.get("qty", "")),
            time=int(d.get("time", 0)),
            txn_id=str(d.get("txnId", "")),
            client_tran_id=d.get("clientTranId", ""),
            status=d.get("status", ""),
        )


class BrokerEndpoints:
    """Broker sub-account management (`/sapi/v1/broker/...`). All calls are signed."""

    def _broker_request(self, method: str, path: str) -> Request:
        return Request(method=method, path=f"/sapi/v1/broker{path}", security=SecurityLevel.SIGNED)

    def create_sub_account(self, *opts: RequestOption, token: CancelToken | None = None) -> SubAccount:
        r = self._broker_request("POST", "/subAccount")
        return self._call(r, opts, token, SubAccount.from_dict)

    def enable_futures_sub_account(
        self, sub_account_id: str, *opts: RequestOption, token: CancelToken | None = None
    ) -> EnableFuturesResponse:
        r = self._broker_request("POST", "/subAccount/futures")
        r.set_param("subAccountId", sub_account_id)
        r.set_param("futures", True)
        return self._call(r, opts, token, EnableFuturesResponse.from_dict)

    def enable_margin_sub_account(
        self, sub_account_id: str, *opts: RequestOption, token: CancelToken | None = None
    ) -> EnableMarginResponse:
        r = self._broker_request("POST", "/subAccount/margin")
        r.set_param("subAccountId", sub_account_id)
        r.set_param("margin", True)
        return self._call(r, opts, token, EnableMarginResponse.from_dict)

    def create_sub_account_api_key(
        self, req: CreateApiKeyRequest, *opts: RequestOption, token: CancelToken | None = None
    ) -> CreateApiKeyResponse:
        r = self._broker_request("POST", "/subAccountApi")
        if req.sub_account_id:
            r.set_param("subAccountId", req.sub_account_id)
        r.set_param("canTrade", req.can_trade)
        r.set_param("marginTrade", req.margin_trade)
        r.set_param("futuresTrade", req.futures_trade)
        r.require(required("subAccountId"))
        return self._call(r, opts, token, CreateApiKeyResponse.from_dict)

    def delete_sub_account_api_key(
        self, req: DeleteSubApiKeyRequest, *opts: RequestOption, token: CancelToken | None = None
    ) -> None:
        r = self._broker_request("DELETE", "/subAccountApi")
        if req.sub_account_id:
            r.set_param("subAccountId", req.sub_account_id)
        if req.api_key:
            r.set_param("subAccountApiKey", req.api_key)
        r.require(required("subAccountId", "subAccountApiKey"))
        self._call(r, opts, token)

    def change_sub_account_api_permission(
        self, req: ChangeApiPermissionRequest, *opts: RequestOption, token: CancelToken | None = None
    ) -> ChangeApiPermissionResponse:
        r = self._broker_request("POST", "/subAccountApi/permission")
        if req.sub_account_id:
            r.set_param("subAccountId", req.sub_account_id)
        if req.sub_account_api_key:
            r.set_param("subAccountApiKey", req.sub_account_api_key)
        r.set_param("canTrade", req.can_trade)
        r.set_param("marginTrade", req.margin_trade)
        r.set_param("futuresTrade", req.futures_trade)
        r.require(required("subAccountId", "subAccountApiKey"))
        return self._call(r, opts, token, ChangeApiPermissionResponse.from_dict)

    def change_sub_account_commission(
        self, req: ChangeCommissionRequest, *opts: RequestOption, token: CancelToken | None = None
    ) -> ChangeCommissionResponse:
        r = self._broker_request("POST", "/subAccountApi/commission")
        if req.sub_account_id:
            r.set_param("subAccountId", req.sub_account_id)
        r.set_param("makerCommission", req.maker_commission)
        r.set_param("takerCommission", req.taker_commission)
        r.set_param("marginMakerCommission", req.margin_maker_commission)
        r.set_param("marginTakerCommission", req.margin_taker_commission)
        r.require(required("subAccountId"))
        return self._call(r, opts, token, ChangeCommissionResponse.from_dict)

    def sub_account_transfer(
        self, req: SubAccountTransferRequest, *opts: RequestOption, token: CancelToken | None = None
    ) -> SubAccountTransferResponse:
        r = self._broker_request("POST", "/transfer")
        if req.from_id:
            r.set_param("fromId", req.from_id)
        if req.to_id:
            r.set_param("toId", req.to_id)
        if req.asset:
            r.set_param("asset", req.asset)
        if req.client_transfer_id:
            r.set_param("clientTranId", req.client_transfer_id)
        if req.amount > 0:
            r.set_param("amount", req.amount)
        r.require(required_one_of("fromId", "toId"), required("asset", "amount"))
        return self._call(r, opts, token, SubAccountTransferResponse.from_dict)

    def transfer_history(
        self,
        *opts: RequestOption,
        req: SubAccountTransferHistoryRequest | None = None,
        token: CancelToken | None = None,
    ) -> list[Transfer]:
        req = req or SubAccountTransferHistoryRequest()
        r = self._broker_request("GET", "/transfer")
        if req.from_id:
            r.set_param("fromId", req.from_id)
        if req.to_id:
            r.set_param("toId", req.to_id)
        if req.client_transfer_id:
            r.set_param("clientTranId", req.client_transfer_id)
        if req.start_time > 0:
            r.set_param("startTime", req.start_time)
        if req.end_time > 0:
            r.set_param("endTime", req.end_time)
        if req.limit > 0:
            r.set_param("limit", req.limit)
        if req.page > 0:
            r.set_param("page", req.page)
        return self._call(r, opts, token, lambda data: [Transfer.from_dict(t) for t in data])
