import json
from urllib.parse import urlsplit

import pytest

from binance_client.endpoints.broker import (
    ChangeApiPermissionRequest,
    ChangeCommissionRequest,
    CreateApiKeyRequest,
    DeleteSubApiKeyRequest,
    SubAccountTransferHistoryRequest,
    SubAccountTransferRequest,
)
from binance_client.endpoints.bswap import OperationType
from binance_client.errors import ValidationError
from binance_client.params import Params
from binance_client.request import with_recv_window

from conftest import NOW_MS

DEPOSITS = [
    {
        "amount": "0.00999800",
        "coin": "PAXG",
        "network": "ETH",
        "status": 1,
        "address": "0x788cabe9236ce061e5a892e1a59395a81fc8d62c",
        "addressTag": "",
        "txId": "0xaad4654a3234aa6118af9b4b335f5ae81c360b2394721c019b5d1e75328b09f3",
        "insertTime": 1599621997000,
        "transferType": 0,
        "confirmTimes": "12/12",
    },
    {
        "amount": "0.50000000",
        "coin": "IOTA",
        "network": "IOTA",
        "status": 1,
        "address": "SIZ9VLMHWATXKV99LH99CIGFJFUMLEHGWVZVNNZXRJJVWBPHYWPPBOSDORZ9EQSHCZAMPVAPGFYQAUUV9DROOXJLNW",
        "addressTag": "342341222",
        "txId": "ESBFVQUTPIWQNJSPXFNHNYHSQNTGKRVKPRABQWTAXCDWOAKDKYWPTVG9BGXNVNKTLEJGESAVXIKIZ9999",
        "insertTime": 1599620082000,
        "transferType": 0,
        "confirmTimes": "1/1",
    },
]


def _sent(transport, i=-1):
    req = transport.calls[i]
    parts = urlsplit(req.full_url)
    return req, parts.path, Params.decode(parts.query), Params.decode(req.body)


# ---------- deposits ----------
def test_list_deposits(make_client):
    client, transport = make_client((200, json.dumps(DEPOSITS)))
    deposits = client.list_deposits(coin="BTC", status=1, start_time=1508198532000, end_time=1508198532001)

    req, path, query, _ = _sent(transport)
    assert req.method == "GET"
    assert path == "/sapi/v1/capital/deposit/hisrec"
    assert query.get("coin") == "BTC"
    assert query.get("status") == "1"
    assert query.get("startTime") == "1508198532000"
    assert query.get("endTime") == "1508198532001"
    assert query.get("timestamp") == str(NOW_MS)
    assert "signature" in query

    assert len(deposits) == 2
    first = deposits[0]
    assert first.insert_time == 1599621997000
    assert first.amount == "0.00999800"
    assert first.coin == "PAXG"
    assert first.status == 1
    assert first.tx_id == "0xaad4654a3234aa6118af9b4b335f5ae81c360b2394721c019b5d1e75328b09f3"
    assert deposits[1].address_tag == "342341222"
    assert deposits[1].confirm_times == "1/1"


def test_list_deposits_needs_both_time_bounds(make_client):
    client, transport = make_client()
    with pytest.raises(ValidationError) as exc:
        client.list_deposits(start_time=1508198532000)
    assert exc.value.field == "endTime"
    assert transport.calls == []


def test_get_deposit_address(make_client):
    body = {
        "address": "0xbf1f86b3c8ff4f8cbfc195e9713b6f0000000000",
        "success": True,
        "tag": "1231212",
        "coin": "ETH",
        "url": "https://etherscan.io/address/0xbf1f86b3c8ff4f8cbfc195e9713b6f0000000000",
    }
    client, transport = make_client((200, json.dumps(body)))
    res = client.get_deposit_address("ETH")

    _, path, query, _ = _sent(transport)
    assert path == "/sapi/v1/capital/deposit/address"
    assert query.get("coin") == "ETH"
    assert "network" not in query
    assert res.address == "0xbf1f86b3c8ff4f8cbfc195e9713b6f0000000000"
    assert res.tag == "1231212"
    assert res.coin == "ETH"
    assert res.url == "https://etherscan.io/address/0xbf1f86b3c8ff4f8cbfc195e9713b6f0000000000"


def test_get_deposit_address_requires_coin(make_client):
    client, transport = make_client()
    with pytest.raises(ValidationError):
        client.get_deposit_address("")
    assert transport.calls == []


# ---------- bswap ----------
def test_list_swap_pools_is_unsigned(make_client):
    pools = [{"poolId": 2, "poolName": "BUSD/USDT", "assets": ["BUSD", "USDT"]}]
    client, transport = make_client((200, json.dumps(pools)))
    out = client.list_swap_pools()

    req = transport.calls[0]
    assert req.full_url == "https://api.binance.com/sapi/v1/bswap/pools"
    assert "X-MBX-APIKEY" not in req.headers
    assert out[0].pool_id == 2
    assert out[0].assets == ["BUSD", "USDT"]


def test_request_quote(make_client):
    quote = {
        "quoteAsset": "USDT",
        "baseAsset": "BUSD",
        "quoteQty": 300000,
        "baseQty": 299975,
        "price": 1.00008334,
        "slippage": 0.00007245,
        "fee": 120,
    }
    client, transport = make_client((200, json.dumps(quote)))
    res = client.request_quote("USDT", "BUSD", 300000)

    _, path, query, _ = _sent(transport)
    assert path == "/sapi/v1/bswap/quote"
    assert query.get("quoteQty") == "300000"
    assert res.base_qty == 299975.0
    assert res.fee == 120.0


def test_swap_history_sends_swap_id(make_client):
    history = [
        {
            "swapId": 2314,
            "swapTime": 1565770342148,
            "status": 1,
            "quoteAsset": "USDT",
            "baseAsset": "BUSD",
            "quoteQty": 300000,
            "baseQty": 299975,
            "price": 1.00008334,
            "fee": 120,
        }
    ]
    client, transport = make_client((200, json.dumps(history)))
    out = client.swap_history(swap_id=2314, limit=10)

    _, _, query, _ = _sent(transport)
    assert query.get("swapId") == "2314"
    assert query.get("limit") == "10"
    assert "status" not in query
    assert out[0].swap_id == 2314
    assert out[0].price == 1.00008334


def test_liquidity_information(make_client):
    body = [
        {
            "poolId": 2,
            "poolName": "BUSD/USDT",
            "updateTime": 1565769342148,
            "liquidity": {"BUSD": 100000315.79, "USDT": 99999245.54},
            "share": {
                "shareAmount": 12415,
                "sharePercentage": 0.00006207,
                "asset": {"BUSD": 6207.02, "USDT": 6206.95},
            },
        }
    ]
    client, transport = make_client((200, json.dumps(body)))
    out = client.liquidity_information(pool_id=2)

    _, _, query, _ = _sent(transport)
    assert query.get("poolId") == "2"
    assert out[0].liquidity["USDT"] == 99999245.54
    assert out[0].share.share_amount == 12415
    assert out[0].share.asset["BUSD"] == 6207.02


def test_add_liquidity_uses_form_body(make_client):
    client, transport = make_client((200, '{"operationId":12341}'))
    op = client.add_liquidity(2, "USDT", 1.5)

    req, path, query, form = _sent(transport)
    assert req.method == "POST"
    assert path == "/sapi/v1/bswap/liquidityAdd"
    assert form.to_dict() == {"asset": ["USDT"], "poolId": ["2"], "quantity": ["1.5"]}
    assert "poolId" not in query
    assert op == 12341


def test_remove_liquidity_sends_repeated_assets_in_query(make_client):
    client, transport = make_client((200, '{"operationId":12342}'))
    op = client.remove_liquidity(2, "COMBINATION", 0.5, assets=["USDT", "BUSD"])

    req, path, query, form = _sent(transport)
    assert path == "/sapi/v1/bswap/liquidityRemove"
    assert query.get_all("asset") == ["USDT", "BUSD"]
    assert form.get("type") == "COMBINATION"
    assert form.get("shareAmount") == "0.5"
    assert req.full_url.split("?", 1)[1].startswith("asset=USDT&asset=BUSD&timestamp=")
    assert op == 12342


def test_liquidity_operations(make_client):
    body = [
        {
            "operationId": 12341,
            "poolId": 2,
            "poolName": "BUSD/USDT",
            "operation": "ADD",
            "status": 1,
            "updateTime": 1565769342148,
            "shareAmount": 10.1,
        }
    ]
    client, transport = make_client((200, json.dumps(body)))
    out = client.liquidity_operations(pool_id=2, operation=OperationType.ADD)

    _, path, query, _ = _sent(transport)
    assert path == "/sapi/v1/bswap/liquidityOps"
    assert query.get("operation") == "ADD"
    assert out[0].operation == "ADD"
    assert out[0].share_amount == 10.1


# ---------- broker ----------
def test_enable_futures_sub_account(make_client):
    client, transport = make_client(
        (200, '{"subaccountId":"367537027503685633","enableFutures":true,"updateTime":1570801523523}')
    )
    res = client.enable_futures_sub_account("367537027503685633")

    req, path, query, _ = _sent(transport)
    assert req.method == "POST"
    assert path == "/sapi/v1/broker/subAccount/futures"
    assert query.get("futures") == "true"
    assert res.enable_futures is True
    assert res.update_time == 1570801523523


def test_enable_margin_sub_account(make_client):
    client, transport = make_client((200, '{"subaccountId":"1","enableMargin":true,"updateTime":1}'))
    res = client.enable_margin_sub_account("1")

    _, path, query, _ = _sent(transport)
    assert path == "/sapi/v1/broker/subAccount/margin"
    assert query.get("margin") == "true"
    assert res.enable_margin is True


def test_create_sub_account_api_key(make_client):
    body = {
        "subaccountId": "1",
        "apiKey": "vmPUZE6mv9SD5VNHk4HlWFsOr6aKE2zvsw0MuIgwCIPy6utIco14y7Ju91duEh8A",
        "secretKey": "NhqPtmdSJYdKjVHjA7PZj4Mge3R5YNiP1e3UZjInClVN65XAbvqqM6A7H5fATj0j",
        "canTrade": True,
        "marginTrade": False,
        "futuresTrade": False,
    }
    client, transport = make_client((200, json.dumps(body)))
    res = client.create_sub_account_api_key(CreateApiKeyRequest(sub_account_id="1", can_trade=True))

    _, _, query, _ = _sent(transport)
    assert query.get("canTrade") == "true"
    assert query.get("marginTrade") == "false"
    assert res.can_trade is True
    assert res.secret_key == body["secretKey"]


def test_create_sub_account_api_key_requires_id(make_client):
    client, transport = make_client()
    with pytest.raises(ValidationError) as exc:
        client.create_sub_account_api_key(CreateApiKeyRequest())
    assert exc.value.field == "subAccountId"
    assert transport.calls == []


def test_delete_sub_account_api_key(make_client):
    client, transport = make_client((200, "{}"))
    assert client.delete_sub_account_api_key(DeleteSubApiKeyRequest("1", "KEY")) is None

    req, path, query, _ = _sent(transport)
    assert req.method == "DELETE"
    assert path == "/sapi/v1/broker/subAccountApi"
    assert query.get("subAccountApiKey") == "KEY"


def test_delete_sub_account_api_key_requires_key(make_client):
    client, transport = make_client()
    with pytest.raises(ValidationError) as exc:
        client.delete_sub_account_api_key(DeleteSubApiKeyRequest(sub_account_id="1"))
    assert exc.value.field == "subAccountApiKey"
    assert transport.calls == []


def test_change_sub_account_api_permission(make_client):
    client, transport = make_client(
        (200, '{"subaccountId":"1","apiKey":"KEY","canTrade":true,"marginTrade":true,"futuresTrade":false}')
    )
    res = client.change_sub_account_api_permission(
        ChangeApiPermissionRequest("1", "KEY", can_trade=True, margin_trade=True)
    )

    _, path, query, _ = _sent(transport)
    assert path == "/sapi/v1/broker/subAccountApi/permission"
    assert query.get("marginTrade") == "true"
    assert res.margin_trade is True


def test_change_sub_account_commission(make_client):
    client, transport = make_client(
        (
            200,
            '{"subaccountId":"1","makerCommission":0.0015,"takerCommission":0.002,'
            '"marginMakerCommission":-1,"marginTakerCommission":-1}',
        )
    )
    res = client.change_sub_account_commission(
        ChangeCommissionRequest("1", maker_commission=0.0015, taker_commission=0.002)
    )

    _, path, query, _ = _sent(transport)
    assert path == "/sapi/v1/broker/subAccountApi/commission"
    assert query.get("makerCommission") == "0.0015"
    assert res.taker_commission == 0.002
    assert res.margin_maker_commission == -1.0


def test_sub_account_transfer(make_client):
    client, transport = make_client((200, '{"txnId":"2966662589","clientTranId":"abc"}'))
    res = client.sub_account_transfer(
        SubAccountTransferRequest(to_id="2", asset="USDT", amount=10.5, client_transfer_id="abc")
    )

    _, path, query, _ = _sent(transport)
    assert path == "/sapi/v1/broker/transfer"
    assert query.get("toId") == "2"
    assert "fromId" not in query
    assert query.get("amount") == "10.5"
    assert query.get("clientTranId") == "abc"
    assert res.txn_id == "2966662589"


@pytest.mark.parametrize(
    "req, field",
    [
        (SubAccountTransferRequest(from_id="1", amount=1), "asset"),
        (SubAccountTransferRequest(from_id="1", asset="USDT"), "amount"),
    ],
)
def test_sub_account_transfer_mandatory_fields(make_client, req, field):
    client, transport = make_client()
    with pytest.raises(ValidationError) as exc:
        client.sub_account_transfer(req)
    assert exc.value.field == field
    assert transport.calls == []


def test_transfer_history(make_client):
    body = [
        {
            "fromId": "1",
            "toId": "2",
            "asset": "BTC",
            "qty": "0.1",
            "time": 1544433328000,
            "txnId": "2966662589",
            "clientTranId": "",
            "status": "SUCCESS",
        }
    ]
    client, transport = make_client((200, json.dumps(body)))
    out = client.transfer_history(req=SubAccountTransferHistoryRequest(from_id="1", limit=50))

    req, _, query, _ = _sent(transport)
    assert req.method == "GET"
    assert query.get("fromId") == "1"
    assert query.get("limit") == "50"
    assert "page" not in query
    assert out[0].qty == "0.1"
    assert out[0].status == "SUCCESS"


# ---------- positional options ----------
@pytest.mark.parametrize(
    "call, body, absent",
    [
        (lambda c: c.liquidity_information(with_recv_window(5000)), "[]", "poolId"),
        (lambda c: c.get_deposit_address("ETH", with_recv_window(5000)), "{}", "network"),
        (lambda c: c.transfer_history(with_recv_window(5000)), "[]", "fromId"),
    ],
)
def test_positional_option_is_not_taken_as_optional_argument(make_client, call, body, absent):
    client, transport = make_client((200, body))
    call(client)

    _, _, query, _ = _sent(transport)
    assert query.get("recvWindow") == "5000"
    assert absent not in query


def test_remove_liquidity_takes_positional_option_and_keyword_assets(make_client):
    client, transport = make_client((200, '{"operationId":12343}'))
    op = client.remove_liquidity(2, "SINGLE", 0.5, with_recv_window(5000), assets=["USDT"])

    _, _, query, form = _sent(transport)
    assert query.get("recvWindow") == "5000"
    assert query.get_all("asset") == ["USDT"]
    assert form.get("type") == "SINGLE"
    assert op == 12343
