import pytest

from binance_client.client import BinanceClient
from binance_client.config import BinanceConfig
from binance_client.transport import RawResponse

NOW_MS = 1700000000000


class ScriptedTransport:
    """Replays canned responses and records every request it receives."""

    def __init__(self, *responses):
        self.responses = list(responses) or [(200, b"{}")]
        self.calls = []

    def execute(self, request, token=None):
        self.calls.append(request)
        status_code, body = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(body, str):
            body = body.encode("utf-8")
        return RawResponse(body=body, status_code=status_code)


@pytest.fixture
def make_client():
    def factory(*responses, **config):
        config.setdefault("api_key", "APIKEY")
        config.setdefault("secret_key", "SECRET")
        transport = ScriptedTransport(*responses)
        client = BinanceClient(BinanceConfig(**config), transport=transport, clock=lambda: NOW_MS)
        return client, transport

    return factory
