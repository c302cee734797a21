import asyncio
import json
from typing import Dict, List, Optional

import httpx
import pytest
from base58 import b58encode
from loguru import logger
from nacl.signing import SigningKey

from config import CheckerConfig

TEST_BASE_URL = "https://airdrop.test/v0.1/airdrops/pengu"

# 公开的测试向量，不对应任何真实资产
ETH_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
ETH_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


def make_solana_secret(seed_byte: int = 7) -> bytes:
    signing_key = SigningKey(bytes([seed_byte]) * 32)
    return signing_key.encode() + bytes(signing_key.verify_key)


def solana_address(secret: bytes) -> str:
    return b58encode(secret[32:]).decode("utf-8")


def bare_address(i: int) -> str:
    return "0x" + f"{i + 1:040x}"


class FakeAirdropService:
    """按接口约定模拟远端服务，记录所有请求。"""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.totals: Dict[str, int] = {}
        self.categories: Dict[str, list] = {}
        self.delays: Dict[str, float] = {}
        self.rate_limit: Dict[str, int] = {}
        self.failures: Dict[str, httpx.Response] = {}
        self.token_valid = True
        self.signatures: List[str] = []

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.rsplit("/pengu", 1)[-1]

        if self.rate_limit.get(path, 0) > 0:
            self.rate_limit[path] -= 1
            return httpx.Response(429, text="Too Many Requests")
        if path in self.failures:
            return self.failures[path]

        if path == "/auth/message":
            return httpx.Response(200, json={"message": "Sign in to Pengu", "signingDate": "2024-12-09T10:00:00.000Z"})
        if path == "/auth/token":
            body = json.loads(request.content)
            self.signatures.append(body["signature"])
            return httpx.Response(200, json={"isValid": self.token_valid, "token": "t"})
        if path == "/eligibility":
            address = json.loads(request.content)[0]
            delay = self.delays.get(address)
            if delay:
                await asyncio.sleep(delay)
            return httpx.Response(
                200,
                json={"total": self.totals.get(address, 0), "categories": self.categories.get(address, [])},
            )
        return httpx.Response(404, text="not found")

    def transport(self) -> httpx.MockTransport:
        # 通过 lambda 间接调用，便于测试中替换 handler
        return httpx.MockTransport(lambda request: self.handler(request))


@pytest.fixture
def fake_service() -> FakeAirdropService:
    return FakeAirdropService()


@pytest.fixture
def fast_config() -> CheckerConfig:
    return CheckerConfig(
        base_url=TEST_BASE_URL,
        batch_delay=0,
        retry_delay=0,
        retry_jitter=0,
        max_attempts=3,
        wallet_timeout=5,
    )


@pytest.fixture
def log_messages():
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def signing_key() -> Optional[SigningKey]:
    return SigningKey(make_solana_secret()[:32])
