"""空投接口客户端：登录挑战签名与资格查询。"""

import asyncio
import random
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from config import SOLANA_CHAIN_TAG, CheckerConfig
from errors import AuthFailed, EligibilityQueryFailed, RateLimited, TransportError
from models import AuthChallenge, EligibilityResult, WalletIdentity
from wallet_service import sign_message

HTTP_TOO_MANY_REQUESTS = 429


class AirdropClient:
    """
    封装与资格服务的全部 HTTP 交互，单个实例在一次运行内共享连接。

    :param config: 只读运行配置（地址、请求头、重试参数）
    :param transport: 可选的 httpx 传输层，测试时替换为 MockTransport
    """

    def __init__(self, config: CheckerConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.config = config
        self._client = httpx.AsyncClient(
            headers=config.headers,
            timeout=config.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "AirdropClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _retry_delay(self, attempt: int, response: httpx.Response) -> float:
        """指数退避加抖动，服务端给出更长的 Retry-After 时以其为准。"""
        cfg = self.config
        delay = min(cfg.retry_delay * (2 ** (attempt - 1)), cfg.max_retry_delay)
        if cfg.retry_jitter:
            delay *= 1 + random.uniform(-cfg.retry_jitter, cfg.retry_jitter)
        retry_after = response.headers.get("retry-after")
        if retry_after:
            try:
                delay = max(delay, min(float(retry_after), cfg.max_retry_delay))
            except ValueError:
                pass  # HTTP 日期格式不处理
        return max(delay, 0.0)

    async def _request(self, action: str, method: str, url: str, **kwargs: Any) -> Any:
        """发送请求并解析 JSON；429 时按配置有限次重试。"""
        attempts = self.config.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.request(method, url, **kwargs)
            except httpx.RequestError as exc:
                raise TransportError(None, f"{type(exc).__name__}: {exc}", action) from exc

            if response.status_code == HTTP_TOO_MANY_REQUESTS:
                if attempt == attempts:
                    break
                delay = self._retry_delay(attempt, response)
                logger.warning(f"{action}: 触发限流 (第 {attempt}/{attempts} 次)，{delay:.1f}s 后重试")
                await asyncio.sleep(delay)
                continue

            if not response.is_success:
                raise TransportError(response.status_code, response.text, action)
            try:
                return response.json()
            except ValueError as exc:
                raise TransportError(response.status_code, response.text, action) from exc

        raise RateLimited(action, attempts)

    async def get_auth_message(self) -> AuthChallenge:
        """获取一次性登录挑战。"""
        data = await self._request("getting auth message", "GET", self.config.auth_message_url)
        if not isinstance(data, dict) or not isinstance(data.get("message"), str) or "signingDate" not in data:
            raise AuthFailed("auth message response is missing message or signingDate")
        return AuthChallenge(message=data["message"], signing_date=str(data["signingDate"]))

    async def get_auth_token(self, signature: str, signing_date: str, wallet: str) -> Dict[str, Any]:
        body = {
            "signature": signature,
            "signingDate": signing_date,
            "type": SOLANA_CHAIN_TAG,
            "wallet": wallet,
        }
        data = await self._request("getting auth token", "POST", self.config.auth_token_url, json=body)
        if not isinstance(data, dict):
            raise AuthFailed("auth token response is not an object")
        return data

    async def authenticate(self, identity: WalletIdentity) -> None:
        """挑战-签名-换取令牌；仅 Solana 钱包需要。令牌本身不保留。"""
        if not identity.is_solana() or not identity.can_sign():
            raise AuthFailed("only Solana wallets with a private key can authenticate")
        challenge = await self.get_auth_message()
        signature = sign_message(challenge.message, identity.signing_key)
        token = await self.get_auth_token(signature, challenge.signing_date, identity.address)
        # 缺少 isValid 一律视为失败
        if token.get("isValid") is not True:
            raise AuthFailed("Invalid token")

    async def check_eligibility(self, address: str) -> EligibilityResult:
        """查询地址的空投总量与类别。"""
        data = await self._request("checking eligibility", "POST", self.config.eligibility_url, json=[address])
        if not isinstance(data, dict):
            raise EligibilityQueryFailed("response is not an object")
        total = data.get("total")
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            raise EligibilityQueryFailed(f"unexpected total: {total!r}")
        categories = data.get("categories")
        if categories is None:
            categories = []
        if not isinstance(categories, list):
            raise EligibilityQueryFailed(f"unexpected categories: {categories!r}")
        return EligibilityResult(
            address=address,
            eligible=total > 0,
            token_count=total,
            categories=categories,
        )
