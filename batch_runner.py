"""批量检查：按固定窗口并发执行单钱包流程，并保持输入顺序。"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

import httpx

from airdrop_client import AirdropClient
from config import CheckerConfig
from errors import CheckerError
from models import (
    UNKNOWN_WALLET,
    CheckFailed,
    CheckSucceeded,
    EligibilityResult,
    RunSummary,
    WalletCheckResult,
    WalletIdentity,
)
from wallet_service import parse_private_key

ProgressCallback = Callable[[int, int, WalletCheckResult], None]


def _address_of(raw: str) -> str:
    """尽力解析出地址用于失败结果展示，解析失败返回占位值。"""
    try:
        return parse_private_key(raw).address
    except CheckerError:
        return UNKNOWN_WALLET


def _min_timeout(*values: Optional[float]) -> Optional[float]:
    present = [v for v in values if v is not None]
    return min(present) if present else None


async def _query_identity(client: AirdropClient, identity: WalletIdentity) -> EligibilityResult:
    # 以太坊钱包与纯地址输入跳过登录
    if identity.is_solana() and identity.can_sign():
        await client.authenticate(identity)
    return await client.check_eligibility(identity.address)


async def check_wallet(
    client: AirdropClient,
    raw: str,
    timeout: Optional[float] = None,
) -> WalletCheckResult:
    """
    单钱包完整流程：解析 → (Solana 登录) → 资格查询。

    任何失败都转换为 CheckFailed，不向外抛出。
    """
    address = UNKNOWN_WALLET
    try:
        identity = parse_private_key(raw)
        address = identity.address
        result = await asyncio.wait_for(_query_identity(client, identity), timeout)
        return CheckSucceeded.from_eligibility(identity.chain_type, result)
    except asyncio.TimeoutError:
        return CheckFailed(address, f"Wallet check timed out after {timeout}s")
    except Exception as exc:  # noqa: BLE001
        return CheckFailed(address, str(exc) or type(exc).__name__)


async def run_batches(
    client: AirdropClient,
    raw_keys: Sequence[str],
    config: CheckerConfig,
    progress_cb: Optional[ProgressCallback] = None,
) -> List[WalletCheckResult]:
    """
    按 batch_size 划分窗口，窗口内并发、窗口间等待 batch_delay。

    :param client: 共享的接口客户端
    :param raw_keys: 已去除空行的输入
    :param config: 运行配置
    :param progress_cb: 进度回调，参数为 (序号, 总数, 结果)，每个钱包完成时调用
    :return: 与输入一一对应、顺序一致的结果列表
    """
    total = len(raw_keys)
    results: List[Optional[WalletCheckResult]] = [None] * total
    loop = asyncio.get_running_loop()
    started = loop.time()

    def _record(position: int, result: WalletCheckResult) -> None:
        results[position] = result
        if progress_cb:
            progress_cb(position + 1, total, result)

    async def _run_one(position: int, raw: str, timeout: Optional[float]) -> None:
        _record(position, await check_wallet(client, raw, timeout))

    for start in range(0, total, config.batch_size):
        remaining = None
        if config.run_deadline is not None:
            remaining = config.run_deadline - (loop.time() - started)
            if remaining <= 0:
                for position in range(start, total):
                    _record(position, CheckFailed(_address_of(raw_keys[position]), "Run deadline exceeded"))
                break

        timeout = _min_timeout(config.wallet_timeout, remaining)
        window = raw_keys[start:start + config.batch_size]
        await asyncio.gather(*(_run_one(start + i, raw, timeout) for i, raw in enumerate(window)))

        if start + config.batch_size < total:
            await asyncio.sleep(config.batch_delay)

    return [r for r in results if r is not None]


def iso_timestamp() -> str:
    """UTC 毫秒精度时间戳，形如 2024-12-09T10:00:00.000Z。"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def run_check(
    raw_keys: Sequence[str],
    config: CheckerConfig,
    progress_cb: Optional[ProgressCallback] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RunSummary:
    """执行一次完整运行并返回汇总。"""
    timestamp = iso_timestamp()
    async with AirdropClient(config, transport=transport) as client:
        results = await run_batches(client, raw_keys, config, progress_cb)
    return RunSummary(timestamp=timestamp, results=results)
