"""应用入口，负责加载配置、读取私钥并输出检查汇总。"""

import asyncio
import sys
from pathlib import Path

from loguru import logger

from batch_runner import run_check
from config import CheckerConfig, load_config
from models import CheckSucceeded, RunSummary, WalletCheckResult
from result_store import prepare_results_dir, read_private_keys, save_summary

BANNER = "Pengu Airdrop Checker - Solana / Ethereum 钱包资格批量查询"
LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}"


def setup_logging(level: str = "INFO") -> None:
    """替换 loguru 默认输出，仅保留一个简洁的 stderr 通道。"""
    level = logger.level(level.upper()).name  # 未知级别抛出 ValueError
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)


def report_progress(position: int, total: int, result: WalletCheckResult) -> None:
    """每个钱包完成时输出一条进度。"""
    if isinstance(result, CheckSucceeded):
        if result.eligible:
            logger.info(f"✅ Wallet {position}/{total}: {result.address}")
            logger.info(f"   Tokens: {result.token_count}")
            logger.info(f"   Categories: {result.categories}")
        else:
            logger.info(f"❌ Wallet {position}/{total}: {result.address}")
            logger.info(f"   Tokens: {result.token_count}")
    else:
        logger.info(f"❌ Wallet {position}/{total}: {result.address}")
        logger.info(f"   Error: {result.message}")


def log_summary(summary: RunSummary) -> None:
    logger.info("Summary:")
    logger.info(f"Total Wallets: {summary.total}")
    logger.info(f"Successful: {summary.successful}")
    logger.info(f"Failed: {summary.failed}")
    logger.info(f"Eligible: {summary.eligible}")


def run(config: CheckerConfig) -> int:
    """执行一次检查，返回进程退出码。"""
    input_path = Path(config.input_file)
    try:
        raw_keys = read_private_keys(input_path)
    except FileNotFoundError:
        logger.error(f"未找到输入文件: {input_path.resolve()}")
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        logger.error(f"读取输入文件失败: {exc}")
        return 1

    # 结果目录不可用属于启动失败，须在联网前发现
    results_dir = Path(config.results_dir)
    try:
        prepare_results_dir(results_dir)
    except OSError as exc:
        logger.error(f"结果目录不可用: {exc}")
        return 1

    logger.info(f"Found {len(raw_keys)} wallet(s) to check")
    logger.info("Checking wallets in parallel...")
    summary = asyncio.run(run_check(raw_keys, config, progress_cb=report_progress))
    log_summary(summary)

    try:
        results_file = save_summary(summary, results_dir)
    except OSError as exc:
        logger.error(f"结果写入失败: {exc}")
        return 1
    logger.info(f"Results saved to: {results_file}")
    return 0


def run_app() -> None:
    """命令行入口，无参数。"""
    setup_logging()
    logger.info(BANNER)
    try:
        config = load_config()
        setup_logging(config.log_level)
    except ValueError as exc:
        logger.error(f"配置无效: {exc}")
        sys.exit(1)
    sys.exit(run(config))


if __name__ == "__main__":
    run_app()
