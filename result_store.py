"""输入私钥文件读取与运行结果持久化。"""

import json
import os
from pathlib import Path
from typing import List

from models import RunSummary

RESULTS_FILE_PREFIX = "pengu-check"


def read_private_keys(path: Path) -> List[str]:
    """按行读取输入文件，去除首尾空白并忽略空行。"""
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip()]


def results_filename(timestamp: str) -> str:
    # 冒号在部分文件系统上不合法
    return f"{RESULTS_FILE_PREFIX}-{timestamp.replace(':', '-')}.json"


def prepare_results_dir(results_dir: Path) -> None:
    """创建结果目录并确认可写，失败时抛出 OSError。"""
    results_dir.mkdir(parents=True, exist_ok=True)
    if not os.access(results_dir, os.W_OK):
        raise PermissionError(f"结果目录不可写: {results_dir}")


def save_summary(summary: RunSummary, results_dir: Path) -> Path:
    """将汇总写入结果目录，目录不存在时自动创建。"""
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / results_filename(summary.timestamp)
    path.write_text(json.dumps(summary.to_record(), ensure_ascii=False, indent=2), encoding="utf-8")
    return path
