"""全局配置，提供接口地址、固定请求头与用户设置文件加载。"""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from loguru import logger


class ChainType:
    """链类型字符串枚举，区分 Solana 与以太坊钱包。"""

    ETHEREUM = "Ethereum"
    SOLANA = "Solana"


# 接口要求的链标识（仅 Solana 需要登录）
SOLANA_CHAIN_TAG = "solana"

DEFAULT_BASE_URL = "https://api.clusters.xyz/v0.1/airdrops/pengu"

# 远端服务会过滤非浏览器请求，请求头须原样保留
COMMON_HEADERS: Dict[str, str] = {
    "accept": "*/*",
    "accept-language": "en-US,en;q=0.9,id;q=0.8",
    "priority": "u=1, i",
    "sec-ch-ua": '"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "cross-site",
    "sec-gpc": "1",
    "Referer": "https://claim.pudgypenguins.com/",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

# 用户设置文件与默认输入输出位置
USER_SETTINGS_FILE = Path("checker_settings.json")
DEFAULT_INPUT_FILE = "privatekey.txt"
DEFAULT_RESULTS_DIR = "results"


@dataclass(frozen=True)
class CheckerConfig:
    """检查器运行配置，构造后只读，显式传入各组件。"""

    base_url: str = DEFAULT_BASE_URL
    headers: Mapping[str, str] = field(default_factory=lambda: dict(COMMON_HEADERS))
    batch_size: int = 5
    batch_delay: float = 1.0
    max_attempts: int = 5
    retry_delay: float = 2.0
    max_retry_delay: float = 30.0
    retry_jitter: float = 0.1
    request_timeout: float = 30.0
    wallet_timeout: Optional[float] = 120.0
    run_deadline: Optional[float] = None
    input_file: str = DEFAULT_INPUT_FILE
    results_dir: str = DEFAULT_RESULTS_DIR
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        # 请求头复制为只读视图，调用方修改原字典不影响配置
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        if self.batch_size < 1:
            raise ValueError("batch_size 必须为正整数")
        if self.max_attempts < 1:
            raise ValueError("max_attempts 必须为正整数")

    @property
    def auth_message_url(self) -> str:
        return f"{self.base_url}/auth/message"

    @property
    def auth_token_url(self) -> str:
        return f"{self.base_url}/auth/token"

    @property
    def eligibility_url(self) -> str:
        return f"{self.base_url}/eligibility"


# 设置文件中允许覆盖的字段及其可接受类型
_OVERRIDABLE: Dict[str, Tuple[type, ...]] = {
    "base_url": (str,),
    "batch_size": (int,),
    "batch_delay": (int, float),
    "max_attempts": (int,),
    "retry_delay": (int, float),
    "max_retry_delay": (int, float),
    "retry_jitter": (int, float),
    "request_timeout": (int, float),
    "wallet_timeout": (int, float, type(None)),
    "run_deadline": (int, float, type(None)),
    "input_file": (str,),
    "results_dir": (str,),
    "log_level": (str,),
}


def _accepts(name: str, value: object) -> bool:
    """判断设置值的类型是否与字段匹配（bool 不视为数字）。"""
    return not isinstance(value, bool) and isinstance(value, _OVERRIDABLE[name])


def load_config(settings_path: Path = USER_SETTINGS_FILE) -> CheckerConfig:
    """
    读取本地设置文件并覆盖默认配置；文件不存在时直接返回默认值。

    损坏的文件或无法识别的字段只记录警告，不影响运行。
    """
    config = CheckerConfig()
    try:
        data = json.loads(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return config
    except (OSError, ValueError) as exc:
        logger.warning(f"设置文件 {settings_path} 无法解析，使用默认配置: {exc}")
        return config

    if not isinstance(data, dict):
        logger.warning(f"设置文件 {settings_path} 顶层必须为对象，使用默认配置")
        return config

    overrides = {}
    for name, value in data.items():
        if name not in _OVERRIDABLE:
            logger.warning(f"忽略未知设置项: {name}")
            continue
        if not _accepts(name, value):
            logger.warning(f"设置项 {name} 类型不正确，已忽略: {value!r}")
            continue
        overrides[name] = value
    # 取值范围不合法时由 __post_init__ 抛出 ValueError
    return replace(config, **overrides)
