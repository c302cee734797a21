"""数据模型定义，包含钱包身份、认证挑战与检查结果。"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from nacl.signing import SigningKey

from config import ChainType

# 解析失败时结果中使用的占位地址
UNKNOWN_WALLET = "Unknown"


class KeyFormat:
    """私钥输入编码的字符串枚举，按检测优先级排列。"""

    BARE_ADDRESS = "address"
    JSON_ARRAY = "array"
    HEX64 = "hex64"
    HEX128 = "hex"
    BASE58 = "base58"


@dataclass(frozen=True)
class WalletIdentity:
    """解析后的钱包身份；签名密钥不参与 repr 与比较，避免泄漏。"""

    chain_type: str
    address: str
    key_format: str
    signing_key: Optional[SigningKey] = field(default=None, repr=False, compare=False)

    def is_solana(self) -> bool:
        """是否为 Solana 链身份。"""
        return self.chain_type == ChainType.SOLANA

    def can_sign(self) -> bool:
        """是否持有可用于登录签名的密钥。"""
        return self.signing_key is not None


@dataclass(frozen=True)
class AuthChallenge:
    message: str
    signing_date: str


@dataclass(frozen=True)
class EligibilityResult:
    address: str
    eligible: bool
    token_count: int
    categories: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class CheckSucceeded:
    """单个钱包检查成功的结果。"""

    address: str
    chain_type: str
    eligible: bool
    token_count: int
    categories: List[Any] = field(default_factory=list)

    @classmethod
    def from_eligibility(cls, chain_type: str, result: EligibilityResult) -> "CheckSucceeded":
        return cls(
            address=result.address,
            chain_type=chain_type,
            eligible=result.eligible,
            token_count=result.token_count,
            categories=list(result.categories),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "wallet": self.address,
            "status": "success",
            "chain": self.chain_type,
            "eligible": self.eligible,
            "tokens": self.token_count,
            "categories": list(self.categories),
        }


@dataclass(frozen=True)
class CheckFailed:
    """单个钱包检查失败的结果。"""

    address: str
    message: str

    def to_record(self) -> Dict[str, Any]:
        return {"wallet": self.address, "status": "error", "error": self.message}


WalletCheckResult = Union[CheckSucceeded, CheckFailed]


@dataclass(frozen=True)
class RunSummary:
    """一次运行的汇总：计数与按输入顺序排列的全部结果。"""

    timestamp: str
    results: List[WalletCheckResult]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if isinstance(r, CheckSucceeded))

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if isinstance(r, CheckFailed))

    @property
    def eligible(self) -> int:
        return sum(1 for r in self.results if isinstance(r, CheckSucceeded) and r.eligible)

    def to_record(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "eligible": self.eligible,
            "results": [r.to_record() for r in self.results],
        }
