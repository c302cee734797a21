"""钱包解析与签名服务，支持 Solana 与以太坊两类私钥输入。"""

import json
import re
from typing import Callable, List, Optional, Tuple

from base58 import b58decode, b58encode
from eth_account import Account
from eth_keys import constants as eth_constants
from nacl.signing import SigningKey

from config import ChainType
from errors import InvalidKeyFormat, InvalidKeyMaterial
from models import KeyFormat, WalletIdentity

# 曲线阶常量
SECP256K1_N = eth_constants.SECPK1_N

# Solana 完整私钥 = 32 字节种子 + 32 字节公钥
SOLANA_SECRET_KEY_SIZE = 64
SOLANA_SEED_SIZE = 32

_ETH_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX64_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")
_HEX128_RE = re.compile(r"^[0-9a-fA-F]{128}$")
# Solana 地址为 32 字节公钥的 Base58 编码
_SOLANA_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
SOLANA_ADDRESS_SIZE = 32


def _solana_identity(secret: bytes, key_format: str) -> WalletIdentity:
    """校验 64 字节 Solana 私钥并导出 Base58 地址。"""
    if len(secret) != SOLANA_SECRET_KEY_SIZE:
        raise InvalidKeyMaterial(key_format, f"expected {SOLANA_SECRET_KEY_SIZE} bytes, got {len(secret)}")
    signing_key = SigningKey(secret[:SOLANA_SEED_SIZE])
    public_key = bytes(signing_key.verify_key)
    if public_key != secret[SOLANA_SEED_SIZE:]:
        raise InvalidKeyMaterial(key_format, "public key does not match secret key")
    address = b58encode(public_key).decode("utf-8")
    return WalletIdentity(
        chain_type=ChainType.SOLANA,
        address=address,
        key_format=key_format,
        signing_key=signing_key,
    )


def _is_solana_address(text: str) -> bool:
    return bool(_SOLANA_ADDRESS_RE.match(text)) and len(b58decode(text)) == SOLANA_ADDRESS_SIZE


def _is_bare_address(text: str) -> bool:
    return bool(_ETH_ADDRESS_RE.match(text)) or _is_solana_address(text)


def _parse_bare_address(text: str) -> WalletIdentity:
    """仅地址输入：无签名能力，只能查询资格。"""
    chain_type = ChainType.ETHEREUM if _ETH_ADDRESS_RE.match(text) else ChainType.SOLANA
    return WalletIdentity(chain_type=chain_type, address=text, key_format=KeyFormat.BARE_ADDRESS)


def _parse_json_array(text: str) -> WalletIdentity:
    try:
        values = json.loads(text)
    except ValueError as exc:
        raise InvalidKeyFormat(KeyFormat.JSON_ARRAY, str(exc)) from exc
    if not isinstance(values, list):
        raise InvalidKeyFormat(KeyFormat.JSON_ARRAY, "not a JSON array")
    for value in values:
        # bool 是 int 的子类，需单独排除
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
            raise InvalidKeyFormat(KeyFormat.JSON_ARRAY, f"not a byte value: {value!r}")
    return _solana_identity(bytes(values), KeyFormat.JSON_ARRAY)


def _parse_hex64(text: str) -> WalletIdentity:
    """以太坊私钥，密钥材料不保留（以太坊流程不需要登录）。"""
    key_hex = text[2:] if text.startswith("0x") else text
    key_bytes = bytes.fromhex(key_hex)
    if not 0 < int.from_bytes(key_bytes, "big") < SECP256K1_N:
        raise InvalidKeyMaterial(KeyFormat.HEX64, "private key out of secp256k1 range")
    try:
        acct = Account.from_key(key_bytes)
    except ValueError as exc:
        raise InvalidKeyMaterial(KeyFormat.HEX64, str(exc)) from exc
    return WalletIdentity(chain_type=ChainType.ETHEREUM, address=acct.address, key_format=KeyFormat.HEX64)


def _parse_hex128(text: str) -> WalletIdentity:
    return _solana_identity(bytes.fromhex(text), KeyFormat.HEX128)


def _parse_base58(text: str) -> WalletIdentity:
    if not text:
        raise InvalidKeyFormat(KeyFormat.BASE58, "empty input")
    try:
        secret = b58decode(text)
    except ValueError as exc:
        raise InvalidKeyFormat(KeyFormat.BASE58, str(exc)) from exc
    return _solana_identity(secret, KeyFormat.BASE58)


# 检测顺序即优先级：各编码可能重叠，先匹配者生效
KEY_MATCHERS: List[Tuple[str, Callable[[str], bool], Callable[[str], WalletIdentity]]] = [
    (KeyFormat.BARE_ADDRESS, _is_bare_address, _parse_bare_address),
    (KeyFormat.JSON_ARRAY, lambda s: s.startswith("[") and s.endswith("]"), _parse_json_array),
    (KeyFormat.HEX64, lambda s: bool(_HEX64_RE.match(s)), _parse_hex64),
    (KeyFormat.HEX128, lambda s: bool(_HEX128_RE.match(s)), _parse_hex128),
    (KeyFormat.BASE58, lambda s: True, _parse_base58),
]


def detect_key_format(raw: str) -> str:
    """返回输入命中的第一个编码格式。"""
    text = raw.strip()
    for key_format, matches, _ in KEY_MATCHERS:
        if matches(text):
            return key_format
    raise InvalidKeyFormat("unknown", "no matching format")  # pragma: no cover - Base58 兜底


def parse_private_key(raw: str) -> WalletIdentity:
    """
    解析单行私钥或地址输入。

    :param raw: 原始输入行
    :return: 钱包身份（链类型、地址与可选的签名密钥）
    :raises InvalidKeyFormat: 编码无法解码
    :raises InvalidKeyMaterial: 解码成功但不是有效密钥
    """
    text = raw.strip()
    key_format = detect_key_format(text)
    decoder = next(d for f, _, d in KEY_MATCHERS if f == key_format)
    return decoder(text)


def sign_message(message: str, signing_key: Optional[SigningKey]) -> str:
    """对挑战消息做 Ed25519 分离签名，返回 0x 前缀的小写十六进制。"""
    if signing_key is None:
        raise ValueError("该钱包没有可用的签名密钥")
    signed = signing_key.sign(message.encode("utf-8"))
    return "0x" + signed.signature.hex()
