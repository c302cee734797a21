"""检查流程的异常类型。"""

from typing import Optional


class CheckerError(Exception):
    pass


class InvalidKeyFormat(CheckerError, ValueError):
    """输入无法按 key_format 指定的编码解码。"""

    def __init__(self, key_format: str, reason: str):
        self.key_format = key_format
        self.reason = reason
        super().__init__(f"Invalid {key_format} format private key: {reason}")


class InvalidKeyMaterial(CheckerError, ValueError):
    """字节已解码，但无法构成有效密钥对。"""

    def __init__(self, key_format: str, reason: str):
        self.key_format = key_format
        self.reason = reason
        super().__init__(f"Invalid private key ({key_format}): {reason}")


class TransportError(CheckerError):
    """非 2xx 响应或网络层失败；网络失败时 status 为 None。"""

    def __init__(self, status: Optional[int], body: str, action: str = "request"):
        self.status = status
        self.body = body
        self.action = action
        if status is None:
            message = f"Error {action}: {body}"
        else:
            message = f"Error {action}: HTTP error! status: {status}\nResponse: {body}"
        super().__init__(message)


class RateLimited(CheckerError):
    def __init__(self, action: str, attempts: int):
        self.action = action
        self.attempts = attempts
        super().__init__(f"Error {action}: still rate limited after {attempts} attempts")


class AuthFailed(CheckerError):
    def __init__(self, reason: str = "Invalid token"):
        self.reason = reason
        super().__init__(f"Authentication failed: {reason}")


class EligibilityQueryFailed(CheckerError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Error checking eligibility: {reason}")
