"""
SDK 异常类型定义

提供详细的错误信息和类型，方便用户处理各种错误情况。
"""

from typing import Optional, Dict, Any, Union


class MolViewError(Exception):
    """
    MolView SDK 基础异常类

    所有 SDK 异常都继承自此类，可用于捕获所有 SDK 相关错误。

    Example:
        ```python
        try:
            molecule = client.find_molecule("water")
        except MolViewError as e:
            print(f"SDK error: {e}")
        ```
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[Union[str, int]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code!r})"


class APIError(MolViewError):
    """
    API 请求错误

    当 API 返回非成功状态码时抛出。

    Attributes:
        status_code: HTTP 状态码
        request_id: 请求 ID（如果有）
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        code: Optional[Union[str, int]] = None,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code=code, details=details)
        self.status_code = status_code
        self.request_id = request_id

    def __str__(self) -> str:
        base = f"[HTTP {self.status_code}]"
        if self.code:
            base += f" [{self.code}]"
        base += f" {self.message}"
        if self.request_id:
            base += f" (request_id: {self.request_id})"
        return base


class MoleculeNotFoundError(APIError):
    """
    分子未找到错误

    Attributes:
        key: 查找用的分子 ID 或名称
    """

    def __init__(
        self,
        key: Union[int, str],
        *,
        message: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message or f"Molecule not found: {key}",
            status_code=404,
            code="MOLECULE_NOT_FOUND",
            request_id=request_id,
        )
        self.key = key


class ValidationError(APIError):
    """
    请求验证错误

    请求参数或分子结构不合法时抛出。

    Attributes:
        field: 出错字段（如果服务端给出）
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 400,
        field: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message,
            status_code=status_code,
            code="VALIDATION_ERROR",
            request_id=request_id,
            details={"field": field},
        )
        self.field = field


class ServerError(APIError):
    """
    服务器内部错误

    服务器发生内部错误（包括 AI 回答失败）时抛出。
    """

    def __init__(
        self,
        message: str = "Internal server error",
        *,
        status_code: int = 500,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message,
            status_code=status_code,
            code="INTERNAL_ERROR",
            request_id=request_id,
        )


class ConnectionError(MolViewError):
    """
    连接错误

    无法连接到 API 服务器或请求超时时抛出。
    """

    def __init__(self, message: str = "Failed to connect to server"):
        super().__init__(message, code="CONNECTION_ERROR")


class ChatPendingError(MolViewError):
    """
    问答进行中

    同一会话已有未完成的提问时再次提交会抛出。

    Attributes:
        molecule_id: 会话对应的分子 ID
    """

    def __init__(self, molecule_id: int):
        super().__init__(
            f"A question about molecule {molecule_id} is still pending",
            code="CHAT_PENDING",
        )
        self.molecule_id = molecule_id
