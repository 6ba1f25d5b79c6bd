"""
MolView 同步客户端

提供所有 API 的同步调用接口。
"""

from __future__ import annotations

from typing import Optional, Dict, Any, List, Union
from urllib.parse import quote

import httpx

from .models import MoleculeInfo, ChatInfo
from .exceptions import (
    APIError,
    MoleculeNotFoundError,
    ValidationError,
    ConnectionError as SDKConnectionError,
    ServerError,
)


class MolViewClient:
    """
    MolView 同步客户端

    Example:
        ```python
        with MolViewClient("http://localhost:8000") as client:
            water = client.find_molecule("water")
            chat = client.ask("Why is water bent?", water.id)
            print(chat.answer)
        ```

    Args:
        base_url: API 服务器地址
        timeout: 请求超时时间（秒）
        max_retries: 连接失败时的重试次数（不重试已发出的请求）
        transport: 自定义 httpx 传输层（测试时注入）
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 60.0,
        max_retries: int = 0,
        api_prefix: str = "/api",
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix.rstrip("/")
        self.timeout = timeout

        headers = {
            "User-Agent": "MolViewClient/0.1.0",
            "Accept": "application/json",
        }

        self._client = httpx.Client(
            timeout=timeout,
            headers=headers,
            transport=transport or httpx.HTTPTransport(retries=max_retries),
        )

    def _url(self, path: str) -> str:
        """构建完整 URL"""
        if path.startswith("/health"):
            return f"{self.base_url}{path}"
        return f"{self.base_url}{self.api_prefix}{path}"

    def _handle_error(self, response: httpx.Response, not_found_key: Optional[Union[int, str]] = None) -> None:
        """处理错误响应"""
        try:
            data = response.json()
            error = data.get("error") or {}
            message = error.get("detail") or data.get("message") or data.get("detail") or response.text
            request_id = data.get("request_id")
            field = error.get("field")
        except ValueError:
            message = response.text or f"HTTP {response.status_code}"
            request_id = None
            field = None

        status = response.status_code

        if status == 404:
            raise MoleculeNotFoundError(
                not_found_key if not_found_key is not None else "unknown",
                message=message,
                request_id=request_id,
            )
        elif status in (400, 422):
            raise ValidationError(message, status_code=status, field=field, request_id=request_id)
        elif status >= 500:
            raise ServerError(message, status_code=status, request_id=request_id)
        else:
            raise APIError(message, status_code=status, request_id=request_id)

    def _request(
        self,
        method: str,
        path: str,
        not_found_key: Optional[Union[int, str]] = None,
        **kwargs,
    ) -> Any:
        """发送请求并返回 JSON"""
        try:
            response = self._client.request(method, self._url(path), **kwargs)
        except httpx.TimeoutException as e:
            raise SDKConnectionError(f"Request timed out: {e}")
        except httpx.TransportError as e:
            raise SDKConnectionError(f"Failed to connect to {self.base_url}: {e}")

        if not response.is_success:
            self._handle_error(response, not_found_key)

        return response.json()

    # ===== 健康检查 =====

    def health_check(self) -> Dict[str, Any]:
        """检查服务健康状态"""
        return self._request("GET", "/health")

    def is_healthy(self) -> bool:
        """检查服务是否健康"""
        try:
            result = self.health_check()
            return result.get("data", {}).get("status") == "healthy"
        except Exception:
            return False

    # ===== 分子 =====

    def get_molecule(self, molecule_id: int) -> MoleculeInfo:
        """
        按 ID 获取分子

        Raises:
            MoleculeNotFoundError: 分子不存在
        """
        data = self._request("GET", f"/molecules/{molecule_id}", not_found_key=molecule_id)
        return MoleculeInfo.from_dict(data)

    def find_molecule(self, name: str) -> MoleculeInfo:
        """
        按名称查找分子（大小写不敏感）

        Raises:
            MoleculeNotFoundError: 分子不存在
        """
        data = self._request("GET", f"/molecules/name/{quote(name, safe='')}", not_found_key=name)
        return MoleculeInfo.from_dict(data)

    def list_molecules(self) -> List[MoleculeInfo]:
        """列出全部分子"""
        return [MoleculeInfo.from_dict(m) for m in self._request("GET", "/molecules")]

    def create_molecule(self, name: str, formula: str, structure: Dict[str, Any]) -> MoleculeInfo:
        """
        创建分子

        Args:
            name: 分子名称
            formula: 化学式
            structure: {atoms: [...], bonds: [...], lonePairs?: [...]}

        Raises:
            ValidationError: 结构不合法
        """
        payload = {"name": name, "formula": formula, "structure": structure}
        return MoleculeInfo.from_dict(self._request("POST", "/molecules", json=payload))

    def get_geometry(self, molecule_id: int, bond_length_factor: float = 1.0) -> Dict[str, Any]:
        """获取服务端计算的渲染几何"""
        return self._request(
            "GET",
            f"/molecules/{molecule_id}/geometry",
            not_found_key=molecule_id,
            params={"bondLengthFactor": bond_length_factor},
        )

    # ===== 问答 =====

    def ask(self, question: str, molecule_id: int) -> ChatInfo:
        """
        针对分子提问

        Raises:
            ServerError: 分子不存在或 AI 回答失败
        """
        data = self._request("POST", "/chat", json={"question": question, "moleculeId": molecule_id})
        return ChatInfo.from_dict(data)

    def list_chats(self, molecule_id: int) -> List[ChatInfo]:
        """按创建顺序获取分子的问答历史"""
        return [ChatInfo.from_dict(c) for c in self._request("GET", f"/chat/{molecule_id}")]

    # ===== 生命周期 =====

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "MolViewClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
