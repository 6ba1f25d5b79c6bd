"""
MolView Python SDK

一个用于与 MolView 服务进行交互的 Python 客户端库。

基本用法:
    ```python
    from molview_client import MolViewClient, ChatSession

    with MolViewClient("http://localhost:8000") as client:
        water = client.find_molecule("water")

        session = ChatSession(client, water.id)
        session.ask("Why is the water molecule bent?")
        print(session.format_transcript())
    ```
"""

from .client import MolViewClient
from .chat import ChatSession
from .exceptions import (
    MolViewError,
    APIError,
    MoleculeNotFoundError,
    ValidationError,
    ServerError,
    ConnectionError,
    ChatPendingError,
)
from .models import MoleculeInfo, ChatInfo

__version__ = "0.1.0"

__all__ = [
    # Clients
    "MolViewClient",
    "ChatSession",
    # Exceptions
    "MolViewError",
    "APIError",
    "MoleculeNotFoundError",
    "ValidationError",
    "ServerError",
    "ConnectionError",
    "ChatPendingError",
    # Models
    "MoleculeInfo",
    "ChatInfo",
    # Version
    "__version__",
]
