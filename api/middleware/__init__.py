# API 中间件
from .logging import LoggingMiddleware
from .error_handler import ErrorCode, MoleculeNotFoundError, register_exception_handlers

__all__ = [
    "LoggingMiddleware",
    "ErrorCode",
    "MoleculeNotFoundError",
    "register_exception_handlers",
]
