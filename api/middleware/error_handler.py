"""
错误码与异常处理

异常到 HTTP 状态的映射:
- MoleculeNotFoundError  -> 404
- RequestValidationError -> 400
- MalformedStructure     -> 400
- MissingMoleculeError   -> 500
- UpstreamFailure        -> 500
- 其他异常               -> 500
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from api.schemas.response import error_response
from core.config import get_settings
from core.llm.client import UpstreamFailure
from core.molecules.errors import MalformedStructure, InvalidGeometryArgument
from core.store.memory_store import MissingMoleculeError

logger = structlog.get_logger(__name__)


class ErrorCode:
    """错误码定义"""
    # 通用错误 (40xxx)
    BAD_REQUEST = 40000
    STRUCTURE_INVALID = 40001
    PARAMETER_INVALID = 40002
    MOLECULE_NOT_FOUND = 40401

    # 服务器错误 (50xxx)
    INTERNAL_ERROR = 50000
    UPSTREAM_FAILURE = 50001
    MISSING_MOLECULE = 50002


class MoleculeNotFoundError(Exception):
    """分子未找到"""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Molecule not found: {key}")


def _json_error(status_code: int, **kwargs) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_response(**kwargs))


async def molecule_not_found_handler(request: Request, exc: MoleculeNotFoundError):
    """分子未找到异常处理"""
    logger.warning("molecule_not_found", key=str(exc.key), path=request.url.path)
    return _json_error(
        404,
        message="Molecule not found",
        code=ErrorCode.MOLECULE_NOT_FOUND,
        error_type="MoleculeNotFoundError",
        detail=str(exc),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """请求体校验失败 -> 400"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None
    logger.warning("request_validation_failed", path=request.url.path, errors=len(errors), field=field)
    return _json_error(
        400,
        message="Invalid request",
        code=ErrorCode.PARAMETER_INVALID,
        error_type="ValidationError",
        detail=first.get("msg", "Invalid request"),
        field=field,
    )


async def malformed_structure_handler(request: Request, exc: MalformedStructure):
    """结构不合法 -> 400"""
    logger.warning("malformed_structure", path=request.url.path, error=str(exc), atom_id=exc.atom_id)
    return _json_error(
        400,
        message="Malformed structure",
        code=ErrorCode.STRUCTURE_INVALID,
        error_type="MalformedStructure",
        detail=str(exc),
    )


async def invalid_geometry_argument_handler(request: Request, exc: InvalidGeometryArgument):
    """几何参数非法 -> 400"""
    logger.warning("invalid_geometry_argument", path=request.url.path, error=str(exc))
    return _json_error(
        400,
        message="Invalid geometry parameter",
        code=ErrorCode.PARAMETER_INVALID,
        error_type="InvalidGeometryArgument",
        detail=str(exc),
    )


async def missing_molecule_handler(request: Request, exc: MissingMoleculeError):
    """对话引用的分子不存在 -> 500"""
    logger.error("chat_missing_molecule", path=request.url.path, molecule_id=exc.molecule_id)
    return _json_error(
        500,
        message="Molecule not found",
        code=ErrorCode.MISSING_MOLECULE,
        error_type="MissingMoleculeError",
        detail=str(exc),
    )


async def upstream_failure_handler(request: Request, exc: UpstreamFailure):
    """LLM 调用失败 -> 500"""
    logger.error("upstream_failure", path=request.url.path, model=exc.model, error=str(exc))
    return _json_error(
        500,
        message="Failed to get response from AI",
        code=ErrorCode.UPSTREAM_FAILURE,
        error_type="UpstreamFailure",
        detail=str(exc),
    )


async def global_exception_handler(request: Request, exc: Exception):
    """全局异常处理器"""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )
    return _json_error(
        500,
        message="Internal server error",
        code=ErrorCode.INTERNAL_ERROR,
        error_type="InternalError",
        detail=str(exc) if get_settings().debug else "Unexpected error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """注册全部异常处理器"""
    app.add_exception_handler(MoleculeNotFoundError, molecule_not_found_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(MalformedStructure, malformed_structure_handler)
    app.add_exception_handler(InvalidGeometryArgument, invalid_geometry_argument_handler)
    app.add_exception_handler(MissingMoleculeError, missing_molecule_handler)
    app.add_exception_handler(UpstreamFailure, upstream_failure_handler)
    app.add_exception_handler(Exception, global_exception_handler)
