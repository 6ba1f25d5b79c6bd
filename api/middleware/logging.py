"""
请求日志中间件

为每个请求绑定 request_id，记录开始/结束事件并更新请求指标。
指标按路由模板（如 /api/molecules/{molecule_id}）聚合，而不是实际路径。
"""
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match
import structlog

from api.metrics import increment_request

logger = structlog.get_logger(__name__)

# 探活与抓取请求只在 DEBUG 级别记录
QUIET_PATHS = frozenset({"/health", "/metrics"})


# 未命中任何路由的请求统一计入该标签，避免扫描路径撑大指标
UNMATCHED_ROUTE = "unmatched"


def _match_template(routes, scope, prefix: str = "") -> Optional[str]:
    """在路由表中查找请求对应的完整路径模板（含 include/mount 前缀）"""
    partial = None
    for route in routes:
        match, child_scope = route.matches(scope)
        if match == Match.NONE:
            continue
        path = prefix + getattr(route, "path", "")
        sub_routes = getattr(route, "routes", None)
        if sub_routes:
            path = _match_template(sub_routes, {**scope, **child_scope}, path)
        if match == Match.FULL:
            return path
        # 方法不匹配（405）仍归到同一路由
        partial = partial or path
    return partial


def _route_template(request: Request) -> str:
    return _match_template(request.app.router.routes, request.scope) or UNMATCHED_ROUTE


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求日志中间件"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or f"req_{uuid.uuid4().hex[:12]}"
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info
        started = time.perf_counter()
        log("request_started", method=request.method, path=path)

        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - started
            increment_request(500, _route_template(request), elapsed)
            logger.exception(
                "request_failed",
                method=request.method,
                path=path,
                duration_ms=round(elapsed * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")
            raise

        elapsed = time.perf_counter() - started
        increment_request(response.status_code, _route_template(request), elapsed)
        log(
            "request_completed",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
        )
        structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed * 1000:.2f}ms"
        return response
