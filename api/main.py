"""
FastAPI 应用主入口

create_app() 构建应用并注入存储与 LLM 客户端；
模块级 app 供 uvicorn 直接加载。
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import metrics
from api.routers import molecules, chat
from api.middleware.logging import LoggingMiddleware
from api.middleware.error_handler import register_exception_handlers
from api.schemas.response import success_response
from core.config import Settings, get_settings
from core.llm.client import LLMClient
from core.store.memory_store import MoleculeStore, seed_predefined_molecules
from logging_config import setup_logging, get_logger

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[MoleculeStore] = None,
    llm_client: Optional[LLMClient] = None,
) -> FastAPI:
    """
    构建 FastAPI 应用

    Args:
        settings: 配置（默认读取环境变量）
        store: 预先构建的存储（默认启动时新建并写入内置分子）
        llm_client: LLM 客户端（默认按配置创建）
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        应用生命周期管理

        启动时:
        - 创建分子存储并写入内置分子
        - 创建 LLM 客户端

        关闭时:
        - 关闭 LLM 客户端连接
        """
        logger.info(
            "application_starting",
            app_name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment,
        )

        app.state.start_time = datetime.utcnow()

        if getattr(app.state, "store", None) is None:
            app.state.store = MoleculeStore()
            if settings.seed_predefined:
                seed_predefined_molecules(app.state.store)

        if getattr(app.state, "llm_client", None) is None:
            app.state.llm_client = LLMClient(settings.llm)

        logger.info("application_started", config=settings.display_config())

        yield

        logger.info("application_shutting_down")
        await app.state.llm_client.close()
        logger.info("application_stopped")

    app = FastAPI(
        title=settings.app_name,
        description="MolView - molecule search, 3D geometry and AI chat",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.llm_client = llm_client

    # ===== 中间件 =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    # ===== 路由 =====

    api_prefix = settings.api_prefix

    @app.get("/health")
    async def health_check_root():
        """根路径健康检查"""
        return success_response(
            data={
                "status": "healthy",
                "version": settings.app_version,
            }
        )

    @app.get(f"{api_prefix}/health")
    async def health_check():
        """API 健康检查"""
        start_time = getattr(app.state, "start_time", None)
        uptime = (datetime.utcnow() - start_time).total_seconds() if start_time else 0
        store = app.state.store

        return success_response(
            data={
                "status": "healthy",
                "version": settings.app_version,
                "uptime_seconds": round(uptime, 2),
                "environment": settings.environment,
                "molecules": store.molecule_count if store else 0,
            }
        )

    app.include_router(molecules.router, prefix=f"{api_prefix}/molecules", tags=["Molecules"])
    app.include_router(chat.router, prefix=f"{api_prefix}/chat", tags=["Chat"])
    app.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])

    # ===== 全局异常处理 =====

    register_exception_handlers(app)

    return app


setup_logging()
app = create_app()


# ===== 开发模式入口 =====

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
