"""
结构化日志配置

服务端、命令行与 3D 查看器共用同一套 structlog 配置:
- json: 每行一个 JSON 事件，适合采集
- console: 彩色单行输出，适合本地开发与命令行

每条事件都带上 service 字段；请求期间由中间件绑定 request_id。
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from core.config import LoggingSettings, get_settings

# 只在 WARNING 及以上输出的第三方 logger
NOISY_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "openai",
    "pyvista",
    "vtk",
)

_HANDLER_MARK = "_molview_handler"


def _add_service(service: str) -> Processor:
    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        return event_dict
    return processor


def _build_processors(log_format: str, service: str) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _add_service(service),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def _remove_installed_handlers() -> None:
    """移除上一次 setup_logging 安装的 handler，重复调用不会叠加输出"""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)
            handler.close()


def _install_handler(handler: logging.Handler, level: int) -> None:
    setattr(handler, _HANDLER_MARK, True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    logging.getLogger().addHandler(handler)


def setup_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
    settings: Optional[LoggingSettings] = None,
) -> None:
    """
    配置 structlog 与标准库 logging

    Args:
        level: 日志级别，默认取 LOG_LEVEL
        log_format: json 或 console，默认取 LOG_FORMAT
        log_file: 额外写入的轮转日志文件，默认取 LOG_FILE_PATH
        settings: 日志配置（默认读取全局配置）
    """
    app_settings = get_settings()
    settings = settings or app_settings.logging

    level = (level or settings.level).upper()
    log_format = log_format or settings.format
    log_file = log_file or settings.file_path
    numeric_level = getattr(logging, level)

    structlog.configure(
        processors=_build_processors(log_format, app_settings.app_name.lower()),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.getLogger().setLevel(numeric_level)
    _remove_installed_handlers()
    _install_handler(logging.StreamHandler(sys.stdout), numeric_level)
    if log_file:
        _install_handler(
            RotatingFileHandler(
                log_file,
                maxBytes=settings.max_size_mb * 1024 * 1024,
                backupCount=settings.backup_count,
                encoding="utf-8",
            ),
            numeric_level,
        )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取 logger 实例，name 通常为 __name__"""
    return structlog.get_logger(name)
