#!/usr/bin/env python
"""
启动 MolView API 服务器

使用方式:
    python scripts/run_server.py
    python scripts/run_server.py --port 9000 --log-format console --reload

分子与问答记录保存在进程内存中，因此总是单进程运行，重启后清空。
"""
import argparse
import os

import uvicorn

from core.config import get_settings
from logging_config import setup_logging, get_logger

logger = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="启动 MolView API 服务器")
    parser.add_argument("--host", default=None, help="监听地址（默认 API_HOST）")
    parser.add_argument("--port", type=int, default=None, help="监听端口（默认 API_PORT）")
    parser.add_argument("--reload", action="store_true", help="代码变更时自动重启")
    parser.add_argument("--log-format", choices=["json", "console"], default=None, help="日志格式")
    parser.add_argument("--no-seed", action="store_true", help="启动时不写入水和甲烷")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # 子进程（--reload）通过环境变量拿到同样的配置
    if args.log_format:
        os.environ["LOG_FORMAT"] = args.log_format
    if args.no_seed:
        os.environ["SEED_PREDEFINED"] = "false"
    get_settings.cache_clear()
    settings = get_settings()

    setup_logging()
    if not settings.llm.api_key:
        logger.warning("llm_api_key_missing", hint="set LLM_API_KEY to enable chat answers")

    uvicorn.run(
        "api.main:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload or settings.debug,
        workers=1,
        log_config=None,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
