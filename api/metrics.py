"""
Prometheus 指标

进程内计数器，以 Prometheus 文本格式暴露在 /metrics:
- HTTP 请求数（按状态码、按路由模板）与平均耗时
- 通过 API 创建的分子数
- 问答结果（success / fallback / failed）
- 存储中的分子与对话数量
"""
from collections import Counter
from typing import Iterable, List, Optional, Tuple
import time

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from core.config import get_settings

router = APIRouter()

METRIC_PREFIX = "molview"

CHAT_OUTCOMES = ("success", "fallback", "failed")

_metrics_state = {
    "requests_total": 0,
    "requests_by_status": Counter(),
    "requests_by_endpoint": Counter(),
    "request_duration_sum": 0.0,
    "start_time": time.time(),
    "molecules_created_total": 0,
    "chats_by_outcome": Counter(),
}


def increment_request(status_code: int, endpoint: str, duration: float):
    """记录一次 HTTP 请求（duration 单位为秒）"""
    _metrics_state["requests_total"] += 1
    _metrics_state["requests_by_status"][str(status_code)] += 1
    _metrics_state["requests_by_endpoint"][endpoint] += 1
    _metrics_state["request_duration_sum"] += duration


def increment_molecule_created():
    _metrics_state["molecules_created_total"] += 1


def increment_chat(outcome: str):
    """记录问答结果: success, fallback, failed"""
    if outcome not in CHAT_OUTCOMES:
        raise ValueError(f"Unknown chat outcome: {outcome}")
    _metrics_state["chats_by_outcome"][outcome] += 1


def _format_prometheus_metric(name: str, value, help_text: str, metric_type: str = "gauge", labels: Optional[dict] = None) -> str:
    """格式化单个样本"""
    return "\n".join(_format_family(name, help_text, metric_type, [(labels, value)]))


def _format_family(
    name: str,
    help_text: str,
    metric_type: str,
    samples: Iterable[Tuple[Optional[dict], object]],
) -> List[str]:
    """同一指标的 HELP/TYPE 只输出一次，后接全部样本"""
    lines = [f"# HELP {name} {help_text}", f"# TYPE {name} {metric_type}"]
    for labels, value in samples:
        if labels:
            label_str = ",".join(f'{k}="{v}"' for k, v in labels.items())
            lines.append(f"{name}{{{label_str}}} {value}")
        else:
            lines.append(f"{name} {value}")
    return lines


def _labelled(counter: Counter, label: str) -> List[Tuple[dict, int]]:
    return [({label: key}, count) for key, count in sorted(counter.items())]


def _collect_store_metrics(request: Request) -> List[str]:
    store = getattr(request.app.state, "store", None)
    if store is None:
        return []
    return [
        _format_prometheus_metric(f"{METRIC_PREFIX}_molecules", store.molecule_count, "Number of molecules in the store"),
        _format_prometheus_metric(f"{METRIC_PREFIX}_chats", store.chat_count, "Number of chat records in the store"),
    ]


@router.get("", response_class=PlainTextResponse)
async def get_metrics(request: Request):
    """Prometheus 指标端点"""
    settings = get_settings()
    state = _metrics_state
    blocks = [
        _format_prometheus_metric(
            f"{METRIC_PREFIX}_info",
            1,
            "Application information",
            labels={"version": settings.app_version, "environment": settings.environment},
        ),
        _format_prometheus_metric(
            f"{METRIC_PREFIX}_uptime_seconds",
            round(time.time() - state["start_time"], 2),
            "Application uptime in seconds",
            metric_type="counter",
        ),
        _format_prometheus_metric(
            f"{METRIC_PREFIX}_http_requests_total",
            state["requests_total"],
            "Total number of HTTP requests",
            metric_type="counter",
        ),
    ]

    if state["requests_by_status"]:
        blocks.append("\n".join(_format_family(
            f"{METRIC_PREFIX}_http_requests_by_status",
            "HTTP requests by status code",
            "counter",
            _labelled(state["requests_by_status"], "status"),
        )))
    if state["requests_by_endpoint"]:
        blocks.append("\n".join(_format_family(
            f"{METRIC_PREFIX}_http_requests_by_endpoint",
            "HTTP requests by route",
            "counter",
            _labelled(state["requests_by_endpoint"], "endpoint"),
        )))
    if state["requests_total"]:
        blocks.append(_format_prometheus_metric(
            f"{METRIC_PREFIX}_http_request_duration_seconds_avg",
            round(state["request_duration_sum"] / state["requests_total"], 6),
            "Average HTTP request duration in seconds",
        ))

    blocks.append(_format_prometheus_metric(
        f"{METRIC_PREFIX}_molecules_created_total",
        state["molecules_created_total"],
        "Total number of molecules created through the API",
        metric_type="counter",
    ))
    blocks.append("\n".join(_format_family(
        f"{METRIC_PREFIX}_chats_total",
        "Chat requests by outcome",
        "counter",
        [({"outcome": outcome}, state["chats_by_outcome"][outcome]) for outcome in CHAT_OUTCOMES],
    )))

    blocks.extend(_collect_store_metrics(request))
    return "\n\n".join(blocks) + "\n"
