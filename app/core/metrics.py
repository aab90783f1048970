from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import os
from time import perf_counter

from app.logger import logger

# 每类指标日志由独立环境变量开关控制，默认关闭
_METRIC_SWITCHES = {
    "api": "ENABLE_API_METRIC_LOG",
    "job": "ENABLE_JOB_METRIC_LOG",
    "upstream": "ENABLE_UPSTREAM_METRIC_LOG",
}


@dataclass
class MetricSnapshot:
    name: str
    started_at: float
    tags: dict[str, str] = field(default_factory=dict)
    elapsed_ms: float = 0.0


def _is_enabled(kind: str) -> bool:
    env_name = _METRIC_SWITCHES.get(kind)
    if not env_name:
        return False
    return os.getenv(env_name, "0").strip().lower() in ("1", "true", "yes")


@contextmanager
def measure_ms(name: str, **tags: object):
    snapshot = MetricSnapshot(
        name=name,
        started_at=perf_counter(),
        tags={k: str(v) for k, v in tags.items()},
    )
    try:
        yield snapshot
    finally:
        snapshot.elapsed_ms = max((perf_counter() - snapshot.started_at) * 1000.0, 0.0)


def _log_metric(kind: str, snapshot: MetricSnapshot, **fields: object):
    if not _is_enabled(kind):
        return
    parts = " ".join(f"{k}={v}" for k, v in {**snapshot.tags, **fields}.items())
    logger.info(
        "perf %s metric | name=%s %s elapsed_ms=%.2f",
        kind,
        snapshot.name,
        parts,
        snapshot.elapsed_ms,
    )


def log_api_metric(*, path: str, method: str, status_code: int, snapshot: MetricSnapshot):
    _log_metric("api", snapshot, path=path, method=method, status=status_code)


def log_job_metric(*, job_name: str, status: str, snapshot: MetricSnapshot):
    _log_metric("job", snapshot, job=job_name, status=status)


def log_upstream_metric(*, name: str, snapshot: MetricSnapshot):
    _log_metric("upstream", snapshot, call=name)
