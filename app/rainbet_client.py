"""
Rainbet affiliates REST client (read-only) for wager leaderboards.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import requests

from app.core.config import DEFAULT_RAINBET_API_URL, MAX_UPSTREAM_TIMEOUT_SECONDS
from app.core.errors import UpstreamError
from app.core.metrics import log_upstream_metric, measure_ms
from app.core.ranking import rank_affiliates
from app.logger import logger
from app.models import LeaderboardEntry, RangeWindow


class RainbetClient:
    """Stateless client: every call is an independent GET with a bounded timeout."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        range_url: Optional[str] = None,
        timeout_seconds: float = MAX_UPSTREAM_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key or ""
        self.base_url = base_url or DEFAULT_RAINBET_API_URL
        self.range_url = range_url or ""
        self.timeout_seconds = min(float(timeout_seconds), MAX_UPSTREAM_TIMEOUT_SECONDS)

    @classmethod
    def from_config(cls, config) -> "RainbetClient":
        return cls(
            api_key=config.rainbet_api_key,
            base_url=config.rainbet_api_url,
            range_url=config.rainbet_range_url,
            timeout_seconds=config.upstream_timeout_seconds,
        )

    @property
    def has_range_discovery(self) -> bool:
        return bool(self.range_url)

    def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        try:
            response = requests.get(url, params=params, timeout=self.timeout_seconds)
        except requests.exceptions.Timeout as exc:
            logger.error(f"Rainbet 请求超时({self.timeout_seconds}s): {exc.__class__.__name__}")
            raise UpstreamError(f"Rainbet request timed out after {self.timeout_seconds}s") from exc
        except requests.exceptions.RequestException as exc:
            logger.error(f"Rainbet 请求失败: {exc.__class__.__name__}")
            raise UpstreamError(f"Rainbet unreachable: {exc.__class__.__name__}") from exc

        if not response.ok:
            body = (response.text or "")[:200]
            logger.error(f"Rainbet 返回异常状态: status={response.status_code}, body={body}")
            raise UpstreamError(
                f"Rainbet error {response.status_code}: {body}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Rainbet 返回内容无法解析为 JSON")
            raise UpstreamError("Rainbet response is not valid JSON") from exc

    def fetch_affiliates(self, window: RangeWindow) -> List[Dict[str, Any]]:
        if not self.api_key:
            raise UpstreamError("RAINBET_API_KEY missing")

        params = {
            "start_at": window.start.isoformat(),
            "end_at": window.end.isoformat(),
            "key": self.api_key,
        }
        with measure_ms("rainbet.fetch_affiliates") as metric:
            payload = self._get_json(self.base_url, params)
        log_upstream_metric(name="rainbet.fetch_affiliates", snapshot=metric)

        if not isinstance(payload, dict) or not isinstance(payload.get("affiliates"), list):
            logger.error("Rainbet 返回结构异常: 缺少 affiliates 列表")
            raise UpstreamError("Rainbet response has no affiliates list")
        return payload["affiliates"]

    def fetch_ranked(self, window: RangeWindow, limit: int) -> List[LeaderboardEntry]:
        affiliates = self.fetch_affiliates(window)
        ranked = rank_affiliates(affiliates, limit)
        logger.info(
            "Rainbet 排行已获取: "
            f"range={window.start.isoformat()}~{window.end.isoformat()}, "
            f"raw={len(affiliates)}, ranked={len(ranked)}"
        )
        return ranked

    def fetch_range_hint(self) -> Dict[str, Any]:
        if not self.range_url:
            raise UpstreamError("RAINBET_RANGE_URL not configured")
        params = {"key": self.api_key} if self.api_key else {}
        payload = self._get_json(self.range_url, params)
        if not isinstance(payload, dict):
            raise UpstreamError("Rainbet range response is not an object")
        return payload
