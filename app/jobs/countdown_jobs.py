import time
from typing import Optional

from app.core.errors import ConflictError, UpstreamError
from app.core.time import parse_iso_instant, to_iso_z, utc_now
from app.logger import logger


def run_countdown_snapshot_check(snapshot_service, *, now=None) -> dict:
    """倒计时结束后自动生成一次快照；截止时间之后已有快照则跳过"""
    settings = snapshot_service.settings_service.get()
    deadline = parse_iso_instant(settings.countdown_end_iso)
    if deadline is None:
        return {"ok": False, "reason": "no_deadline"}

    now = now or utc_now()
    if now < deadline:
        return {"ok": False, "reason": "pending", "remaining_seconds": int((deadline - now).total_seconds())}

    deadline_iso = to_iso_z(deadline)
    if snapshot_service.has_snapshot_since(deadline_iso):
        return {"ok": False, "reason": "already_captured", "deadline": deadline_iso}

    started_at = time.perf_counter()
    logger.info(f"倒计时已结束，开始自动快照: deadline={deadline_iso}")
    try:
        snapshot = snapshot_service.capture(source="countdown")
    except ConflictError as exc:
        logger.warning(f"倒计时快照跳过: {exc.message}")
        return {"ok": False, "reason": "busy", "message": exc.message}
    except UpstreamError as exc:
        logger.error(f"倒计时快照失败，下次检查重试: {exc.message}")
        return {"ok": False, "reason": "upstream_error", "message": exc.message}

    logger.info(
        "倒计时快照完成: "
        f"id={snapshot.id}, rows={len(snapshot.data)}, "
        f"elapsed={time.perf_counter() - started_at:.2f}s"
    )
    return {"ok": True, "id": snapshot.id, "deadline": deadline_iso}


def seconds_until_deadline(snapshot_service, *, now=None) -> Optional[int]:
    settings = snapshot_service.settings_service.get()
    deadline = parse_iso_instant(settings.countdown_end_iso)
    if deadline is None:
        return None
    now = now or utc_now()
    return max(0, int((deadline - now).total_seconds()))
