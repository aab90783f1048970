from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.http_errors import to_http_exception
from app.core.concurrency import run_in_thread
from app.core.deps import get_leaderboard_service
from app.core.errors import UpstreamError, ValidationError
from app.logger import logger
from app.models import LeaderboardResponse, RangeWindow

router = APIRouter()


@router.get("/api/range", response_model=RangeWindow)
async def get_range(
    period: Optional[str] = Query(None, description="weekly / biweekly / monthly"),
    service=Depends(get_leaderboard_service),
):
    try:
        return await run_in_thread(service.get_range, period)
    except ValidationError as exc:
        raise to_http_exception(exc)


@router.get("/api/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    period: Optional[str] = Query(None, description="weekly / biweekly / monthly"),
    range_: Optional[str] = Query(None, alias="range", description="period 的旧参数名"),
    limit: Optional[int] = Query(None, description="返回条数，限制在 1-100"),
    service=Depends(get_leaderboard_service),
):
    try:
        return await run_in_thread(service.read, period or range_, limit)
    except ValidationError as exc:
        raise to_http_exception(exc)
    except UpstreamError as exc:
        logger.error(f"排行榜读取失败: {exc.message}")
        raise to_http_exception(exc)
