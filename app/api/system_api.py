from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.concurrency import run_in_thread
from app.logger import read_logs
from app.models import LogsResponse, OkResponse
from app.security import require_admin

router = APIRouter()


@router.get("/api/health", response_model=OkResponse)
async def health():
    return OkResponse()


@router.get("/api/logs", response_model=LogsResponse, dependencies=[Depends(require_admin)])
async def get_logs(
    lines: int = Query(200, ge=1, le=5000, description="Number of log lines to return"),
    level: Optional[str] = Query(None, description="ERROR / WARNING / INFO"),
):
    log_lines = await run_in_thread(read_logs, lines, level)
    return LogsResponse(logs=log_lines)
