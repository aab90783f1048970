from fastapi import APIRouter, Depends, Query

from app.api.http_errors import to_http_exception
from app.core.concurrency import run_in_thread
from app.core.deps import get_snapshot_service
from app.core.errors import ConflictError, NotFoundError, UpstreamError
from app.logger import logger
from app.models import (
    ImageAttachRequest,
    Snapshot,
    SnapshotCreatedResponse,
    SnapshotDetail,
    SnapshotListResponse,
)
from app.security import require_admin

router = APIRouter()


@router.get("/api/past", response_model=SnapshotListResponse)
async def list_snapshots(
    limit: int = Query(100, ge=1, le=1000),
    service=Depends(get_snapshot_service),
):
    items = await run_in_thread(service.list, limit)
    return SnapshotListResponse(data=items)


@router.get("/api/past/{snapshot_id}", response_model=SnapshotDetail)
async def get_snapshot(snapshot_id: str, service=Depends(get_snapshot_service)):
    try:
        snapshot = await run_in_thread(service.get, snapshot_id)
    except NotFoundError as exc:
        raise to_http_exception(exc)
    return service.build_render_payload(snapshot)


@router.post("/api/snapshot", response_model=SnapshotCreatedResponse, dependencies=[Depends(require_admin)])
async def create_snapshot(service=Depends(get_snapshot_service)):
    try:
        snapshot = await run_in_thread(service.capture, "admin")
    except ConflictError as exc:
        raise to_http_exception(exc, conflict_status=429)
    except UpstreamError as exc:
        logger.error(f"快照生成失败: {exc.message}")
        raise to_http_exception(exc)
    return SnapshotCreatedResponse(id=snapshot.id, snapshot=snapshot)


@router.put("/api/past/{snapshot_id}/image", response_model=Snapshot, dependencies=[Depends(require_admin)])
async def attach_snapshot_image(
    snapshot_id: str,
    payload: ImageAttachRequest,
    service=Depends(get_snapshot_service),
):
    try:
        return await run_in_thread(service.attach_image, snapshot_id, payload.image)
    except NotFoundError as exc:
        raise to_http_exception(exc)
    except ConflictError as exc:
        raise to_http_exception(exc, conflict_status=409)
