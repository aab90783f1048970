from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from app.api.http_errors import to_http_exception
from app.core.concurrency import run_in_thread
from app.core.deps import get_settings_service
from app.core.errors import ValidationError
from app.logger import logger
from app.models import OkResponse, Settings, SettingsSavedResponse
from app.security import require_admin

router = APIRouter()


@router.get("/api/auth", response_model=OkResponse, dependencies=[Depends(require_admin)])
async def check_auth():
    return OkResponse()


@router.get("/api/settings", response_model=Settings)
async def get_settings(service=Depends(get_settings_service)):
    return await run_in_thread(service.get)


@router.post("/api/settings", response_model=SettingsSavedResponse, dependencies=[Depends(require_admin)])
async def save_settings(
    payload: Dict[str, Any] = Body(...),
    service=Depends(get_settings_service),
):
    try:
        settings = await run_in_thread(service.set, payload)
    except ValidationError as exc:
        logger.warning(f"设置保存被拒绝: field={exc.field}, reason={exc.reason}")
        raise to_http_exception(exc)
    return SettingsSavedResponse(settings=settings)
