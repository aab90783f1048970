from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request

from app.api.leaderboard_api import router as leaderboard_api_router
from app.api.settings_api import router as settings_api_router
from app.api.snapshot_api import router as snapshot_api_router
from app.api.system_api import router as system_api_router
from app.core.metrics import log_api_metric, measure_ms
from app.logger import logger
from app.scheduler import get_scheduler, should_start_scheduler

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用启动/关闭"""
    should_start, reason = should_start_scheduler()
    if should_start:
        scheduler = get_scheduler()
        scheduler.start()
        app.state.scheduler = scheduler
    else:
        app.state.scheduler = None
        if reason == "missing_api_key":
            logger.warning("未配置 RAINBET_API_KEY，倒计时快照任务未启动")
        elif reason == "multi_worker_unsupported":
            logger.warning(
                "检测到多worker部署(WEB_CONCURRENCY/UVICORN_WORKERS > 1)，"
                "为避免重复快照已禁用内置scheduler。"
                "如需强制启用请设置 SCHEDULER_ALLOW_MULTI_WORKER=1。"
            )
        else:
            logger.info(f"倒计时快照任务未启用: reason={reason}")

    yield

    scheduler = getattr(app.state, "scheduler", None)
    if scheduler:
        scheduler.stop()
    app.state.scheduler = None


app = FastAPI(title="Wager Leaderboard", lifespan=lifespan)


@app.middleware("http")
async def api_metric_middleware(request: Request, call_next):
    with measure_ms("api.request") as metric:
        response = await call_next(request)
    log_api_metric(
        path=request.url.path,
        method=request.method,
        status_code=response.status_code,
        snapshot=metric,
    )
    return response


app.include_router(system_api_router)
app.include_router(settings_api_router)
app.include_router(leaderboard_api_router)
app.include_router(snapshot_api_router)
