import secrets
from typing import Callable, List

from app.core.concurrency import SingleFlightGuard
from app.core.errors import ConflictError, NotFoundError
from app.core.metrics import log_job_metric, measure_ms
from app.core.time import to_iso_z, utc_now
from app.logger import logger
from app.models import Snapshot, SnapshotDetail, SnapshotSummary
from app.services.leaderboard_service import price_rows

# 进程级单飞锁：API 触发与倒计时任务共用
capture_guard = SingleFlightGuard("快照任务")


def new_snapshot_id(moment) -> str:
    # 时间前缀保证可排序，且不含冒号和句点，可直接作为文件名
    return f"{moment.strftime('%Y%m%dT%H%M%S%fZ')}-{secrets.token_hex(3)}"


class SnapshotService:
    def __init__(
        self,
        settings_service,
        leaderboard_service,
        repo,
        guard: SingleFlightGuard = capture_guard,
        now_fn: Callable = utc_now,
    ):
        self.settings_service = settings_service
        self.leaderboard_service = leaderboard_service
        self.repo = repo
        self.guard = guard
        self.now_fn = now_fn

    @property
    def client(self):
        return self.leaderboard_service.client

    def capture(self, source: str = "admin") -> Snapshot:
        with self.guard.hold(source):
            with measure_ms("snapshot.capture", source=source) as metric:
                snapshot = self._capture_locked(source)
            log_job_metric(job_name="snapshot.capture", status="ok", snapshot=metric)
            return snapshot

    def _capture_locked(self, source: str) -> Snapshot:
        settings = self.settings_service.get()
        window = self.leaderboard_service.resolve_window(settings)
        entries = self.client.fetch_ranked(window, settings.page_size)

        taken = self.now_fn()
        snapshot = Snapshot(
            id=new_snapshot_id(taken),
            takenAt=to_iso_z(taken),
            period=settings.period,
            range={"start": window.start.isoformat(), "end": window.end.isoformat()},
            bannerTitle=settings.banner_title,
            socials=settings.socials,
            prizeConfig=settings.prize_config,
            pageSize=settings.page_size,
            data=entries,
            image=None,
        )
        self.repo.insert_snapshot(snapshot.model_dump(by_alias=True, mode="json"))
        logger.info(
            "排行榜快照已保存: "
            f"id={snapshot.id}, source={source}, "
            f"range={snapshot.range.start}~{snapshot.range.end}, rows={len(snapshot.data)}"
        )
        return snapshot

    def list(self, limit: int = 100) -> List[SnapshotSummary]:
        return [SnapshotSummary.model_validate(row) for row in self.repo.list_snapshot_summaries(limit)]

    def get(self, snapshot_id: str) -> Snapshot:
        row = self.repo.get_snapshot(snapshot_id)
        if row is None:
            raise NotFoundError(f"snapshot {snapshot_id} not found")
        return Snapshot.model_validate(row)

    def attach_image(self, snapshot_id: str, image: str) -> Snapshot:
        if self.repo.attach_image(snapshot_id, image):
            logger.info(f"快照图片已关联: id={snapshot_id}")
            return self.get(snapshot_id)

        current = self.get(snapshot_id)
        if current.image == image:
            return current
        raise ConflictError(f"snapshot {snapshot_id} already has an image")

    def build_render_payload(self, snapshot: Snapshot) -> SnapshotDetail:
        data = snapshot.model_dump(by_alias=True)
        data["data"] = price_rows(snapshot.data, snapshot.prize_config)
        return SnapshotDetail.model_validate(data)

    def has_snapshot_since(self, taken_at: str) -> bool:
        return self.repo.has_snapshot_since(taken_at)
