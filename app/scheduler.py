"""
定时任务调度器 - 倒计时结束自动生成排行榜快照
"""
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import load_app_config
from app.core.deps import build_snapshot_service
from app.core.metrics import log_job_metric, measure_ms
from app.core.scheduler_runtime import get_scheduler_singleton, should_start_scheduler_runtime
from app.database import Database
from app.jobs.countdown_jobs import run_countdown_snapshot_check, seconds_until_deadline
from app.logger import logger
from app.rainbet_client import RainbetClient

COUNTDOWN_JOB_ID = "countdown_snapshot_check"


class LeaderboardScheduler:
    """排行榜定时任务调度器"""

    def __init__(self, config=None):
        self.config = config or load_app_config()
        self.scheduler = BackgroundScheduler(timezone="UTC")
        self.db = Database(self.config.db_path)
        self.client = RainbetClient.from_config(self.config)

    def build_snapshot_service(self):
        return build_snapshot_service(self.db, self.client, self.config)

    def check_countdown_snapshot(self):
        """检查倒计时并按需生成快照"""
        job_status = "success"
        with measure_ms("scheduler.countdown_snapshot_check") as metric:
            try:
                result = run_countdown_snapshot_check(self.build_snapshot_service())
                if not result.get("ok") and result.get("reason") in ("busy", "upstream_error"):
                    job_status = "failed"
            except Exception as exc:
                job_status = "failed"
                logger.error(f"倒计时检查任务异常: {exc}")
        log_job_metric(job_name="countdown_snapshot_check", status=job_status, snapshot=metric)

    def start(self):
        """启动定时任务"""
        interval = self.config.countdown_check_interval_seconds
        self.scheduler.add_job(
            func=self.check_countdown_snapshot,
            trigger=IntervalTrigger(seconds=interval),
            id=COUNTDOWN_JOB_ID,
            name="倒计时自动快照",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=interval,
            replace_existing=True,
        )
        self.scheduler.start()
        remaining = seconds_until_deadline(self.build_snapshot_service())
        logger.info(
            "倒计时快照任务已启动: "
            f"每 {interval}s 检查一次, "
            f"remaining={'未设置' if remaining is None else f'{remaining}s'}"
        )

    def stop(self):
        """停止定时任务"""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("定时任务已停止")

    def get_next_run_time(self):
        """获取下次运行时间"""
        job = self.scheduler.get_job(COUNTDOWN_JOB_ID)
        if job:
            return job.next_run_time
        return None


def should_start_scheduler(config=None) -> tuple[bool, str]:
    return should_start_scheduler_runtime(config or load_app_config())


def get_scheduler() -> LeaderboardScheduler:
    """获取调度器单例"""
    return get_scheduler_singleton(LeaderboardScheduler)
