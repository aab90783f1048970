class LeaderboardError(Exception):
    """排行榜核心异常基类"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LeaderboardError):
    """设置写入校验失败，field 指明具体字段"""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.reason = message

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.reason}


class UpstreamError(LeaderboardError):
    """上游接口不可达、返回非成功状态或数据无法解析"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConflictError(LeaderboardError):
    """快照任务已在执行，或图片引用已存在"""


class NotFoundError(LeaderboardError):
    """快照 id 不存在"""
