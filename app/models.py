from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CustomRange(CamelModel):
    enabled: bool = False
    start: str = ""
    end: str = ""


class Countdown(CamelModel):
    value: float = 7
    unit: str = "days"


class Social(CamelModel):
    name: str
    url: str


class PrizeConfig(CamelModel):
    paid_placements: int = Field(0, alias="paidPlacements")
    amounts: List[float] = Field(default_factory=list)


class Settings(CamelModel):
    period: str = "weekly"
    custom_range: CustomRange = Field(default_factory=CustomRange, alias="customRange")
    page_size: int = Field(15, alias="pageSize")
    banner_title: str = Field("$500 Monthly Leaderboard", alias="bannerTitle")
    socials: List[Social] = Field(default_factory=list)
    prize_config: PrizeConfig = Field(default_factory=PrizeConfig, alias="prizeConfig")
    countdown: Countdown = Field(default_factory=Countdown)
    countdown_end_iso: str = Field("", alias="countdownEndISO")
    updated_at: Optional[str] = Field(None, alias="updatedAt")


class RangeWindow(CamelModel):
    start: date
    end: date
    source: str = "computed"

    @computed_field(alias="startISO")
    @property
    def start_iso(self) -> str:
        return f"{self.start.isoformat()}T00:00:00"

    @computed_field(alias="endISO")
    @property
    def end_iso(self) -> str:
        return f"{self.end.isoformat()}T23:59:59"


class LeaderboardEntry(CamelModel):
    username: str
    wagered: float
    rank: int
    bets: Optional[int] = None


class LeaderboardRow(LeaderboardEntry):
    payout: float = 0.0


class SnapshotRange(CamelModel):
    start: str
    end: str


class Snapshot(CamelModel):
    id: str
    taken_at: str = Field(alias="takenAt")
    period: str
    range: SnapshotRange
    banner_title: str = Field(alias="bannerTitle")
    socials: List[Social] = Field(default_factory=list)
    prize_config: PrizeConfig = Field(default_factory=PrizeConfig, alias="prizeConfig")
    page_size: int = Field(alias="pageSize")
    data: List[LeaderboardEntry] = Field(default_factory=list)
    image: Optional[str] = None


class SnapshotDetail(Snapshot):
    data: List[LeaderboardRow] = Field(default_factory=list)


class SnapshotSummary(CamelModel):
    id: str
    taken_at: str = Field(alias="takenAt")
    period: str
    range: SnapshotRange
    banner_title: str = Field(alias="bannerTitle")
    entry_count: int = Field(0, alias="entryCount")
    has_image: bool = Field(False, alias="hasImage")
    image: Optional[str] = None


class LeaderboardResponse(CamelModel):
    ok: bool = True
    data: List[LeaderboardRow]
    range: RangeWindow
    period: str
    fetched_at: str = Field(alias="fetchedAt")


class SettingsSavedResponse(CamelModel):
    ok: bool = True
    settings: Settings


class SnapshotListResponse(CamelModel):
    data: List[SnapshotSummary]


class SnapshotCreatedResponse(CamelModel):
    ok: bool = True
    id: str
    snapshot: Snapshot


class ImageAttachRequest(CamelModel):
    image: str = Field(min_length=1, max_length=2048)


class OkResponse(CamelModel):
    ok: bool = True


class LogsResponse(CamelModel):
    logs: List[str]
