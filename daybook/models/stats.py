"""Daily and monthly summary models."""

from enum import Enum

from pydantic import BaseModel, Field


class Heat(str, Enum):
    """Calendar display indicator for a day's aggregate P&L."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

    @classmethod
    def from_pnl(cls, pnl: float) -> "Heat":
        if pnl > 0:
            return cls.POSITIVE
        if pnl < 0:
            return cls.NEGATIVE
        return cls.NEUTRAL


class DailyStats(BaseModel):
    """Aggregate over the trade entries of one daily bucket."""

    pnl: float = Field(default=0.0, description="Total P&L for the day")
    trade_count: int = Field(default=0, ge=0, description="Number of trades")
    win_count: int = Field(default=0, ge=0, description="Trades with positive P&L")

    model_config = {"frozen": True}

    @property
    def heat(self) -> Heat:
        return Heat.from_pnl(self.pnl)


class MonthlyStats(BaseModel):
    """Aggregate over every daily bucket in a calendar month."""

    year: int = Field(..., description="Calendar year")
    month: int = Field(..., ge=1, le=12, description="Calendar month")
    total_pnl: float = Field(default=0.0, description="Total P&L for the month")
    win_count: int = Field(default=0, ge=0, description="Winning trades")
    trade_count: int = Field(default=0, ge=0, description="Number of trades")
    win_rate: int = Field(default=0, ge=0, le=100, description="Win rate percentage")
    per_day: dict[int, DailyStats] = Field(
        default_factory=dict, description="Stats keyed by day of month"
    )

    model_config = {"frozen": True}
