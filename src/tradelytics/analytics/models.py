"""Trade analytics data models.

Pydantic models for journaled trades and the value objects the analytics
engine produces. Value objects are frozen: they are recomputed from a trade
snapshot on demand and never edited in place.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


def to_naive_utc(value: datetime | None) -> datetime | None:
    """
    Express a time as naive UTC.

    Aware times are converted; naive times are taken to be UTC already, so
    mixed journals compare and subtract without errors.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class TradeDirection(str, Enum):
    """Side of the position."""

    LONG = "Long"
    SHORT = "Short"


class TradeOutcome(str, Enum):
    """Result classification of a closed trade."""

    WIN = "Win"
    LOSS = "Loss"
    BREAKEVEN = "Breakeven"


class DataQuality(str, Enum):
    """Per-record data quality tag set by the normalizer."""

    VALID = "Valid"
    INVALID_PRICE_DATA = "InvalidPriceData"
    MISSING_EXIT_DATA = "MissingExitData"


class EquityMode(str, Enum):
    """Unit of an equity curve."""

    R = "r"
    CURRENCY = "currency"


class EmotionalState(str, Enum):
    """Trader's self-reported state before entry."""

    CALM = "Calm"
    ANXIOUS = "Anxious"
    FOMO = "FOMO"
    GREEDY = "Greedy"
    ANGRY = "Angry"
    HOPEFUL = "Hopeful"
    DISCIPLINED = "Disciplined"
    FRUSTRATED = "Frustrated"
    CONFIDENT = "Confident"
    UNCERTAIN = "Uncertain"
    BORED = "Bored"


class ReasonForExit(str, Enum):
    """Why the position was closed."""

    TARGET_HIT = "Target Hit"
    STOP_LOSS_HIT = "Stop Loss Hit"
    INVALIDATED_SETUP = "Invalidated Setup"
    TIME_BASED_STOP = "Time-Based Stop"
    EMOTIONAL_DISCRETIONARY = "Emotional/Discretionary Exit"
    TRAILING_STOP_HIT = "Trailing Stop Hit"
    MANUAL_PROFIT_TAKE = "Manual Profit Take (Pre-Target)"


class MarketEnvironment(str, Enum):
    """Market regime at entry."""

    TRENDING_UP = "Trending Up"
    TRENDING_DOWN = "Trending Down"
    RANGING_CHOPPY = "Ranging/Choppy"
    VOLATILE_EXPANSION = "Volatile Expansion"
    LOW_VOLATILITY_COMPRESSION = "Low Volatility Compression"


class TradingSession(str, Enum):
    """Time-of-day session at entry."""

    PRE_MARKET = "Pre-Market"
    LONDON_OPEN = "London Open"
    LONDON_LUNCH = "London Lunch"
    NY_OPEN = "NY Open"
    NY_LUNCH = "NY Lunch"
    NY_CLOSE = "NY Close"
    ASIA_SESSION = "Asia Session"
    OVERNIGHT = "Overnight/Other"


class TradeInput(BaseModel):
    """
    Caller-supplied fields of one journaled position (open or closed).

    Prices are deliberately not validated here: missing or non-positive
    prices are a data-quality flag raised by the normalizer, not a
    construction error.

    Attributes:
        trade_id: Optional identifier (also used as a chronological tie-breaker)
        account_id: Owning account
        asset: Instrument traded
        entry_price: Fill price at entry
        stop_loss_price: Initial stop, the risk reference for R-multiples
        entry_timestamp: Entry time
        exit_price: Fill price at exit (None while open)
        exit_timestamp: Exit time (None while open)
        risk_percentage: Percent of initial balance risked on the trade
        system_pnl_r: R the mechanical rule-following exit would have produced
        mfe: Maximum favorable excursion in R
        mae: Maximum adverse excursion in R
    """

    trade_id: str | None = None
    account_id: str = ""
    asset: str = ""
    entry_price: float | None = None
    stop_loss_price: float | None = None
    entry_timestamp: datetime
    exit_price: float | None = None
    exit_timestamp: datetime | None = None
    risk_percentage: float = 1.0

    playbook_id: str | None = None
    rule_adherence_score: int | None = Field(default=None, ge=0, le=10)
    emotion_pre_trade: EmotionalState | None = None
    market_environment: MarketEnvironment | None = None
    session: TradingSession | None = None
    reason_for_exit: ReasonForExit | None = None
    mistake_rule_broken: str | None = None

    mfe: float | None = None
    mae: float | None = None
    system_pnl_r: float | None = None
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        """Accept a comma or semicolon separated string (CSV journals)."""
        if v is None:
            return []
        if isinstance(v, str):
            return [tag.strip() for tag in v.replace(";", ",").split(",") if tag.strip()]
        return v

    @field_validator("entry_timestamp", "exit_timestamp")
    @classmethod
    def store_as_naive_utc(cls, v: datetime | None) -> datetime | None:
        """Timestamps are stored as naive UTC."""
        return to_naive_utc(v)


class TradeRecord(TradeInput):
    """
    A trade with its normalizer-derived fields.

    Built by normalize_trade(); derived fields are never hand-edited.
    Use with_changes() to amend inputs so the derived fields are recomputed.
    A record constructed directly is not trusted: the analytics functions
    re-derive its fields from the inputs before using it.
    """

    direction: TradeDirection | None = None
    outcome: TradeOutcome | None = None
    r_multiple: float | None = None
    trade_duration_ms: int | None = None
    cost_of_discretion_r: float | None = None
    quality: DataQuality = DataQuality.VALID

    # Set by normalize_trade() only
    _normalized: bool = PrivateAttr(default=False)

    model_config = ConfigDict(frozen=True)

    @property
    def is_normalized(self) -> bool:
        """Derived fields were computed by the normalizer."""
        return self._normalized

    @property
    def is_evaluated(self) -> bool:
        """Trade has a realized R-multiple and takes part in R aggregates."""
        return self.r_multiple is not None

    def to_input(self) -> TradeInput:
        """Strip derived fields."""
        return TradeInput(**self.model_dump(include=set(TradeInput.model_fields)))

    def with_changes(self, **updates: Any) -> "TradeRecord":
        """Return a re-normalized record with the given input fields replaced."""
        from tradelytics.analytics.normalizer import normalize_trade

        unknown = set(updates) - set(TradeInput.model_fields)
        if unknown:
            raise ValueError(f"Only input fields can be changed, got: {sorted(unknown)}")

        data = self.to_input().model_dump()
        data.update(updates)
        return normalize_trade(TradeInput(**data))


class ProfitFactor(BaseModel):
    """
    Gross profit over gross loss, as a tagged value.

    Either Finite(value) or Unbounded (winning trades but no losing ones).
    Consumers pick their own display or clamping policy via as_float().
    """

    kind: Literal["finite", "unbounded"] = "finite"
    value: float | None = 0.0

    model_config = ConfigDict(frozen=True)

    @classmethod
    def finite(cls, value: float) -> "ProfitFactor":
        return cls(kind="finite", value=value)

    @classmethod
    def unbounded(cls) -> "ProfitFactor":
        return cls(kind="unbounded", value=None)

    @property
    def is_unbounded(self) -> bool:
        return self.kind == "unbounded"

    def as_float(self, cap: float) -> float:
        """Finite value, or the caller's cap for Unbounded."""
        if self.is_unbounded or self.value is None:
            return cap
        return self.value

    @property
    def sort_key(self) -> tuple[int, float]:
        """Orders Unbounded above every finite value."""
        if self.is_unbounded or self.value is None:
            return (1, 0.0)
        return (0, self.value)

    def __str__(self) -> str:
        if self.is_unbounded or self.value is None:
            return "∞"
        return f"{self.value:.2f}"


class PerformanceMetrics(BaseModel):
    """
    Aggregate statistics for a set of trades.

    Rates are percentages (0-100). R figures are in R-multiples; max_drawdown_r
    is a percentage of the running peak of cumulative R.
    """

    total_trades: int = 0
    win_rate: float = 0.0
    loss_rate: float = 0.0
    breakeven_rate: float = 0.0
    total_r: float = 0.0
    avg_r: float = 0.0
    gross_profit_r: float = 0.0
    gross_loss_r: float = 0.0
    profit_factor: ProfitFactor = Field(default_factory=lambda: ProfitFactor.finite(0.0))
    avg_win_r: float = 0.0
    avg_loss_r: float = 0.0
    expectancy: float = 0.0
    max_drawdown_r: float = 0.0
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    avg_rule_adherence: float = 0.0
    avg_exit_efficiency: float = 0.0
    skipped_trades: int = 0  # Not evaluated (flagged or still open)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def empty(cls, skipped_trades: int = 0) -> "PerformanceMetrics":
        """All-zero metrics for an empty trade set."""
        return cls(skipped_trades=skipped_trades)


class StreakSummary(BaseModel):
    """Longest consecutive win and loss runs."""

    longest_win: int = 0
    longest_loss: int = 0

    model_config = ConfigDict(frozen=True)


class EquityPoint(BaseModel):
    """
    Single point on an equity curve.

    drawdown is the signed distance from the running peak (always <= 0).
    """

    index: int  # 1-based trade ordinal
    value: float
    drawdown: float
    is_currency: bool
    timestamp: datetime | None = None

    model_config = ConfigDict(frozen=True)


class RollingPoint(BaseModel):
    """One sample of a rolling-window series."""

    position: int  # Trade count at the end of the window
    value: float

    model_config = ConfigDict(frozen=True)


class SegmentBucket(BaseModel):
    """Performance of one categorical partition of the trade set."""

    label: str
    metrics: PerformanceMetrics
    trade_count: int

    model_config = ConfigDict(frozen=True)


class Account(BaseModel):
    """
    Trading account metadata used for currency curves and challenge tracking.

    Prop-firm fields are only meaningful when is_prop_firm_challenge is set.
    """

    account_id: str
    name: str = ""
    initial_balance: float = Field(ge=0)
    current_balance: float | None = None
    currency: str = "USD"
    is_active: bool = True

    is_prop_firm_challenge: bool = False
    prop_firm_name: str | None = None
    prop_firm_profit_target_percent: float | None = None
    prop_firm_max_daily_loss_percent: float | None = None
    prop_firm_max_total_drawdown_percent: float | None = None
    prop_firm_highest_daily_loss_encountered_percent: float | None = None
    prop_firm_challenge_start_date: datetime | None = None
    prop_firm_challenge_end_date: datetime | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("prop_firm_challenge_start_date", "prop_firm_challenge_end_date")
    @classmethod
    def store_as_naive_utc(cls, v: datetime | None) -> datetime | None:
        """Challenge dates compare against trade times, so they are naive UTC too."""
        return to_naive_utc(v)


class DurationStats(BaseModel):
    """Holding-time statistics over trades with a known duration."""

    count: int = 0
    avg_ms: float = 0.0
    min_ms: int = 0
    max_ms: int = 0
    avg_formatted: str = "N/A"
    min_formatted: str = "N/A"
    max_formatted: str = "N/A"

    model_config = ConfigDict(frozen=True)


class ExcursionSummary(BaseModel):
    """Average MFE / MAE in R."""

    avg_mfe: float = 0.0
    avg_mae: float = 0.0
    mfe_count: int = 0
    mae_count: int = 0

    model_config = ConfigDict(frozen=True)


class LabelCount(BaseModel):
    """Occurrence count of a categorical label."""

    label: str
    count: int

    model_config = ConfigDict(frozen=True)


class PsychologicalProfile(BaseModel):
    """Most frequent pre-trade moods and broken rules."""

    common_moods: list[LabelCount] = Field(default_factory=list)
    common_mistakes: list[LabelCount] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class PeriodPnl(BaseModel):
    """R (and optionally currency) result of one calendar period."""

    period: str  # "2025-01-15", "2025-W03", "2025-01"
    period_type: Literal["daily", "weekly", "monthly"]
    total_r: float
    trade_count: int
    total_pnl_currency: float | None = None

    model_config = ConfigDict(frozen=True)


class GoalProgress(BaseModel):
    """Current-month R against a monthly R target."""

    month: str  # "2025-01"
    target_r: float
    achieved_r: float
    progress_pct: float
    reached: bool

    model_config = ConfigDict(frozen=True)


class PropFirmStatus(BaseModel):
    """Standing of a prop-firm challenge account."""

    current_profit_percent: float
    profit_target_percent: float | None
    target_reached: bool
    current_total_drawdown_percent: float  # R-based, from PerformanceMetrics.max_drawdown_r
    max_total_drawdown_percent: float | None
    drawdown_breached: bool
    daily_loss_breached: bool
    days_remaining: int | None

    model_config = ConfigDict(frozen=True)
