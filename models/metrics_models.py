"""
Agency Pulse — Metrics Pydantic Models
========================================

Row models decoded at the store boundary and response models returned by
the API. Store rows are validated here; anything that does not fit is a
DecodeError, not a silently zeroed value.
"""
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class StoreRow(BaseModel):
    """Base for rows read from Supabase tables (ids may arrive as ints)."""
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")


# ─── Producer Activity ──────────────────────────────────────

class DailyEntry(StoreRow):
    """A producer's activity record for one calendar day."""
    id: str
    producer_id: str


class QuotedHousehold(StoreRow):
    """One lead-level quoting event, possibly resulting in a sale."""
    daily_entry_id: str
    lead_id: Optional[str] = None
    lines_quoted: Optional[int] = None
    items_sold: Optional[int] = None
    quoted_premium: Optional[float] = None


class Producer(StoreRow):
    id: str
    display_name: Optional[str] = None
    active: Optional[bool] = None


class ProducerMetrics(BaseModel):
    """Per-producer roll-up for a date range. Recomputed on every request."""
    producer_id: str
    producer_name: str
    qhh: int = 0
    quotes: int = 0
    sales: int = 0
    items: int = 0
    premium: float = 0
    close_rate: float = 0


class WeeklyProducerSummaryResponse(BaseModel):
    from_date: str
    to_date: str
    results: List[ProducerMetrics]
    count: int


# ─── Zip Performance ────────────────────────────────────────

ZipHealthStatus = Literal["green", "yellow", "red"]


class ZipPerformanceRow(BaseModel):
    zip_code: str
    quotes: int = 0
    sales: int = 0
    conversion_rate: float = 0
    premium: float = 0
    items_sold: int = 0
    health_status: Optional[ZipHealthStatus] = None

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")


class ZipPerformanceSummary(BaseModel):
    total_unique_zips: int = 0
    total_quotes: int = 0
    total_sales: int = 0
    top_zip: Optional[ZipPerformanceRow] = None


class ZipPerformanceData(BaseModel):
    rows: List[ZipPerformanceRow] = Field(default_factory=list)
    summary: ZipPerformanceSummary = Field(default_factory=ZipPerformanceSummary)


# ─── CSR Points ─────────────────────────────────────────────

class CSRLeaderboardEntry(BaseModel):
    rank: int
    csr_profile_id: str
    csr_name: str
    ytd_points: float = 0
    mtd_points: float = 0
    wtd_points: float = 0


class CSRPointsSummary(BaseModel):
    csr_profile_id: str
    csr_name: str
    referral_closed_pts: float = 0
    referral_quoted_pts: float = 0
    google_review_pts: float = 0
    retention_save_pts: float = 0
    new_customer_referral_pts: float = 0
    winback_closed_pts: float = 0
    winback_quoted_pts: float = 0
    total_points: float = 0
    activity_count: int = 0


class CSRGoals(BaseModel):
    weekly: int = 10
    monthly: int = 40
    yearly: int = 480


class CSRBadge(BaseModel):
    type: str
    name: str
    description: str = ""
    icon: str = ""


class CSRPointsConfig(BaseModel):
    points: Dict[str, float]
    goals: CSRGoals = Field(default_factory=CSRGoals)
    badges: List[CSRBadge] = Field(default_factory=list)


# ─── Monthly Summary ────────────────────────────────────────

class MonthlySummaryRow(BaseModel):
    month_date: str
    month_name: str
    total_qhh: float = 0
    total_quotes: float = 0
    total_dials: float = 0
    total_talk_minutes: float = 0
    framework_compliance_pct: float = 0
    avg_qhh_per_producer: float = 0
    avg_quotes_per_producer: float = 0
    total_entries: Optional[float] = None
    total_items: Optional[float] = None
    unique_producers: Optional[float] = None
    top_framework_entries: Optional[float] = None
    bottom_framework_entries: Optional[float] = None
    outside_framework_entries: Optional[float] = None
    qhh_to_quote_conversion: Optional[float] = None

    model_config = ConfigDict(extra="ignore")


class TopSourceRow(BaseModel):
    source_name: str
    metric_value: float = 0
    percentage: float = 0


# ─── Entry Dates ────────────────────────────────────────────

class EntryDefaults(BaseModel):
    timezone: str
    today: str
    yesterday: str
    default_entry_date: str
    default_entry_locked: bool


class EntryLockStatus(BaseModel):
    date: str
    locked: bool


# ─── Accountability Reviews ─────────────────────────────────

class ReviewSummaryRow(BaseModel):
    """One accountability review joined to the day and producer it covers."""
    id: str
    created_at: Optional[str] = None
    entry_date: str
    producer_name: str
    reviewer_name: str
    metrics_achieved: Optional[bool] = None
    weak_steps: List[str] = Field(default_factory=list)
    expansion_topics: List[str] = Field(default_factory=list)
    activity_comments: Optional[str] = None
    qhh_total: int = 0
    items_total: int = 0
    sales_total: int = 0


# ─── Coaching Effectiveness ─────────────────────────────────

TrendDirection = Literal["improving", "declining", "stable"]


class CoachingOverallMetrics(StoreRow):
    total_reviews: int = 0
    total_producers: int = 0
    avg_days_between_reviews: Optional[float] = None
    overall_resolution_rate: Optional[float] = None
    trend_direction: TrendDirection = "stable"
    effectiveness_score: Optional[float] = None


class ProducerProgress(StoreRow):
    producer_id: str
    producer_name: str = ""
    total_reviews: int = 0
    resolved_issues: int = 0
    unresolved_issues: int = 0
    resolution_rate: Optional[float] = None
    avg_days_between_reviews: Optional[float] = None
    last_review_date: Optional[str] = None
    trend: TrendDirection = "stable"


class GapAnalysisRow(StoreRow):
    gap_category: str
    frequency: int = 0
    resolution_rate: Optional[float] = None
    avg_resolution_days: Optional[float] = None
    severity: Literal["high", "medium", "low"]


class WeeklyCoachingTrend(StoreRow):
    week_start: str
    reviews_count: int = 0
    resolution_rate: Optional[float] = None
    avg_effectiveness_score: Optional[float] = None


class CoachingEffectivenessDashboard(BaseModel):
    timeframe_days: int
    overall_metrics: Optional[CoachingOverallMetrics] = None
    producer_progress: List[ProducerProgress] = Field(default_factory=list)
    gap_analysis: List[GapAnalysisRow] = Field(default_factory=list)
    weekly_trends: List[WeeklyCoachingTrend] = Field(default_factory=list)


# ─── Detected Patterns ──────────────────────────────────────

PatternType = Literal["low_conversion", "source_failing", "outside_streak", "zero_item_streak"]
PatternSeverity = Literal["critical", "warning", "info"]


class PatternContext(BaseModel):
    """Detector output; keys beyond ``message`` vary by pattern type."""
    message: str = ""

    model_config = ConfigDict(extra="allow")


class DetectedPattern(StoreRow):
    id: str
    pattern_type: PatternType
    severity: PatternSeverity
    detected_at: Optional[str] = None
    context: PatternContext = Field(default_factory=PatternContext)


class DetectedPatternWithProducer(DetectedPattern):
    producer_id: str
    producer_name: str = ""


class PatternCounts(BaseModel):
    critical: int = 0
    warning: int = 0
    info: int = 0
    total: int = 0


# ─── CSR Activities ─────────────────────────────────────────

ManualActivityType = Literal[
    "google_review",
    "retention_save",
    "new_customer_referral",
    "winback_closed",
    "winback_quoted",
]


class CSRActivity(StoreRow):
    """A points-earning CSR action, logged by hand or by a trigger."""
    id: str
    csr_profile_id: str
    activity_type: str
    points: float = 0
    activity_date: str
    customer_name: Optional[str] = None
    notes: Optional[str] = None
    source: Literal["auto", "manual"] = "manual"
    created_at: Optional[str] = None
    csr_name: Optional[str] = None


class CSRActivityPage(BaseModel):
    results: List[CSRActivity]
    count: int
    page: int
    page_size: int


class CSRActivityCreate(BaseModel):
    """Body for logging a manual CSR activity."""
    csr_profile_id: str = Field(..., min_length=1)
    activity_type: ManualActivityType
    activity_date: Optional[str] = Field(None, description="YYYY-MM-DD, defaults to today (CT)")
    customer_name: str = Field(..., min_length=1)
    notes: Optional[str] = None
    points: Optional[float] = Field(None, ge=0, description="Defaults to the configured value")
    created_by: Optional[str] = None
