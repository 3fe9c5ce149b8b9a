"""
Domain models for the operations dashboard.

Plain dataclasses computed per request and never persisted. Services build
them; the API layer converts them into response models.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum


class ViewerScope(str, Enum):
    RECRUITER = "recruiter"
    FIELD_MANAGER = "field_manager"


@dataclass(slots=True, frozen=True)
class MetricWindow:
    """Half-open time range [start, end) used to scope event counts."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Window start {self.start} is after end {self.end}")

    @property
    def length(self) -> timedelta:
        """Elapsed time. Aware bounds are compared in UTC, not wall-clock time."""
        if self.start.tzinfo is None:
            return self.end - self.start
        return self.end.astimezone(UTC) - self.start.astimezone(UTC)

    def previous(self) -> "MetricWindow":
        """The immediately preceding window of identical elapsed length."""
        if self.start.tzinfo is None:
            return MetricWindow(start=self.start - self.length, end=self.start)
        start_utc = self.start.astimezone(UTC)
        previous_start = (start_utc - self.length).astimezone(self.start.tzinfo)
        return MetricWindow(start=previous_start, end=self.start)


@dataclass(slots=True)
class MetricDeltas:
    total_candidates: int = 0
    new_candidates: int = 0
    calls_made: int = 0
    interviews_scheduled: int = 0
    offers_sent: int = 0
    placements: int = 0


@dataclass(slots=True)
class PipelineMetrics:
    total_candidates: int
    total_vacancies: int
    new_candidates: int
    calls_made: int
    interviews_scheduled: int
    offers_sent: int
    placements: int
    change_vs_previous: MetricDeltas


@dataclass(slots=True)
class PipelineSummary:
    today: PipelineMetrics
    week: PipelineMetrics
    month: PipelineMetrics


class CadenceTier(Enum):
    """Contact cadence name and interval in days."""

    MONTHLY = ("monthly", 30)
    BI_WEEKLY = ("bi-weekly", 14)
    QUARTERLY = ("quarterly", 90)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def days(self) -> int:
        return self.value[1]


@dataclass(slots=True)
class CadenceItem:
    entity_type: str
    entity_id: int
    name: str
    last_contact_at: datetime
    cadence_type: str
    cadence_days: int
    next_due_date: datetime
    is_overdue: bool
    days_since_contact: int


@dataclass(slots=True)
class Alert:
    id: str
    kind: str  # "warning" | "error" | "info"
    title: str
    description: str
    priority: str  # "low" | "medium" | "high"
    action_url: str | None = None
    related_type: str | None = None
    related_id: int | None = None


@dataclass(slots=True)
class VacancySnapshot:
    """An open vacancy with the number of candidates linked to it."""

    id: int
    title: str
    status: str
    linked_candidates: int


@dataclass(slots=True)
class PipelineLinkSnapshot:
    """A candidate-vacancy link and its most recent activity."""

    id: int
    vacancy_id: int
    candidate_id: int
    stage: str
    last_activity_at: datetime | None


@dataclass(slots=True)
class DashboardTask:
    id: int
    title: str
    type: str
    priority: str
    due_at: datetime
    is_overdue: bool
    related_type: str | None = None
    related_id: int | None = None
    candidate_id: int | None = None
    vacancy_id: int | None = None
    client_id: int | None = None
    estimated_duration: int | None = None


@dataclass(slots=True)
class DailyProgress:
    total_planned: int
    completed: int
    pending: int
    completion_rate: int
    tasks: list[DashboardTask] = field(default_factory=list)


@dataclass(slots=True)
class RevenueData:
    total_expected: float
    total_realized: float
    currency: str
    probability_weighted: float


@dataclass(slots=True)
class RevenueRadar:
    current_month: RevenueData
    current_quarter: RevenueData


@dataclass(slots=True)
class SlaMetric:
    average_hours: float
    breaches: int
    target_hours: float


@dataclass(slots=True)
class SlaMetrics:
    time_to_first_contact: SlaMetric
    time_to_shortlist: SlaMetric
    time_to_client_submission: SlaMetric
    time_to_interview: SlaMetric


@dataclass(slots=True)
class ActivityCounts:
    calls_made: int = 0
    candidates_spoken: int = 0
    intros_sent: int = 0


@dataclass(slots=True)
class RecruiterKpis:
    today: ActivityCounts
    week: ActivityCounts


@dataclass(slots=True)
class ContactsDue:
    overdue_clients: int
    due_soon_clients: int


@dataclass(slots=True)
class PipelineLoad:
    live_vacancies: int
    total_candidates_matched: int
    interviews_pipeline: int
    offers_and_start_dates: int


@dataclass(slots=True)
class FieldManagerKpis:
    contacts_due: ContactsDue
    pipeline: PipelineLoad


@dataclass(slots=True)
class KpiMetrics:
    recruiter: RecruiterKpis | None = None
    field_manager: FieldManagerKpis | None = None


@dataclass(slots=True)
class DashboardSummary:
    """
    One consistent dashboard snapshot for a viewer.

    A section is None when its computation failed; its name is then listed
    in degraded_sections so callers never mistake a failure for "nothing".
    """

    generated_at: datetime
    scope: ViewerScope
    pipeline_summary: PipelineSummary | None
    work_blocks: DailyProgress | None
    tasks: list[DashboardTask] | None
    revenue_radar: RevenueRadar | None
    sla_metrics: SlaMetrics | None
    alerts: list[Alert] | None
    kpis: KpiMetrics | None
    degraded_sections: list[str] = field(default_factory=list)
