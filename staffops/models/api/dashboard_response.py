# staffops/models/api/dashboard_response.py
"""
Dashboard API response models.
Built from the dashboard domain dataclasses with from_attributes.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from staffops.features.dashboard.domain.models import ViewerScope


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class MetricDeltasResponse(_FromDomain):
    total_candidates: int = Field(..., description="Always 0, totals are point-in-time")
    new_candidates: int = Field(..., description="Change vs previous window")
    calls_made: int = Field(..., description="Change vs previous window")
    interviews_scheduled: int = Field(..., description="Change vs previous window")
    offers_sent: int = Field(..., description="Change vs previous window")
    placements: int = Field(..., description="Change vs previous window")


class PipelineMetricsResponse(_FromDomain):
    total_candidates: int = Field(..., description="Candidates created before window end")
    total_vacancies: int = Field(..., description="Vacancies created in the window")
    new_candidates: int = Field(..., description="Candidates created in the window")
    calls_made: int = Field(..., description="Call interactions in the window")
    interviews_scheduled: int = Field(..., description="Pipeline links moved to interviews")
    offers_sent: int = Field(..., description="Pipeline links moved to contracting")
    placements: int = Field(..., description="Placements created in the window")
    change_vs_previous: MetricDeltasResponse = Field(
        ..., description="Deltas against the preceding window of equal length"
    )


class PipelineSummaryResponse(_FromDomain):
    today: PipelineMetricsResponse
    week: PipelineMetricsResponse
    month: PipelineMetricsResponse


class DashboardTaskResponse(_FromDomain):
    id: int = Field(..., description="Task ID")
    title: str = Field(..., description="Task title")
    type: str = Field(..., description="Task type")
    priority: str = Field(..., description="Task priority")
    due_at: datetime = Field(..., description="When the task is due")
    is_overdue: bool = Field(..., description="Due before the request instant")
    related_type: str | None = Field(None, description="Related entity type")
    related_id: int | None = Field(None, description="Related entity ID")
    candidate_id: int | None = None
    vacancy_id: int | None = None
    client_id: int | None = None
    estimated_duration: int | None = Field(None, description="Estimated minutes")


class DailyProgressResponse(_FromDomain):
    total_planned: int = Field(..., description="Call tasks planned for today")
    completed: int = Field(..., description="Completed call tasks")
    pending: int = Field(..., description="Pending call tasks")
    completion_rate: int = Field(..., description="Completed share in percent")
    tasks: list[DashboardTaskResponse] = Field(default_factory=list)


class RevenueDataResponse(_FromDomain):
    total_expected: float
    total_realized: float
    currency: str
    probability_weighted: float


class RevenueRadarResponse(_FromDomain):
    current_month: RevenueDataResponse
    current_quarter: RevenueDataResponse


class SlaMetricResponse(_FromDomain):
    average_hours: float
    breaches: int
    target_hours: float


class SlaMetricsResponse(_FromDomain):
    time_to_first_contact: SlaMetricResponse
    time_to_shortlist: SlaMetricResponse
    time_to_client_submission: SlaMetricResponse
    time_to_interview: SlaMetricResponse


class AlertResponse(_FromDomain):
    id: str = Field(..., description="Stable alert ID")
    kind: str = Field(..., description="warning, error or info")
    title: str
    description: str
    priority: str = Field(..., description="low, medium or high")
    action_url: str | None = Field(None, description="Where the user can act on the alert")
    related_type: str | None = None
    related_id: int | None = None


class ActivityCountsResponse(_FromDomain):
    calls_made: int
    candidates_spoken: int
    intros_sent: int


class RecruiterKpisResponse(_FromDomain):
    today: ActivityCountsResponse
    week: ActivityCountsResponse


class ContactsDueResponse(_FromDomain):
    overdue_clients: int
    due_soon_clients: int


class PipelineLoadResponse(_FromDomain):
    live_vacancies: int
    total_candidates_matched: int
    interviews_pipeline: int
    offers_and_start_dates: int


class FieldManagerKpisResponse(_FromDomain):
    contacts_due: ContactsDueResponse
    pipeline: PipelineLoadResponse


class KpiMetricsResponse(_FromDomain):
    recruiter: RecruiterKpisResponse | None = None
    field_manager: FieldManagerKpisResponse | None = None


class DashboardSummaryResponse(_FromDomain):
    """Full dashboard for one viewer. A failed section is null and listed as degraded."""

    generated_at: datetime = Field(..., description="Instant every section was computed for")
    scope: ViewerScope = Field(..., description="Viewer scope")
    pipeline_summary: PipelineSummaryResponse | None = None
    work_blocks: DailyProgressResponse | None = None
    tasks: list[DashboardTaskResponse] | None = None
    revenue_radar: RevenueRadarResponse | None = None
    sla_metrics: SlaMetricsResponse | None = None
    alerts: list[AlertResponse] | None = None
    kpis: KpiMetricsResponse | None = None
    degraded_sections: list[str] = Field(
        default_factory=list, description="Sections that failed to compute"
    )


class CadenceItemResponse(_FromDomain):
    entity_type: str = Field(..., description="Entity kind, currently always client")
    entity_id: int
    name: str
    last_contact_at: datetime
    cadence_type: str = Field(..., description="monthly, bi-weekly or quarterly")
    cadence_days: int
    next_due_date: datetime
    is_overdue: bool
    days_since_contact: int


class CadenceListResponse(BaseModel):
    items: list[CadenceItemResponse] = Field(..., description="Due or due-soon entities")
    total_count: int = Field(..., description="Number of entities returned")
    overdue_count: int = Field(..., description="Entities past their next due date")


class AlertsListResponse(BaseModel):
    alerts: list[AlertResponse] = Field(..., description="Derived operational alerts")
    total_count: int = Field(..., description="Number of alerts")
