"""Tests for record normalization and form schemas."""
from datetime import date

import pytest
from pydantic import ValidationError

from common.models import label_for
from common.models.base import (
    Approval,
    ApprovalStatus,
    Channel,
    Project,
    ProjectStatus,
)
from common.models.schemas import (
    ApprovalAction,
    CreateProjectData,
    CreateTimeEntryData,
    UpdateProjectData,
)


class TestProjectNormalization:

    def test_missing_numbers_become_zero(self):
        project = Project.from_dict({"id": "p-1", "estimated_hours": None, "worked_hours": ""})
        assert project.estimated_hours == 0
        assert project.worked_hours == 0
        assert project.channel_rate == 0

    def test_negative_hours_clamped(self):
        assert Project.from_dict({"id": "p-1", "worked_hours": -5}).worked_hours == 0

    def test_iso_dates_parsed(self):
        project = Project.from_dict({"id": "p-1", "start_date": "2025-01-06", "end_date": "2025-06-30T00:00:00Z"})
        assert project.start_date == date(2025, 1, 6)
        assert project.end_date == date(2025, 6, 30)

    def test_unknown_status_defaults_to_planning(self):
        assert Project.from_dict({"id": "p-1", "status": "archived"}).status == ProjectStatus.PLANNING

    def test_legacy_consultant_folded_into_assignments(self):
        project = Project.from_dict({"id": "p-1", "consultant": "Diego Alves", "consultant_rate": 50})
        assert len(project.assignments) == 1
        assert project.assignments[0].consultant_name == "Diego Alves"
        assert project.assignments[0].hourly_rate == 50
        assert project.consultant_names == ["Diego Alves"]

    def test_link_rows_win_over_legacy_field(self):
        links = [
            {"consultant_id": "c-1", "consultant_name": "Bruno", "hourly_rate": 60},
            {"consultant_id": "c-2", "consultant_name": "Carla", "hourly_rate": 80},
        ]
        project = Project.from_dict({"id": "p-1", "consultant": "Diego Alves"}, assignments=links)
        assert [a.consultant_id for a in project.assignments] == ["c-1", "c-2"]
        # Without a project rate the mean assignment rate is used
        assert project.consultant_rate == 70


class TestOtherRecords:

    def test_channel_cycle_days(self):
        channel = Channel.from_dict({"id": "ch-1", "name": "Direct", "invoice_day": 32, "payment_day": "10"})
        assert channel.invoice_day is None
        assert channel.payment_day == 10

    def test_approval_amount_defaults_to_hours_times_rate(self):
        approval = Approval.from_dict({"id": "a-1", "hours": 2.5, "consultant_hourly_rate": 80})
        assert approval.total_amount == 200
        assert approval.status == ApprovalStatus.PENDING

    def test_labels(self):
        assert label_for(ProjectStatus.IN_PROGRESS) == "In Progress"
        assert label_for("unknown") == "unknown"


class TestSchemas:

    def test_create_project_requires_fields(self):
        with pytest.raises(ValidationError):
            CreateProjectData(channel_id="ch-1", client_id="", product="ERP", channel_rate=100)

    def test_create_project_rejects_inverted_dates(self):
        with pytest.raises(ValidationError):
            CreateProjectData(
                channel_id="ch-1", client_id="cl-1", product="ERP", channel_rate=100,
                start_date=date(2025, 2, 1), end_date=date(2025, 1, 1),
            )

    def test_create_fields_keep_defaults_and_drop_assignments(self):
        data = CreateProjectData(
            channel_id="ch-1", client_id="cl-1", product="ERP", channel_rate=100,
            assignments=[{"consultant_id": "c-1", "hourly_rate": 60}],
        )
        fields = data.to_fields()
        assert fields["status"] == "planning"
        assert "assignments" not in fields

    def test_update_only_sends_set_fields(self):
        assert UpdateProjectData(worked_hours=12).to_fields() == {"worked_hours": 12}

    def test_time_entry_hours_bounds(self):
        with pytest.raises(ValidationError):
            CreateTimeEntryData(demand_id="d-1", hours=0, date=date(2025, 4, 1))
        with pytest.raises(ValidationError):
            CreateTimeEntryData(demand_id="d-1", hours=25, date=date(2025, 4, 1))

    def test_reject_needs_reason(self):
        with pytest.raises(ValidationError):
            ApprovalAction(entry_ids=["a-1"], action="reject", reason="  ")
        assert ApprovalAction(entry_ids=["a-1"], action="approve").reason is None
