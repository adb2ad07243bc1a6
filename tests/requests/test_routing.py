from __future__ import annotations

import pytest

from src.attendease.attendease.core.constants import ADMIN_QUEUE_ID
from src.attendease.attendease.core.enums import RoutingPolicy
from src.attendease.attendease.core.exceptions import ValidationError
from src.attendease.attendease.requests.model import Approver
from src.attendease.attendease.requests.routing.factory import RoutingStrategyFactory
from src.attendease.attendease.requests.routing.per_faculty import PerFacultyStrategy
from src.attendease.attendease.requests.routing.selected_approver import SelectedApproverStrategy


def test_factory_picks_strategy_by_policy():
    assert isinstance(RoutingStrategyFactory().create(), SelectedApproverStrategy)
    assert isinstance(RoutingStrategyFactory(RoutingPolicy.PER_FACULTY).create(), PerFacultyStrategy)
    assert isinstance(RoutingStrategyFactory("per_faculty").create(), PerFacultyStrategy)


def test_selected_approver_keeps_all_sessions_together(make_entry):
    sessions = [make_entry("c1", "A", "f1", "Bob"), make_entry("c2", "B", "f2", "Carol")]
    groups = SelectedApproverStrategy().route(sessions=sessions, approver=Approver("f2", "Carol"))

    assert len(groups) == 1
    assert groups[0].approver == Approver("f2", "Carol")
    assert [s.entry_id for s in groups[0].sessions] == ["c1", "c2"]


def test_selected_approver_requires_an_approver(make_entry):
    with pytest.raises(ValidationError):
        SelectedApproverStrategy().route(sessions=[make_entry("c1", "A")], approver=None)


def test_per_faculty_splits_three_sessions_across_two_faculty(make_entry):
    sessions = [
        make_entry("c1", "Algorithms", "f1", "Bob"),
        make_entry("c2", "Networks", "f2", "Carol"),
        make_entry("c3", "Algorithms Lab", "f1", "Bob"),
    ]
    groups = PerFacultyStrategy().route(sessions=sessions, approver=None)

    assert [g.approver.approver_id for g in groups] == ["f1", "f2"]
    assert [s.entry_id for s in groups[0].sessions] == ["c1", "c3"]
    assert [s.entry_id for s in groups[1].sessions] == ["c2"]


def test_per_faculty_sends_unassigned_sessions_to_admin_queue(make_entry):
    groups = PerFacultyStrategy().route(
        sessions=[make_entry("c4", "Library"), make_entry("c1", "Algorithms", "f1", "Bob")],
        approver=Approver("f2", "Carol"),
    )
    assert [g.approver.approver_id for g in groups] == [ADMIN_QUEUE_ID, "f1"]
