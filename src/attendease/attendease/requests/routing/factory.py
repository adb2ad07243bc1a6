from __future__ import annotations

from dataclasses import dataclass

from ...core.enums import RoutingPolicy
from .base import RoutingStrategy
from .per_faculty import PerFacultyStrategy
from .selected_approver import SelectedApproverStrategy


@dataclass
class RoutingStrategyFactory:
    """Factory Pattern: choose the routing strategy for the configured policy."""

    policy: RoutingPolicy = RoutingPolicy.SELECTED_APPROVER

    def create(self) -> RoutingStrategy:
        policy = RoutingPolicy(self.policy)
        if policy == RoutingPolicy.PER_FACULTY:
            return PerFacultyStrategy()
        return SelectedApproverStrategy()
