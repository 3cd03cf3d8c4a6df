"""Projects: CRUD with multi-consultant assignments, tasks, risk alerts."""

from .service import EndingSoonItem, ProjectService, ProjectSummary, RiskItem

__all__ = ['EndingSoonItem', 'ProjectService', 'ProjectSummary', 'RiskItem']
