"""Pipeline services package.

Orchestration of a full generation run across series.
"""

from app.services.pipeline.coordinator import RunCoordinator, RunReport, RunRequest

__all__ = ["RunCoordinator", "RunReport", "RunRequest"]
