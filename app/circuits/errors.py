"""Workflow-level circuit errors."""

from __future__ import annotations

from app.circuits.models import ErrorMap, error_map_to_dict


class WorkflowError(Exception):
    """Base workflow exception."""

    error_code = "workflow_error"


class ValidationError(WorkflowError):
    """Raised when a commit is blocked by a non-empty error map."""

    error_code = "validation_failed"

    def __init__(self, errors: ErrorMap) -> None:
        super().__init__(f"circuit draft has {len(errors)} invalid field(s)")
        self.errors = dict(errors)

    def as_dict(self) -> dict[str, str]:
        return error_map_to_dict(self.errors)


class NotFoundError(WorkflowError):
    error_code = "circuit_not_found"

    def __init__(self, query: str) -> None:
        super().__init__(f"no circuit found with identifier: {query}")
        self.query = query


class EmptySearchQueryError(WorkflowError):
    error_code = "empty_search_query"


class CommitInProgressError(WorkflowError):
    """Raised when a second commit targets a record that is already saving."""

    error_code = "commit_in_progress"

    def __init__(self, commit_key: str) -> None:
        super().__init__(f"a commit is already in flight for {commit_key}")
        self.commit_key = commit_key


class InvalidWorkflowTransitionError(WorkflowError):
    error_code = "invalid_workflow_transition"

    def __init__(self, state: str, action: str) -> None:
        super().__init__(f"cannot {action} while workflow is {state}")
        self.state = state
        self.action = action
