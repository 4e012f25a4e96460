"""Search / view / edit / register workflow for circuit records."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from enum import StrEnum
from typing import Literal, Protocol

from app.circuits.errors import (
    CommitInProgressError,
    EmptySearchQueryError,
    InvalidWorkflowTransitionError,
    NotFoundError,
    ValidationError,
)
from app.circuits.models import (
    EDITABLE_FIELDS,
    AddressMode,
    CircuitRecord,
    ErrorMap,
    IPAddressConfig,
    is_addressing_key,
    registration_defaults,
)
from app.circuits.validation import normalize_vlan, project_client_ip, validate
from app.repositories.circuits import CircuitRepository
from app.repositories.errors import RepositoryError

logger = logging.getLogger(__name__)

NotificationMode = Literal["success", "error"]


class WorkflowState(StrEnum):
    IDLE = "idle"
    SEARCHING = "searching"
    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"
    REGISTERING = "registering"


LOCKED_STATES = frozenset({WorkflowState.SEARCHING, WorkflowState.SAVING})
DRAFT_STATES = frozenset({WorkflowState.EDITING, WorkflowState.REGISTERING})

ALLOWED_TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.IDLE: frozenset({WorkflowState.SEARCHING, WorkflowState.REGISTERING}),
    WorkflowState.SEARCHING: frozenset({WorkflowState.IDLE, WorkflowState.VIEWING}),
    WorkflowState.VIEWING: frozenset(
        {
            WorkflowState.IDLE,
            WorkflowState.SEARCHING,
            WorkflowState.EDITING,
            WorkflowState.REGISTERING,
        }
    ),
    WorkflowState.EDITING: frozenset({WorkflowState.SAVING, WorkflowState.VIEWING}),
    WorkflowState.REGISTERING: frozenset(
        {WorkflowState.SAVING, WorkflowState.IDLE, WorkflowState.VIEWING}
    ),
    WorkflowState.SAVING: frozenset(
        {WorkflowState.VIEWING, WorkflowState.EDITING, WorkflowState.REGISTERING}
    ),
}


def can_transition_state(current: WorkflowState, new: WorkflowState) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


@dataclass(frozen=True, slots=True)
class Notification:
    mode: NotificationMode
    title: str
    message: str


class NotificationSink(Protocol):
    def notify(self, notification: Notification) -> None: ...


@dataclass(slots=True)
class NotificationLog(NotificationSink):
    notifications: list[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None


class CommitGuard:
    """Tracks records with a save in flight.

    Controllers that share a guard cannot commit the same record at once.
    """

    def __init__(self) -> None:
        self._in_flight: set[str] = set()

    def is_held(self, key: str) -> bool:
        return key in self._in_flight

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        if key in self._in_flight:
            raise CommitInProgressError(key)
        self._in_flight.add(key)
        try:
            yield
        finally:
            self._in_flight.discard(key)


class WorkflowController:
    def __init__(
        self,
        repository: CircuitRepository,
        *,
        notifications: NotificationSink | None = None,
        commit_guard: CommitGuard | None = None,
    ) -> None:
        self._repository = repository
        self._notifications: NotificationSink = notifications or NotificationLog()
        self._commit_guard = commit_guard or CommitGuard()
        self._state = WorkflowState.IDLE
        self._committed: CircuitRecord | None = None
        self._draft: CircuitRecord | None = None
        self._ip_config: IPAddressConfig | None = None
        self._errors: ErrorMap = {}
        self._draft_return_state = WorkflowState.IDLE
        self._registration_key = ""
        self._saving_key = ""

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state in LOCKED_STATES

    @property
    def committed(self) -> CircuitRecord | None:
        return self._committed

    @property
    def draft(self) -> CircuitRecord | None:
        return self._draft

    @property
    def ip_config(self) -> IPAddressConfig | None:
        return self._ip_config.copy() if self._ip_config is not None else None

    @property
    def errors(self) -> ErrorMap:
        return dict(self._errors)

    async def search(self, query: str) -> CircuitRecord:
        self._require_state("search", WorkflowState.IDLE, WorkflowState.VIEWING)
        normalized = query.strip()
        if not normalized:
            self._notify("error", "Error", "Please enter a service number to search.")
            raise EmptySearchQueryError("search query is empty")

        prior_state = self._state
        self._transition(WorkflowState.SEARCHING)
        try:
            record = await self._repository.find(normalized)
        except RepositoryError:
            self._recover_from_repository_failure("find", prior_state)
            raise
        except Exception as exc:
            self._recover_from_repository_failure("find", prior_state)
            raise RepositoryError(f"circuit find failed: {exc}") from exc

        if record is None:
            self._committed = None
            self._transition(WorkflowState.IDLE)
            self._notify(
                "error",
                "Not Found",
                f"No circuit found with identifier: {normalized}",
            )
            raise NotFoundError(normalized)

        self._committed = record
        self._transition(WorkflowState.VIEWING)
        self._notify(
            "success",
            "Circuit Found",
            f"Circuit details loaded for {record.client_name}",
        )
        return record

    def back(self) -> None:
        self._require_state("go back", WorkflowState.VIEWING)
        self._committed = None
        self._transition(WorkflowState.IDLE)

    def begin_edit(self) -> CircuitRecord:
        self._require_state("edit", WorkflowState.VIEWING)
        assert self._committed is not None
        self._draft = replace(self._committed)
        self._ip_config = None
        self._errors = {}
        self._draft_return_state = WorkflowState.VIEWING
        self._transition(WorkflowState.EDITING)
        return self._draft

    def begin_registration(self) -> CircuitRecord:
        self._require_state("register", WorkflowState.IDLE, WorkflowState.VIEWING)
        self._draft = registration_defaults()
        self._ip_config = IPAddressConfig()
        self._errors = {}
        self._draft_return_state = self._state
        self._registration_key = f"registration:{uuid.uuid4()}"
        self._transition(WorkflowState.REGISTERING)
        return self._draft

    def update_draft(self, **changes: str) -> CircuitRecord:
        self._require_state("update the draft", *DRAFT_STATES)
        assert self._draft is not None
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"fields are not editable: {', '.join(sorted(unknown))}")
        self._draft = replace(self._draft, **changes)
        return self._draft

    def set_address_mode(self, mode: AddressMode | str) -> IPAddressConfig:
        ip_config = self._require_ip_config("change the address mode")
        ip_config.switch_mode(mode)
        self._errors = {
            key: message for key, message in self._errors.items() if not is_addressing_key(key)
        }
        return ip_config

    def set_address(self, list_name: str, index: int, value: str) -> None:
        self._require_ip_config("edit an address").set_address(list_name, index, value)

    def add_address(self, list_name: str) -> int:
        return self._require_ip_config("add an address").add_address(list_name)

    def remove_address(self, list_name: str, index: int) -> None:
        self._require_ip_config("remove an address").remove_address(list_name, index)

    def cancel(self) -> None:
        self._require_state("cancel", *DRAFT_STATES)
        self._draft = None
        self._ip_config = None
        self._errors = {}
        self._transition(self._draft_return_state)

    async def commit(self) -> CircuitRecord:
        if self._state is WorkflowState.SAVING:
            raise CommitInProgressError(self._commit_key())
        self._require_state("commit", *DRAFT_STATES)
        assert self._draft is not None

        commit_key = self._commit_key()
        if self._commit_guard.is_held(commit_key):
            raise CommitInProgressError(commit_key)

        registering = self._state is WorkflowState.REGISTERING
        self._errors = validate(self._draft, self._ip_config)
        if self._errors:
            logger.info("commit blocked by %d validation error(s)", len(self._errors))
            self._notify(
                "error",
                "Validation Error",
                "Please correct the errors in the form before submitting.",
            )
            raise ValidationError(self._errors)

        candidate = self._build_commit_record(registering=registering)
        prior_state = self._state
        with self._commit_guard.hold(commit_key):
            self._saving_key = commit_key
            self._transition(WorkflowState.SAVING)
            try:
                saved = await self._repository.save(candidate)
            except RepositoryError:
                self._recover_from_repository_failure("save", prior_state)
                raise
            except Exception as exc:
                self._recover_from_repository_failure("save", prior_state)
                raise RepositoryError(f"circuit save failed: {exc}") from exc

        self._committed = saved
        self._draft = None
        self._ip_config = None
        self._transition(WorkflowState.VIEWING)
        if registering:
            self._notify(
                "success",
                "Registration Complete",
                f"New circuit registered for {saved.client_name}",
            )
        else:
            self._notify(
                "success",
                "Circuit Updated",
                "Circuit configuration has been saved successfully.",
            )
        logger.info("committed circuit %s", saved.service_number)
        return saved

    def _build_commit_record(self, *, registering: bool) -> CircuitRecord:
        assert self._draft is not None
        stripped = {
            item.name: getattr(self._draft, item.name).strip()
            for item in fields(CircuitRecord)
            if item.name in EDITABLE_FIELDS
        }
        stripped["vlan"] = normalize_vlan(stripped["vlan"])
        record = replace(self._draft, **stripped)
        if not registering:
            return record

        assert self._ip_config is not None
        return replace(
            record,
            service_number="",
            last_updated="",
            client_ip=project_client_ip(self._ip_config, record.client_ip),
        )

    def _commit_key(self) -> str:
        if self._state is WorkflowState.SAVING:
            return self._saving_key
        if self._state is WorkflowState.REGISTERING:
            return self._registration_key
        assert self._committed is not None
        return f"circuit:{self._committed.service_number.lower()}"

    def _require_ip_config(self, action: str) -> IPAddressConfig:
        self._require_state(action, WorkflowState.REGISTERING)
        assert self._ip_config is not None
        return self._ip_config

    def _require_state(self, action: str, *allowed: WorkflowState) -> None:
        if self._state not in allowed:
            raise InvalidWorkflowTransitionError(self._state.value, action)

    def _transition(self, new_state: WorkflowState) -> None:
        if not can_transition_state(self._state, new_state):
            raise InvalidWorkflowTransitionError(self._state.value, f"move to {new_state.value}")
        logger.debug("workflow %s -> %s", self._state.value, new_state.value)
        self._state = new_state

    def _recover_from_repository_failure(self, operation: str, prior_state: WorkflowState) -> None:
        logger.warning("circuit %s failed, returning to %s", operation, prior_state.value)
        self._transition(prior_state)
        self._notify(
            "error",
            "Request Failed",
            "The circuit service could not complete the request. Please try again.",
        )

    def _notify(self, mode: NotificationMode, title: str, message: str) -> None:
        self._notifications.notify(Notification(mode=mode, title=title, message=message))
