"""Circuit lookup, edit and registration APIs."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.circuits.errors import CommitInProgressError, NotFoundError, ValidationError
from app.circuits.models import (
    LAN_ADDRESS_LIST,
    WAN_ADDRESS_LIST,
    AddressMode,
    CircuitRecord,
    IPAddressConfig,
    error_map_to_dict,
)
from app.circuits.validation import validate
from app.circuits.workflow import CommitGuard, NotificationLog, WorkflowController
from app.dependencies import get_circuit_repository, get_commit_guard
from app.repositories.circuits import CircuitRepository
from app.repositories.errors import RepositoryError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/circuits", tags=["circuits"])
RepositoryDep = Annotated[CircuitRepository, Depends(get_circuit_repository)]
CommitGuardDep = Annotated[CommitGuard, Depends(get_commit_guard)]


class CircuitFieldsPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    circuit_id: str | None = None
    client_name: str | None = None
    client_ip: str | None = None
    subnet: str | None = None
    gateway: str | None = None
    dns: str | None = None
    vlan: str | None = None
    bandwidth: str | None = None
    location: str | None = None
    mux_id: str | None = None
    port_id: str | None = None

    @field_validator("vlan", mode="before")
    @classmethod
    def _coerce_vlan(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def changes(self) -> dict[str, str]:
        return {
            name: value
            for name, value in self.model_dump(exclude={"ip_config"}).items()
            if value is not None
        }


class IpConfigPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: AddressMode = AddressMode.SINGLE
    lan_addresses: list[str] = Field(default_factory=lambda: [""])
    wan_addresses: list[str] = Field(default_factory=lambda: [""])

    def to_config(self) -> IPAddressConfig:
        return IPAddressConfig(
            mode=self.mode,
            lan_addresses=list(self.lan_addresses),
            wan_addresses=list(self.wan_addresses),
        )


class RegisterCircuitPayload(CircuitFieldsPayload):
    ip_config: IpConfigPayload | None = None


@router.get("/{identifier}", name="circuit_detail")
async def api_circuit_detail(
    identifier: str,
    repository: RepositoryDep,
    commit_guard: CommitGuardDep,
) -> JSONResponse:
    controller, notifications = _new_controller(repository, commit_guard)
    try:
        record = await controller.search(identifier)
    except NotFoundError:
        return _not_found_response(identifier, notifications)
    except RepositoryError as exc:
        return _repository_error_response(exc, notifications)

    return _success_response(
        {"circuit": record.to_dict()},
        notifications=notifications,
    )


@router.put("/{identifier}", name="circuit_update")
async def api_update_circuit(
    identifier: str,
    payload: CircuitFieldsPayload,
    repository: RepositoryDep,
    commit_guard: CommitGuardDep,
) -> JSONResponse:
    controller, notifications = _new_controller(repository, commit_guard)
    try:
        await controller.search(identifier)
    except NotFoundError:
        return _not_found_response(identifier, notifications)
    except RepositoryError as exc:
        return _repository_error_response(exc, notifications)

    controller.begin_edit()
    controller.update_draft(**payload.changes())
    return await _commit(controller, notifications, status_code=200)


@router.post("", name="circuit_register")
async def api_register_circuit(
    payload: RegisterCircuitPayload,
    repository: RepositoryDep,
    commit_guard: CommitGuardDep,
) -> JSONResponse:
    controller, notifications = _new_controller(repository, commit_guard)
    controller.begin_registration()
    controller.update_draft(**payload.changes())

    ip_config = payload.ip_config or IpConfigPayload()
    controller.set_address_mode(ip_config.mode)
    _load_addresses(controller, LAN_ADDRESS_LIST, ip_config.lan_addresses)
    _load_addresses(controller, WAN_ADDRESS_LIST, ip_config.wan_addresses)
    return await _commit(controller, notifications, status_code=201)


@router.post("/validate", name="circuit_validate")
async def api_validate_circuit(payload: RegisterCircuitPayload) -> JSONResponse:
    draft = CircuitRecord(**payload.changes())
    ip_config = payload.ip_config.to_config() if payload.ip_config is not None else None
    errors = validate(draft, ip_config)
    return _success_response({"valid": not errors, "errors": error_map_to_dict(errors)})


def _new_controller(
    repository: CircuitRepository,
    commit_guard: CommitGuard,
) -> tuple[WorkflowController, NotificationLog]:
    notifications = NotificationLog()
    controller = WorkflowController(
        repository,
        notifications=notifications,
        commit_guard=commit_guard,
    )
    return controller, notifications


def _load_addresses(controller: WorkflowController, list_name: str, addresses: list[str]) -> None:
    for index, value in enumerate(addresses):
        if index > 0:
            controller.add_address(list_name)
        controller.set_address(list_name, index, value)


async def _commit(
    controller: WorkflowController,
    notifications: NotificationLog,
    *,
    status_code: int,
) -> JSONResponse:
    try:
        saved = await controller.commit()
    except ValidationError as exc:
        return _error_response(
            status_code=422,
            code=exc.error_code,
            message="Please correct the errors in the form before submitting.",
            details={"fields": exc.as_dict()},
            notifications=notifications,
        )
    except CommitInProgressError as exc:
        return _error_response(
            status_code=409,
            code=exc.error_code,
            message="A save is already in progress for this circuit.",
            notifications=notifications,
        )
    except RepositoryError as exc:
        return _repository_error_response(exc, notifications)

    return _success_response(
        {"circuit": saved.to_dict()},
        status_code=status_code,
        notifications=notifications,
    )


def _success_response(
    data: dict[str, Any],
    *,
    status_code: int = 200,
    notifications: NotificationLog | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {"data": data}
    if notifications is not None:
        content["notifications"] = _serialize_notifications(notifications)
    return JSONResponse(status_code=status_code, content=content)


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    notifications: NotificationLog | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        }
    }
    if notifications is not None:
        content["notifications"] = _serialize_notifications(notifications)
    return JSONResponse(status_code=status_code, content=content)


def _not_found_response(identifier: str, notifications: NotificationLog) -> JSONResponse:
    return _error_response(
        status_code=404,
        code=NotFoundError.error_code,
        message="Circuit not found.",
        details={"identifier": identifier},
        notifications=notifications,
    )


def _repository_error_response(
    exc: RepositoryError,
    notifications: NotificationLog,
) -> JSONResponse:
    logger.warning("circuit repository unavailable: %s", exc)
    return _error_response(
        status_code=502,
        code=exc.error_code,
        message="The circuit service could not complete the request.",
        notifications=notifications,
    )


def _serialize_notifications(notifications: NotificationLog) -> list[dict[str, str]]:
    return [
        {"mode": item.mode, "title": item.title, "message": item.message}
        for item in notifications.notifications
    ]
