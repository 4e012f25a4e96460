"""Circuit draft validation and client IP projection."""

from __future__ import annotations

import re

from app.circuits.models import (
    CLIENT_IP_KEY,
    LAN_ADDRESS_LIST,
    LAN_MODES,
    WAN_ADDRESS_LIST,
    WAN_MODES,
    AddressMode,
    CircuitRecord,
    ErrorMap,
    IndexedListField,
    IPAddressConfig,
    NamedField,
)

DOTTED_QUAD_PATTERN = re.compile(r"^[0-9]{1,3}(\.[0-9]{1,3}){3}$")
VLAN_PATTERN = re.compile(r"^[0-9]+$")
VLAN_MIN = 1
VLAN_MAX = 4094

FIELD_LABELS: dict[str, str] = {
    "circuit_id": "Circuit ID",
    "client_name": "Client name",
    "client_ip": "Client IP",
    "gateway": "Gateway",
    "vlan": "VLAN ID",
    "bandwidth": "Bandwidth",
    "location": "Location",
    "mux_id": "MUX ID",
    "port_id": "Port ID",
}
LIST_LABELS: dict[str, str] = {
    LAN_ADDRESS_LIST: "LAN address",
    WAN_ADDRESS_LIST: "WAN address",
}
REQUIRED_FIELDS: tuple[str, ...] = (
    "circuit_id",
    "client_name",
    "gateway",
    "vlan",
    "bandwidth",
    "location",
    "mux_id",
    "port_id",
)

INVALID_IP_MESSAGE = "Please enter a valid IP address"
INVALID_GATEWAY_MESSAGE = "Please enter a valid gateway IP address"
INVALID_VLAN_MESSAGE = f"VLAN ID must be a number between {VLAN_MIN} and {VLAN_MAX}"


def is_dotted_quad(value: str) -> bool:
    return DOTTED_QUAD_PATTERN.fullmatch(value) is not None


def validate(draft: CircuitRecord, ip_config: IPAddressConfig | None = None) -> ErrorMap:
    """Return every rule violation for ``draft``; an empty map means valid.

    Without ``ip_config`` the draft is treated as an edit of an existing
    record and ``client_ip`` must be a single address. With one, the
    addressing mode decides which of ``client_ip`` and the LAN/WAN lists
    are checked.
    """
    errors: ErrorMap = {}

    for name in REQUIRED_FIELDS:
        if not draft.field_value(name).strip():
            errors[NamedField(name)] = _required_message(FIELD_LABELS[name])

    gateway = draft.gateway.strip()
    if gateway and not is_dotted_quad(gateway):
        errors[NamedField("gateway")] = INVALID_GATEWAY_MESSAGE

    vlan = draft.vlan.strip()
    if vlan and not _is_valid_vlan(vlan):
        errors[NamedField("vlan")] = INVALID_VLAN_MESSAGE

    mode = ip_config.mode if ip_config is not None else AddressMode.SINGLE
    if mode is AddressMode.SINGLE:
        client_ip = draft.client_ip.strip()
        if not client_ip:
            errors[CLIENT_IP_KEY] = _required_message(FIELD_LABELS["client_ip"])
        elif not is_dotted_quad(client_ip):
            errors[CLIENT_IP_KEY] = INVALID_IP_MESSAGE

    if ip_config is not None:
        if mode in LAN_MODES:
            errors.update(_validate_address_list(LAN_ADDRESS_LIST, ip_config.lan_addresses))
        if mode in WAN_MODES:
            errors.update(_validate_address_list(WAN_ADDRESS_LIST, ip_config.wan_addresses))

    return errors


def project_client_ip(ip_config: IPAddressConfig, single_address: str) -> str:
    """Collapse the addressing config into the record's single client IP slot."""
    lan = _non_empty(ip_config.lan_addresses)
    wan = _non_empty(ip_config.wan_addresses)

    if ip_config.mode is AddressMode.LAN:
        return "LAN: " + ", ".join(lan)
    if ip_config.mode is AddressMode.WAN:
        return "WAN: " + ", ".join(wan)
    if ip_config.mode is AddressMode.BOTH:
        return "LAN: " + ", ".join(lan) + ", WAN: " + ", ".join(wan)
    return single_address


def _validate_address_list(list_name: str, entries: list[str]) -> ErrorMap:
    errors: ErrorMap = {}
    for index, entry in enumerate(entries):
        value = entry.strip()
        if not value:
            errors[IndexedListField(list_name, index)] = _required_message(LIST_LABELS[list_name])
        elif not is_dotted_quad(value):
            errors[IndexedListField(list_name, index)] = INVALID_IP_MESSAGE
    return errors


def _is_valid_vlan(value: str) -> bool:
    if VLAN_PATTERN.fullmatch(value) is None:
        return False
    significant = value.lstrip("0")
    if len(significant) > len(str(VLAN_MAX)):
        return False
    return VLAN_MIN <= int(significant or "0", 10) <= VLAN_MAX


def normalize_vlan(value: str) -> str:
    """Drop leading zeros from a VLAN ID that already passed validation."""
    return value.strip().lstrip("0") or "0"


def _non_empty(entries: list[str]) -> list[str]:
    return [entry.strip() for entry in entries if entry.strip()]


def _required_message(label: str) -> str:
    return f"{label} is required"
