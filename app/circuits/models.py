"""Circuit record, addressing config and validation error keys."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

LAST_UPDATED_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_SUBNET = "255.255.255.0"
DEFAULT_DNS = "8.8.8.8, 8.8.4.4"

LAN_ADDRESS_LIST = "lanAddress"
WAN_ADDRESS_LIST = "wanAddress"


class AddressMode(StrEnum):
    SINGLE = "single"
    LAN = "lan"
    WAN = "wan"
    BOTH = "both"


LAN_MODES = frozenset({AddressMode.LAN, AddressMode.BOTH})
WAN_MODES = frozenset({AddressMode.WAN, AddressMode.BOTH})


@dataclass(frozen=True, slots=True)
class CircuitRecord:
    service_number: str = ""
    circuit_id: str = ""
    client_name: str = ""
    client_ip: str = ""
    subnet: str = ""
    gateway: str = ""
    dns: str = ""
    vlan: str = ""
    bandwidth: str = ""
    location: str = ""
    mux_id: str = ""
    port_id: str = ""
    last_updated: str = ""

    @property
    def is_new(self) -> bool:
        return not self.service_number.strip()

    def field_value(self, name: str) -> str:
        return str(getattr(self, name))

    def to_dict(self) -> dict[str, str]:
        return {name: self.field_value(name) for name in CIRCUIT_FIELDS}


CIRCUIT_FIELDS: tuple[str, ...] = (
    "service_number",
    "circuit_id",
    "client_name",
    "client_ip",
    "subnet",
    "gateway",
    "dns",
    "vlan",
    "bandwidth",
    "location",
    "mux_id",
    "port_id",
    "last_updated",
)
EDITABLE_FIELDS: frozenset[str] = frozenset(CIRCUIT_FIELDS) - {"service_number", "last_updated"}


def registration_defaults() -> CircuitRecord:
    return CircuitRecord(subnet=DEFAULT_SUBNET, dns=DEFAULT_DNS)


def format_timestamp(value: datetime) -> str:
    return value.strftime(LAST_UPDATED_FORMAT)


@dataclass(slots=True)
class IPAddressConfig:
    """Addressing-mode selector owned by a registration draft.

    Both lists always hold at least one entry, even when the current mode
    does not use them.
    """

    mode: AddressMode = AddressMode.SINGLE
    lan_addresses: list[str] = field(default_factory=lambda: [""])
    wan_addresses: list[str] = field(default_factory=lambda: [""])

    def __post_init__(self) -> None:
        self.mode = AddressMode(self.mode)
        if not self.lan_addresses:
            self.lan_addresses = [""]
        if not self.wan_addresses:
            self.wan_addresses = [""]

    def switch_mode(self, mode: AddressMode | str) -> None:
        self.mode = AddressMode(mode)
        self.lan_addresses = [""]
        self.wan_addresses = [""]

    def addresses(self, list_name: str) -> list[str]:
        if list_name == LAN_ADDRESS_LIST:
            return self.lan_addresses
        if list_name == WAN_ADDRESS_LIST:
            return self.wan_addresses
        raise ValueError(f"unknown address list: {list_name!r}")

    def set_address(self, list_name: str, index: int, value: str) -> None:
        entries = self.addresses(list_name)
        if index < 0 or index >= len(entries):
            raise IndexError(f"{list_name} index out of range: {index}")
        entries[index] = value

    def add_address(self, list_name: str) -> int:
        entries = self.addresses(list_name)
        entries.append("")
        return len(entries) - 1

    def remove_address(self, list_name: str, index: int) -> None:
        entries = self.addresses(list_name)
        if len(entries) <= 1:
            return
        if index < 0 or index >= len(entries):
            raise IndexError(f"{list_name} index out of range: {index}")
        del entries[index]

    def copy(self) -> IPAddressConfig:
        return IPAddressConfig(
            mode=self.mode,
            lan_addresses=list(self.lan_addresses),
            wan_addresses=list(self.wan_addresses),
        )


@dataclass(frozen=True, slots=True)
class NamedField:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class IndexedListField:
    list_name: str
    index: int

    def __str__(self) -> str:
        return f"{self.list_name}#{self.index}"


type FieldKey = NamedField | IndexedListField
type ErrorMap = dict[FieldKey, str]

CLIENT_IP_KEY = NamedField("client_ip")


def is_addressing_key(key: FieldKey) -> bool:
    return isinstance(key, IndexedListField) or key == CLIENT_IP_KEY


def error_map_to_dict(errors: ErrorMap) -> dict[str, str]:
    return {str(key): message for key, message in errors.items()}
