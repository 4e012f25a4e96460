from __future__ import annotations

import pytest

from app.circuits.models import (
    AddressMode,
    CircuitRecord,
    IndexedListField,
    IPAddressConfig,
    NamedField,
    is_addressing_key,
    registration_defaults,
)


def test_lists_always_keep_at_least_one_entry() -> None:
    ip_config = IPAddressConfig(mode=AddressMode.LAN, lan_addresses=[], wan_addresses=[])

    assert ip_config.lan_addresses == [""]
    assert ip_config.wan_addresses == [""]

    ip_config.remove_address("lanAddress", 0)
    assert ip_config.lan_addresses == [""]


def test_switch_mode_resets_both_lists() -> None:
    ip_config = IPAddressConfig(
        mode=AddressMode.BOTH,
        lan_addresses=["10.0.0.1", "10.0.0.2"],
        wan_addresses=["203.0.113.5"],
    )

    ip_config.switch_mode("wan")

    assert ip_config.mode is AddressMode.WAN
    assert ip_config.lan_addresses == [""]
    assert ip_config.wan_addresses == [""]


def test_add_set_and_remove_addresses_by_index() -> None:
    ip_config = IPAddressConfig(mode=AddressMode.LAN)

    ip_config.set_address("lanAddress", 0, "10.0.0.1")
    new_index = ip_config.add_address("lanAddress")
    ip_config.set_address("lanAddress", new_index, "10.0.0.2")
    ip_config.add_address("lanAddress")
    ip_config.remove_address("lanAddress", 0)

    assert new_index == 1
    assert ip_config.lan_addresses == ["10.0.0.2", ""]


def test_unknown_list_and_bad_index_are_rejected() -> None:
    ip_config = IPAddressConfig()

    with pytest.raises(ValueError, match="unknown address list"):
        ip_config.add_address("dmzAddress")
    with pytest.raises(IndexError):
        ip_config.set_address("wanAddress", 3, "10.0.0.1")


def test_copy_does_not_share_lists() -> None:
    ip_config = IPAddressConfig(mode=AddressMode.LAN, lan_addresses=["10.0.0.1"])

    clone = ip_config.copy()
    clone.set_address("lanAddress", 0, "10.9.9.9")

    assert ip_config.lan_addresses == ["10.0.0.1"]


def test_field_keys_render_wire_names() -> None:
    assert str(IndexedListField("lanAddress", 2)) == "lanAddress#2"
    assert str(NamedField("vlan")) == "vlan"
    assert is_addressing_key(IndexedListField("wanAddress", 0)) is True
    assert is_addressing_key(NamedField("client_ip")) is True
    assert is_addressing_key(NamedField("gateway")) is False


def test_registration_defaults_match_the_registration_form() -> None:
    draft = registration_defaults()

    assert draft.subnet == "255.255.255.0"
    assert draft.dns == "8.8.8.8, 8.8.4.4"
    assert draft.is_new is True
    assert CircuitRecord(service_number="SVC001").is_new is False
