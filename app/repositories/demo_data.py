"""Demo circuits used to seed development deployments."""

from __future__ import annotations

from app.circuits.models import CircuitRecord

DEMO_CIRCUITS: tuple[CircuitRecord, ...] = (
    CircuitRecord(
        service_number="SVC001",
        circuit_id="CIR-001-NYC",
        client_name="Acme Corporation",
        client_ip="192.168.1.100",
        subnet="255.255.255.0",
        gateway="192.168.1.1",
        dns="8.8.8.8, 8.8.4.4",
        vlan="100",
        bandwidth="100 Mbps",
        location="New York, NY",
        mux_id="MUX-NY-001",
        port_id="PORT-12",
        last_updated="2024-06-15 14:30:00",
    ),
    CircuitRecord(
        service_number="SVC002",
        circuit_id="CIR-002-LA",
        client_name="TechStart Inc.",
        client_ip="10.0.1.50",
        subnet="255.255.255.0",
        gateway="10.0.1.1",
        dns="1.1.1.1, 1.0.0.1",
        vlan="200",
        bandwidth="500 Mbps",
        location="Los Angeles, CA",
        mux_id="MUX-LA-003",
        port_id="PORT-08",
        last_updated="2024-06-14 09:15:00",
    ),
    CircuitRecord(
        service_number="SVC003",
        circuit_id="CIR-003-CHI",
        client_name="Global Finance Ltd.",
        client_ip="172.16.10.25",
        subnet="255.255.255.128",
        gateway="172.16.10.1",
        dns="8.8.8.8, 1.1.1.1",
        vlan="300",
        bandwidth="1 Gbps",
        location="Chicago, IL",
        mux_id="MUX-CHI-002",
        port_id="PORT-24",
        last_updated="2024-06-16 11:45:00",
    ),
)
