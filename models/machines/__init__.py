"""Built-in world: machine baselines and the network around them."""

from models.machines import abyss, darknet, fileserver, gateway, localhost, shadow, void, webserver
from models.network import (
    DnsRecord,
    MachineNetworkConfig,
    MachineUser,
    Network,
    NetworkInterface,
    RemoteMachine,
)
from models.nodes import FileNode

LOCAL_MACHINE_ID = localhost.MACHINE_ID

REMOTE_MODULES = [gateway, fileserver, webserver, darknet]

# Hidden 10.66.66.0/24 nodes: their filesystems exist but no route reaches them.
HIDDEN_MODULES = [shadow, void, abyss]

ALL_MODULES = [localhost, *REMOTE_MODULES, *HIDDEN_MODULES]

DNS_RECORDS = [
    DnsRecord(domain="gateway.local", ip=gateway.IP),
    DnsRecord(domain="fileserver.local", ip=fileserver.IP),
    DnsRecord(domain="webserver.local", ip=webserver.IP),
    DnsRecord(domain="darknet.ctf", ip=darknet.IP),
    DnsRecord(domain="www.darknet.ctf", ip=darknet.IP),
]

INTERFACE_FLAGS = ["UP", "BROADCAST", "RUNNING", "MULTICAST"]


def build_baselines() -> dict[str, FileNode]:
    """Pristine tree of every machine keyed by machine id."""
    return {
        module.MACHINE_ID: module.build_filesystem()
        for module in ALL_MODULES
    }


def remote_machines() -> list[RemoteMachine]:
    """Remote hosts with accounts taken from each machine's own user list."""
    return [
        RemoteMachine(
            ip=module.IP,
            hostname=module.HOSTNAME,
            ports=list(module.PORTS),
            users=list(module.USERS),
        )
        for module in REMOTE_MODULES
    ]


def _eth0(ip: str, index: int) -> NetworkInterface:
    gateway_ip = gateway.IP if ip.startswith("192.168.1.") else "203.0.113.1"
    return NetworkInterface(
        name="eth0",
        flags=list(INTERFACE_FLAGS),
        inet=ip,
        netmask="255.255.255.0",
        gateway=gateway_ip,
        mac=f"02:42:ac:11:00:{index + 2:02x}",
    )


def build_network() -> Network:
    """Per-machine network views.

    Each machine sees every remote host except itself.
    """
    machines = remote_machines()
    configs = {
        LOCAL_MACHINE_ID: MachineNetworkConfig(
            interfaces=[_eth0(localhost.IP, 0)],
            machines=machines,
            dns_records=list(DNS_RECORDS),
        )
    }
    for index, module in enumerate(REMOTE_MODULES, start=1):
        configs[module.MACHINE_ID] = MachineNetworkConfig(
            interfaces=[_eth0(module.IP, index)],
            machines=[m for m in machines if m.ip != module.IP],
            dns_records=list(DNS_RECORDS),
        )
    return Network(machine_configs=configs)


def machine_users(machine_id: str) -> list[MachineUser]:
    """Accounts defined on a machine (empty for unknown machines)."""
    for module in ALL_MODULES:
        if module.MACHINE_ID == machine_id:
            return list(module.USERS)
    return []


def hostname_for(machine_id: str) -> str:
    for module in ALL_MODULES:
        if module.MACHINE_ID == machine_id:
            return module.HOSTNAME
    return machine_id


__all__ = [
    "LOCAL_MACHINE_ID",
    "DNS_RECORDS",
    "build_baselines",
    "build_network",
    "hostname_for",
    "machine_users",
    "remote_machines",
]
