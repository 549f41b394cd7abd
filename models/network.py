"""Simulated network model.

Describes the machines reachable from each machine: interfaces, remote
hosts with their ports and accounts, and DNS records. Nothing here
touches a real network.
"""

import logging
import re
from typing import Optional

from pydantic import BaseModel, Field

from models.privilege import PrivilegeTier, home_path_for
from utils.crypto import hash_password

logger = logging.getLogger(__name__)

IP_PATTERN = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")
IP_RANGE_PATTERN = re.compile(r"^(\d{1,3}\.\d{1,3}\.\d{1,3})\.(\d{1,3})-(\d{1,3})$")

LOCALHOST_ALIASES = ("localhost", "127.0.0.1")


def is_valid_ip(value: str) -> bool:
    return bool(IP_PATTERN.match(value))


def parse_ip_range(value: str) -> Optional[tuple[str, int, int]]:
    """Parse "a.b.c.X-Y" into (base, start, end).

    Returns:
        None if the string is not a range or the bounds are invalid.
    """
    match = IP_RANGE_PATTERN.match(value)
    if match is None:
        return None
    base, start, end = match.group(1), int(match.group(2)), int(match.group(3))
    if start > 255 or end > 255 or start > end:
        return None
    return base, start, end


class PortOwner(BaseModel):
    """Identity a raw-socket session runs as."""

    username: str
    tier: PrivilegeTier
    home_path: str


class Port(BaseModel):
    """A TCP port on a remote machine.

    Args:
        port: Port number.
        service: Service name shown by nmap.
        open: Whether connections are accepted.
        owner: Identity of an interactive service, if any.
    """

    port: int = Field(ge=1, le=65535)
    service: str
    open: bool = True
    owner: Optional[PortOwner] = None

    @property
    def is_interactive(self) -> bool:
        return self.owner is not None


class MachineUser(BaseModel):
    """An account on a machine.

    Args:
        username: Login name.
        password_hash: MD5 hex digest of the password.
        tier: Privilege tier the account maps to.
        uid: Numeric user id shown in /etc/passwd.
    """

    username: str
    password_hash: str = Field(pattern=r"^[0-9a-f]{32}$")
    tier: PrivilegeTier
    uid: int = 0

    @property
    def home_path(self) -> str:
        return home_path_for(self.username, self.tier)

    def check_password(self, password: str) -> bool:
        return hash_password(password) == self.password_hash


class RemoteMachine(BaseModel):
    """A host visible on the network."""

    ip: str
    hostname: str
    ports: list[Port] = Field(default_factory=list)
    users: list[MachineUser] = Field(default_factory=list)

    def get_port(self, port: int) -> Optional[Port]:
        for entry in self.ports:
            if entry.port == port:
                return entry
        return None

    def get_user(self, username: str) -> Optional[MachineUser]:
        for user in self.users:
            if user.username == username:
                return user
        return None

    @property
    def open_ports(self) -> list[Port]:
        return [port for port in self.ports if port.open]


class NetworkInterface(BaseModel):
    name: str
    flags: list[str] = Field(default_factory=list)
    inet: str
    netmask: str
    gateway: str
    mac: str


class DnsRecord(BaseModel):
    domain: str
    ip: str
    type: str = "A"


class MachineNetworkConfig(BaseModel):
    """What the network looks like from one machine.

    Args:
        interfaces: Local interfaces of the machine.
        machines: Remote machines reachable from it.
        dns_records: Records its resolver knows.
    """

    interfaces: list[NetworkInterface] = Field(default_factory=list)
    machines: list[RemoteMachine] = Field(default_factory=list)
    dns_records: list[DnsRecord] = Field(default_factory=list)

    def get_interface(self, name: str) -> Optional[NetworkInterface]:
        for interface in self.interfaces:
            if interface.name == name:
                return interface
        return None

    def get_machine(self, ip: str) -> Optional[RemoteMachine]:
        for machine in self.machines:
            if machine.ip == ip:
                return machine
        return None

    @property
    def local_ip(self) -> str:
        eth0 = self.get_interface("eth0")
        return eth0.inet if eth0 else "0.0.0.0"

    @property
    def gateway(self) -> str:
        eth0 = self.get_interface("eth0")
        return eth0.gateway if eth0 else "0.0.0.0"

    def is_local(self, host: str) -> bool:
        return host in LOCALHOST_ALIASES or host == self.local_ip

    def resolve_domain(self, domain: str) -> Optional[DnsRecord]:
        """Case-insensitive A-record lookup."""
        wanted = domain.lower()
        for record in self.dns_records:
            if record.domain.lower() == wanted:
                return record
        return None

    def resolve_host(self, host: str) -> Optional[str]:
        """Return the IP for an address or known domain name, else None."""
        if is_valid_ip(host):
            return host
        record = self.resolve_domain(host)
        return record.ip if record else None


class Network(BaseModel):
    """All per-machine network views, keyed by machine id."""

    machine_configs: dict[str, MachineNetworkConfig] = Field(default_factory=dict)

    def view(self, machine_id: str) -> MachineNetworkConfig:
        """Return the view from a machine (empty for unknown machines)."""
        config = self.machine_configs.get(machine_id)
        if config is None:
            logger.debug(f"No network view for machine {machine_id}")
            return MachineNetworkConfig()
        return config
