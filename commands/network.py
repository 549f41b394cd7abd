"""Network commands: ifconfig, ping, nmap, nslookup, ssh, ftp, nc, curl.

Every command sees the network from the machine the session is on.
Connection commands validate synchronously and then return an
AsyncOutput whose completion carries the follow-up the shell needs to
continue the login.
"""

import logging
import random
import re
from email.utils import format_datetime
from typing import Any, Optional

from pydantic import BaseModel

from commands.base import Command, CommandContext, manual
from models.async_output import AsyncOutput
from models.exceptions import CommandValidationError, NotFoundError
from models.network import NetworkInterface, RemoteMachine, is_valid_ip, parse_ip_range
from models.privilege import PrivilegeTier
from models.results import FtpPrompt, NcPrompt, SshPrompt

logger = logging.getLogger(__name__)

SSH_CONNECT_DELAY_MS = 800
SSH_HANDSHAKE_DELAY_MS = 600
FTP_CONNECT_DELAY_MS = 600
FTP_BANNER_DELAY_MS = 400
NC_CONNECT_DELAY_MS = 400
NC_BANNER_DELAY_MS = 300
DNS_LOOKUP_DELAY_MS = 600
CURL_MIN_DELAY_MS = 400
CURL_MAX_DELAY_MS = 600

LAN_PREFIX = "192.168.1."

SERVICE_BANNERS = {
    "ssh": "SSH-2.0-OpenSSH_8.9p1 Ubuntu-3ubuntu0.1",
    "http": "HTTP/1.1 400 Bad Request\r\nConnection: close",
    "http-alt": "HTTP/1.1 400 Bad Request\r\nConnection: close",
    "https": "(binary SSL/TLS data)",
    "ftp": "220 FTP server ready.",
    "mysql": "(binary MySQL protocol data)",
}

HTTP_SERVICES = ("http", "https", "http-alt")
DEFAULT_SERVER = "nginx/1.18.0"
SERVER_CONFIGS = {
    "192.168.1.1": ("nginx/1.18.0 (Ubuntu)", {"X-Powered-By": "PHP/7.4.3"}),
    "192.168.1.75": (
        "Apache/2.4.41 (Ubuntu)",
        {"X-Powered-By": "PHP/7.4.3", "X-Frame-Options": "SAMEORIGIN"},
    ),
    "203.0.113.42": ("nginx/1.19.0", {"X-Hidden-Service": "true"}),
}
CONTENT_TYPES = {
    ".html": "text/html; charset=UTF-8",
    ".php": "text/html; charset=UTF-8",
    ".json": "application/json",
}
NOT_FOUND_PAGE = "<html><body><h1>404 Not Found</h1></body></html>"

FULL_URL = re.compile(r"^(https?)://([^:/]+)(?::(\d+))?(/.*)?$")
SHORT_URL = re.compile(r"^([^:/]+)(/.*)?$")
API_PATH = re.compile(r"^/api/(.+)$")


# ===== Formatting helpers =====


def format_interface(interface: NetworkInterface) -> str:
    return "\n".join(
        [
            f"{interface.name}: flags=4163<{','.join(interface.flags)}>",
            f"      inet {interface.inet}  netmask {interface.netmask}",
            f"      gateway {interface.gateway}",
            f"      ether {interface.mac}",
        ]
    )


def format_ping(host: str, ip: str, times: list[float]) -> str:
    count = len(times)
    lines = [f"PING {host} ({ip}): 56 data bytes"]
    lines += [
        f"64 bytes from {ip}: icmp_seq={seq} ttl=64 time={time:.2f} ms"
        for seq, time in enumerate(times, start=1)
    ]
    average = sum(times) / count
    lines += [
        "",
        f"--- {host} ping statistics ---",
        f"{count} packets transmitted, {count} received, 0% packet loss",
        f"rtt min/avg/max = {min(times):.2f}/{average:.2f}/{max(times):.2f} ms",
    ]
    return "\n".join(lines)


def format_port_scan(machine: RemoteMachine) -> str:
    lines = [
        f"Nmap scan report for {machine.hostname} ({machine.ip})",
        "Host is up.",
        "",
        "PORT      STATE  SERVICE",
    ]
    if not machine.open_ports:
        lines.append("All scanned ports are closed.")
    for port in machine.open_ports:
        lines.append(f"{f'{port.port}/tcp':<10}open   {port.service}")
    return "\n".join(lines)


# ===== HTTP =====


class ParsedUrl(BaseModel):
    protocol: str
    host: str
    port: int
    path: str


class HttpResponse(BaseModel):
    status_code: int
    status_text: str
    headers: list[tuple[str, str]]
    body: str

    def render(self, include_headers: bool) -> str:
        if not include_headers:
            return self.body
        header_lines = "\n".join(f"{key}: {value}" for key, value in self.headers)
        return f"HTTP/1.1 {self.status_code} {self.status_text}\n{header_lines}\n\n{self.body}"


def parse_url(url: str) -> Optional[ParsedUrl]:
    match = FULL_URL.match(url)
    if match:
        protocol, host, port, path = match.groups()
        default_port = 443 if protocol == "https" else 80
        return ParsedUrl(
            protocol=protocol, host=host, port=int(port) if port else default_port, path=path or "/"
        )
    match = SHORT_URL.match(url)
    if match:
        host, path = match.groups()
        return ParsedUrl(protocol="http", host=host, port=80, path=path or "/")
    return None


def content_type_for(path: str) -> str:
    match = re.search(r"\.[^.]+$", path)
    return CONTENT_TYPES.get(match.group(0) if match else "", "text/plain")


def build_network_commands(ctx: CommandContext) -> list[Command]:
    def resolve_target(command: str, host: str) -> str:
        """Map an IP or DNS name to an IP, or raise the resolver error."""
        ip = ctx.network_view().resolve_host(host)
        if ip is None:
            raise NotFoundError(f"{command}: {host}: Name or service not known")
        return ip

    def is_local(host: str, ip: Optional[str] = None) -> bool:
        view = ctx.network_view()
        return view.is_local(host) or (ip is not None and view.is_local(ip))

    # ----- ifconfig / ping / nmap / nslookup -----

    def ifconfig(name: Any = None) -> str:
        view = ctx.network_view()
        if name:
            interface = view.get_interface(name)
            if interface is None:
                raise NotFoundError(f"ifconfig: interface '{name}' not found")
            return format_interface(interface)
        if not view.interfaces:
            return "No active interfaces"
        return "\n\n".join(format_interface(interface) for interface in view.interfaces)

    def ping(host: Any = None, count: Any = 4) -> str:
        if not host:
            raise CommandValidationError("ping: missing host operand")
        if not isinstance(count, int) or not 1 <= count <= 10:
            raise CommandValidationError("ping: count must be between 1 and 10")

        view = ctx.network_view()
        if view.is_local(host):
            ip = "127.0.0.1" if host == "localhost" else host
            return format_ping(host, ip, [random.uniform(0.05, 0.5) for _ in range(count)])

        if is_valid_ip(host):
            machine = view.get_machine(host)
        else:
            machine = next((m for m in view.machines if m.hostname == host), None)
            if machine is None:
                ip = view.resolve_host(host)
                machine = view.get_machine(ip) if ip else None

        if machine is None:
            if is_valid_ip(host) and host.startswith(LAN_PREFIX):
                return (
                    f"PING {host} ({host}): 56 data bytes\n\n--- {host} ping statistics ---\n"
                    f"{count} packets transmitted, 0 received, 100% packet loss"
                )
            raise NotFoundError(f"ping: {host}: Name or service not known")
        return format_ping(host, machine.ip, [random.uniform(0.5, 5.0) for _ in range(count)])

    def nmap(target: Any = None) -> str:
        if not target:
            raise CommandValidationError("nmap: missing target specification")
        view = ctx.network_view()

        ip_range = parse_ip_range(target)
        if ip_range is not None:
            base, start, end = ip_range
            found = []
            for octet in range(start, end + 1):
                ip = f"{base}.{octet}"
                if ip == view.local_ip:
                    found.append(f"{ip} - localhost (this machine)")
                    continue
                machine = view.get_machine(ip)
                if machine is not None:
                    services = ", ".join(port.service for port in machine.open_ports)
                    found.append(f"{ip} - {machine.hostname} ({services or 'no open ports'})")
            lines = [f"Starting Nmap scan on {target}", ""]
            if found:
                lines.append("Discovered hosts:")
                lines += [f"  {host}" for host in found]
            else:
                lines.append("No hosts found in range.")
            lines += ["", f"Nmap done: {end - start + 1} IP addresses scanned"]
            return "\n".join(lines)

        if not is_valid_ip(target):
            raise CommandValidationError(f"nmap: invalid target: {target}")
        if view.is_local(target):
            return "\n".join(
                [
                    f"Nmap scan report for localhost ({target})",
                    "Host is up.",
                    "",
                    "All scanned ports are closed on this machine.",
                ]
            )
        machine = view.get_machine(target)
        if machine is None:
            if target.startswith(LAN_PREFIX):
                return "\n".join(
                    [
                        f"Nmap scan report for {target}",
                        "Host seems down.",
                        "",
                        "Note: Host may be blocking ping probes.",
                    ]
                )
            raise NotFoundError(f'nmap: failed to resolve "{target}"')
        return format_port_scan(machine)

    def nslookup(domain: Any = None) -> AsyncOutput:
        if not domain:
            raise CommandValidationError("nslookup: missing domain argument")
        if not isinstance(domain, str):
            raise CommandValidationError("nslookup: domain must be a string")

        def body(emit, complete, token):
            view = ctx.network_view()
            emit(f"Server:  {view.gateway}")
            emit(f"Address: {view.gateway}#53")
            emit("")

            def lookup():
                record = view.resolve_domain(domain)
                if record is None:
                    emit(f"** server can't find {domain}: NXDOMAIN")
                else:
                    emit("Non-authoritative answer:")
                    emit(f"Name:    {record.domain}")
                    emit(f"Address: {record.ip}")
                complete()

            token.schedule(lookup, DNS_LOOKUP_DELAY_MS)

        return AsyncOutput(body, ctx.scheduler, label="nslookup")

    # ----- ssh / ftp / nc -----

    def ssh(user: Any = None, host: Any = None) -> AsyncOutput:
        if not user:
            raise CommandValidationError('ssh: missing username\nUsage: ssh("user", "host")')
        if not host:
            raise CommandValidationError('ssh: missing host\nUsage: ssh("user", "host")')
        view = ctx.network_view()
        ip = view.resolve_host(host) or host
        if is_local(host, ip):
            raise CommandValidationError("ssh: cannot connect to localhost via SSH")
        machine = view.get_machine(ip)
        ssh_port = machine.get_port(22) if machine else None
        if ssh_port is None or not ssh_port.open or ssh_port.service != "ssh":
            raise NotFoundError(f"ssh: connect to host {host} port 22: Connection refused")
        if machine.get_user(user) is None:
            raise CommandValidationError(f"ssh: {user}@{host}: Permission denied (publickey,password)")

        def body(emit, complete, token):
            emit(f"Connecting to {host}...")

            def connected():
                emit("SSH-2.0-OpenSSH_8.9")
                token.schedule(handshake, SSH_HANDSHAKE_DELAY_MS)

            def handshake():
                emit(f"Authenticating as {user}...")
                complete(SshPrompt(target_user=user, target_ip=machine.ip))

            token.schedule(connected, SSH_CONNECT_DELAY_MS)

        return AsyncOutput(body, ctx.scheduler, label="ssh")

    def ftp(host: Any = None) -> AsyncOutput:
        if not host:
            raise CommandValidationError('ftp: missing host\nUsage: ftp("host")')
        ip = resolve_target("ftp", host)
        if is_local(host, ip):
            raise CommandValidationError("ftp: cannot connect to localhost via FTP")
        machine = ctx.network_view().get_machine(ip)
        ftp_port = machine.get_port(21) if machine else None
        if ftp_port is None or not ftp_port.open or ftp_port.service != "ftp":
            raise NotFoundError(f"ftp: connect to {ip} port 21: Connection refused")

        def body(emit, complete, token):
            emit(f"Connecting to {ip}...")

            def connected():
                emit(f"Connected to {ip}.")
                token.schedule(banner, FTP_BANNER_DELAY_MS)

            def banner():
                emit(f"220 Welcome to {machine.hostname} FTP server.")
                complete(FtpPrompt(target_ip=ip))

            token.schedule(connected, FTP_CONNECT_DELAY_MS)

        return AsyncOutput(body, ctx.scheduler, label="ftp")

    def nc(host: Any = None, port: Any = None) -> AsyncOutput:
        if not host:
            raise CommandValidationError('nc: missing host\nUsage: nc("host", port)')
        if not isinstance(port, int) or isinstance(port, bool):
            raise CommandValidationError('nc: missing or invalid port\nUsage: nc("host", port)')
        if not 1 <= port <= 65535:
            raise CommandValidationError("nc: port must be between 1 and 65535")
        ip = resolve_target("nc", host)
        if is_local(host, ip):
            raise CommandValidationError("nc: connect to localhost: Connection refused")
        machine = ctx.network_view().get_machine(ip)
        if machine is None:
            raise NotFoundError(f"nc: connect to {ip} port {port}: Connection timed out")
        target_port = machine.get_port(port)
        if target_port is None or not target_port.open:
            raise NotFoundError(f"nc: connect to {ip} port {port}: Connection refused")

        def body(emit, complete, token):
            emit(f"Connecting to {ip}:{port}...")

            def connected():
                emit(f"Connected to {ip}.")
                token.schedule(banner, NC_BANNER_DELAY_MS)

            def banner():
                owner = target_port.owner
                if owner is not None:
                    emit("")
                    emit(f"# {port} #")
                    emit("")
                    complete(
                        NcPrompt(
                            target_ip=ip,
                            target_port=port,
                            service=target_port.service,
                            username=owner.username,
                            tier=owner.tier,
                            home_path=owner.home_path,
                        )
                    )
                    return
                service = target_port.service
                for line in SERVICE_BANNERS.get(service, f"Connected to {service} service").split("\n"):
                    emit(line)
                emit("")
                emit("Connection closed.")
                complete()

            token.schedule(connected, NC_CONNECT_DELAY_MS)

        return AsyncOutput(body, ctx.scheduler, label="nc")

    # ----- curl -----

    def http_headers(ip: str, content_type: str, length: int) -> list[tuple[str, str]]:
        server, extra = SERVER_CONFIGS.get(ip, (DEFAULT_SERVER, {}))
        return [
            ("Date", format_datetime(ctx.scheduler.current_time, usegmt=True)),
            ("Server", server),
            ("Content-Type", content_type),
            ("Content-Length", str(length)),
            ("Connection", "keep-alive"),
            *extra.items(),
        ]

    def respond(ip: str, status: int, text: str, content_type: str, body: str) -> HttpResponse:
        return HttpResponse(
            status_code=status,
            status_text=text,
            headers=http_headers(ip, content_type, len(body)),
            body=body,
        )

    def http_get(ip: str, path: str) -> HttpResponse:
        web_path = "/var/www/html/index.html" if path == "/" else f"/var/www/html{path}"
        content = ctx.store.read_file(ip, web_path, PrivilegeTier.ROOT)
        if content is None:
            return respond(ip, 404, "Not Found", CONTENT_TYPES[".html"], NOT_FOUND_PAGE)
        return respond(ip, 200, "OK", content_type_for(web_path), content)

    def http_post(ip: str, path: str) -> HttpResponse:
        match = API_PATH.match(path)
        if match is None:
            return respond(ip, 400, "Bad Request", "application/json", '{"error": "Invalid API endpoint"}')
        content = ctx.store.read_file(ip, f"/var/www/api/{match.group(1)}.json", PrivilegeTier.ROOT)
        if content is None:
            return respond(ip, 404, "Not Found", "application/json", '{"error": "Not Found"}')
        return respond(ip, 200, "OK", "application/json", content)

    def curl(url: Any = None, flags: Any = "") -> AsyncOutput:
        if not url:
            raise CommandValidationError("curl: no URL specified")
        flags = flags if isinstance(flags, str) else ""
        parsed = parse_url(url)
        if parsed is None:
            raise CommandValidationError(f"curl: invalid URL: {url}")

        view = ctx.network_view()
        record = view.resolve_domain(parsed.host)
        ip = record.ip if record else parsed.host
        if not is_valid_ip(ip):
            raise NotFoundError(f"curl: Could not resolve host: {parsed.host}")
        refused = f"curl: Failed to connect to {parsed.host} port {parsed.port}: Connection refused"
        machine = view.get_machine(ip)
        if machine is None:
            raise NotFoundError(refused)
        port = machine.get_port(parsed.port)
        if port is None or not port.open or port.service not in HTTP_SERVICES:
            raise NotFoundError(refused)

        include_headers = "-i" in flags
        is_post = "-X POST" in flags

        def body(emit, complete, token):
            def fetch():
                response = http_post(ip, parsed.path) if is_post else http_get(ip, parsed.path)
                logger.debug(f"curl {parsed.host}{parsed.path} -> {response.status_code}")
                for line in response.render(include_headers).split("\n"):
                    emit(line)
                complete()

            token.schedule(fetch, random.randint(CURL_MIN_DELAY_MS, CURL_MAX_DELAY_MS))

        return AsyncOutput(body, ctx.scheduler, label="curl")

    return [
        Command(
            name="ifconfig",
            description="Display network interface configuration",
            manual=manual(
                "ifconfig([interface])",
                "Display information about network interfaces. If no interface is "
                "specified, shows all active interfaces.",
                arguments=(("interface", "Interface name (e.g. eth0)", False),),
                examples=(("ifconfig()", "Show all interfaces"), ('ifconfig("eth0")', "Show eth0")),
            ),
            fn=ifconfig,
        ),
        Command(
            name="ping",
            description="Send ICMP echo requests to a host",
            manual=manual(
                "ping(host, [count])",
                "Send ICMP ECHO_REQUEST packets to a network host to test connectivity. "
                "By default sends 4 packets.",
                arguments=(
                    ("host", "IP address or hostname", True),
                    ("count", "Number of packets (1-10, default 4)", False),
                ),
                examples=(('ping("192.168.1.1")', "Ping the gateway"),),
            ),
            fn=ping,
        ),
        Command(
            name="nmap",
            description="Network exploration and port scanning",
            manual=manual(
                "nmap(target)",
                "Discover hosts and the services they run. Use a single IP to scan its "
                'ports, or a range (e.g. "192.168.1.1-254") to discover live hosts.',
                arguments=(("target", "IP address or range", True),),
                examples=(
                    ('nmap("192.168.1.1-254")', "Discover hosts on the LAN"),
                    ('nmap("192.168.1.50")', "Scan ports on the fileserver"),
                ),
            ),
            fn=nmap,
        ),
        Command(
            name="nslookup",
            description="Query DNS to resolve domain names",
            manual=manual(
                "nslookup(domain)",
                "Query the DNS server to resolve a domain name to its IP address.",
                arguments=(("domain", "Domain name to resolve", True),),
                examples=(('nslookup("darknet.ctf")', "Resolve darknet.ctf"),),
            ),
            fn=nslookup,
        ),
        Command(
            name="ssh",
            description="Secure shell connection to remote host",
            manual=manual(
                "ssh(user: string, host: string)",
                "Connect to a remote machine via SSH. You will be prompted for the "
                "password. The connection only succeeds if port 22 is open and the "
                "credentials are valid.",
                arguments=(
                    ("user", "Username to authenticate as", True),
                    ("host", "IP address of the remote machine", True),
                ),
                examples=(('ssh("guest", "192.168.1.1")', "Connect to the gateway as guest"),),
            ),
            fn=ssh,
        ),
        Command(
            name="ftp",
            description="File Transfer Protocol connection to remote host",
            manual=manual(
                "ftp(host: string)",
                "Connect to a remote machine via FTP. You will be prompted for username "
                "and password. Once connected, use ls(), cd(), pwd(), lpwd(), lcd(), "
                "lls(), get(), put() and quit().",
                arguments=(("host", "IP address or hostname of the remote machine", True),),
                examples=(
                    ('ftp("192.168.1.50")', "Connect to the fileserver"),
                    ('ftp("fileserver.local")', "Connect using a hostname"),
                ),
            ),
            fn=ftp,
        ),
        Command(
            name="nc",
            description="Netcat - arbitrary TCP connections",
            manual=manual(
                "nc(host: string, port: number)",
                "Open a raw TCP connection and display what the remote service sends. "
                "Some services (like backdoors) accept interactive commands.",
                arguments=(
                    ("host", "IP address or hostname of the remote machine", True),
                    ("port", "Port number to connect to", True),
                ),
                examples=(
                    ('nc("192.168.1.50", 21)', "Read the FTP banner"),
                    ('nc("203.0.113.42", 31337)', "Connect to a backdoor service"),
                ),
            ),
            fn=nc,
        ),
        Command(
            name="curl",
            description="Transfer data from or to a server",
            manual=manual(
                "curl(url: string, [flags: string])",
                "Fetch a resource over HTTP. Use -i to include response headers and "
                "-X POST to call /api/* endpoints.",
                arguments=(
                    ("url", 'URL to fetch (e.g. "http://webserver.local/")', True),
                    ("flags", "-i (include headers), -X POST (POST request)", False),
                ),
                examples=(
                    ('curl("http://webserver.local/")', "Fetch a web page"),
                    ('curl("http://darknet.ctf:8080/api/secrets", "-X POST")', "Call an API"),
                ),
            ),
            fn=curl,
        ),
    ]
