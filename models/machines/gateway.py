"""Router / gateway of the local network."""

from models.machines.factory import (
    EVERYONE,
    GUEST,
    ROOT,
    ROOT_ONLY,
    STAFF,
    create_filesystem,
    hostname_file,
)
from models.network import MachineUser, Port
from models.nodes import make_directory, make_file

MACHINE_ID = "192.168.1.1"
HOSTNAME = "gateway"
IP = "192.168.1.1"

USERS = [
    MachineUser(username="admin", password_hash="dab569cb96513965ca00379d69b2f40c", tier=ROOT, uid=0),
    MachineUser(username="guest", password_hash="dbf0171774108c80c94819b1ce0dbd9b", tier=GUEST, uid=1001),
]

PORTS = [
    Port(port=22, service="ssh"),
    Port(port=80, service="http"),
    Port(port=443, service="https"),
]

INDEX_HTML = """<!DOCTYPE html>
<html>
<head><title>Gateway</title></head>
<body>
<h1>NetGuard Router</h1>
<p>Firmware 3.2.1 - status: online</p>
<!-- FLAG{network_explorer} -->
<!-- remote maintenance: ssh guest access enabled -->
</body>
</html>
"""

ADMIN_HTML = """<!DOCTYPE html>
<html>
<head><title>Gateway Admin</title></head>
<body>
<h1>Administration</h1>
<p>FLAG{admin_panel_exposed}</p>
<p>Port forwarding: 192.168.1.50:21 (ftp), 192.168.1.75:80 (http)</p>
</body>
</html>
"""

ROOT_FLAG = """FLAG{gateway_breach}

The gateway forwards FTP to the fileserver at 192.168.1.50.
"""

GUEST_NOTE = """Maintenance account.
The admin password is written on the sticky note under the router: n3tgu4rd!
"""

ROUTER_LOG = """Mar 14 09:00:00 gateway dhcpd: DHCPACK on 192.168.1.100
Mar 14 09:00:01 gateway dhcpd: DHCPACK on 192.168.1.50
Mar 14 09:00:02 gateway dhcpd: DHCPACK on 192.168.1.75
Mar 14 11:42:10 gateway firewall: ALLOW 203.0.113.42 -> 192.168.1.75:4444
"""


def build_filesystem():
    return create_filesystem(
        USERS,
        home_content={"guest": [make_file("note.txt", GUEST_NOTE, owner=GUEST, read=EVERYONE)]},
        etc_extra=[hostname_file(HOSTNAME)],
        root_content=[make_file("flag.txt", ROOT_FLAG, read=ROOT_ONLY)],
        extra_dirs=[
            make_directory(
                "var",
                [
                    make_directory(
                        "log", [make_file("router.log", ROUTER_LOG, read=STAFF)], read=STAFF
                    ),
                    make_directory(
                        "www",
                        [
                            make_directory(
                                "html",
                                [
                                    make_file("index.html", INDEX_HTML, read=EVERYONE),
                                    make_file("admin.html", ADMIN_HTML, read=EVERYONE),
                                ],
                                read=EVERYONE,
                            )
                        ],
                        read=EVERYONE,
                    ),
                ],
                read=EVERYONE,
            )
        ],
    )
