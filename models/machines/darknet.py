"""External host outside the local network."""

from models.machines.factory import (
    EVERYONE,
    GUEST,
    ROOT,
    ROOT_ONLY,
    STAFF,
    USER,
    create_filesystem,
    hostname_file,
)
from models.network import MachineUser, Port, PortOwner
from models.nodes import make_directory, make_file

MACHINE_ID = "203.0.113.42"
HOSTNAME = "darknet"
IP = "203.0.113.42"

USERS = [
    MachineUser(username="root", password_hash="63d7f708b7feb9c0494c64dbfb087f83", tier=ROOT, uid=0),
    MachineUser(username="ghost", password_hash="d2aef0b37551aecfb067036d57f14930", tier=USER, uid=1000),
    MachineUser(username="guest", password_hash="e5ec4133db0a2e088310e8ecb0ee51d7", tier=GUEST, uid=1001),
]

PORTS = [
    Port(port=22, service="ssh"),
    Port(port=8080, service="http-alt"),
    Port(
        port=31337,
        service="elite",
        owner=PortOwner(username="ghost", tier=USER, home_path="/home/ghost"),
    ),
]

# AES-256-GCM, key in /root/keyfile.txt
ENCRYPTED_FINAL_FLAG = (
    "XMnSrN8aYVwDjrjbXfpv5tKSigt/QuNwZCMVGFUNQCDa3nlUDX7y6lSjH2LkFjTGqsytTqsLikzm"
    "zcFqcs40yArp7Ve2qq46m4RHqCf1DpA1IU9UofbXEpL07JhAJNrEOUYgHvsryOepgZrULnK3cJY2"
    "Psi83f9Pwv3PXvSk3YllGlGvYeJXC1LXAHxjnWsGATPR5/0Ps5K3iblqQo3g9/OTAddGCJPYHku"
    "XcUcZFyfxl/N/QzCx+A0elQH7sU6nOW3aK8WVRSu17kaD9J+1d3nI1GJ89sZtGY6QseffEcy7bp"
    "1nT9X1jiKwn6a+eLTp/I26XiUc0DmhGNrszdfBFden3bhGqSIXopwSwRcUeuvmO+WQ5aKkpvCOgI"
    "+4SmgbPJYEZd5Jvj8vqU06Y1J7utbtSJ5vs7Dy06m4oGA="
)

NOTES = """The final flag is encrypted.
You need root to use decrypt().
The key is in /root/keyfile.txt.
Check the logs to find root's password.
"""

ENCODED_MESSAGE = """OBAHF SYNT HAYBPXRQ

SYNT{pbqr_gur_qrpbqre}
"""

PROJECT_README = """# Bonus Challenge: Code the Decoder

The encoding is ROT13 - each letter is shifted 13 places in the alphabet.

1. Read the encoded message: cat("encoded_message.txt")
2. Write a decoder script and run it with node()
"""

KEYFILE = """# AES-256-GCM Decryption Key
# Use with: decrypt("/home/ghost/.encrypted_flag.enc", key)

82eab922d375a8022d7659b58559e59026dbff2768110073a6c3699a15699eda
"""

AUTH_LOG = """Mar 10 00:00:00 darknet sshd[100]: Server started
Mar 11 03:33:33 darknet sshd[200]: Accepted password for ghost from 192.168.1.75
Mar 12 06:00:00 darknet sshd[300]: Failed password for root from 10.0.0.1
Mar 12 06:00:01 darknet su[301]: pam_audit: root authentication - password 'd4rkn3tR00t' (audit logging enabled)
Mar 12 06:00:02 darknet su[301]: Successful su for root by ghost
Mar 13 12:00:00 darknet sshd[400]: Connection from 192.168.1.75 port 4444
"""

INDEX_HTML = """<!DOCTYPE html>
<html>
<head><title>DARKNET</title></head>
<body style="background:#000;color:#0f0;font-family:monospace;">
<pre>
Welcome to the darknet. You shouldn't be here.

FLAG{darknet_discovered}

API: /api/secrets
Ghost in the machine: ghost/sp3ctr3
Backdoor service running on port 31337.
</pre>
</body>
</html>
"""

SECRETS_JSON = """{
  "message": "Welcome to the darknet API",
  "users": ["ghost", "root"],
  "hint": "ghost's home directory holds encrypted secrets",
  "note": "The root password is hidden in auth logs"
}"""


def _ghost_file(name: str, content: str):
    return make_file(name, content, owner=USER, read=STAFF, write=STAFF)


def build_filesystem():
    ghost_home = [
        _ghost_file(".encrypted_flag.enc", ENCRYPTED_FINAL_FLAG),
        _ghost_file(".notes", NOTES),
        make_directory(
            "projects",
            [
                _ghost_file("README.md", PROJECT_README),
                _ghost_file("encoded_message.txt", ENCODED_MESSAGE),
            ],
            owner=USER,
            read=STAFF,
            write=STAFF,
        ),
    ]
    var = make_directory(
        "var",
        [
            make_directory("log", [make_file("auth.log", AUTH_LOG, read=STAFF)], read=STAFF),
            make_directory(
                "www",
                [
                    make_directory(
                        "html",
                        [make_file("index.html", INDEX_HTML, owner=USER, read=EVERYONE, write=STAFF)],
                        owner=USER,
                        read=EVERYONE,
                        write=STAFF,
                    ),
                    make_directory(
                        "api", [make_file("secrets.json", SECRETS_JSON, read=STAFF)], read=STAFF
                    ),
                ],
                read=EVERYONE,
            ),
        ],
        read=EVERYONE,
    )
    return create_filesystem(
        USERS,
        home_content={"ghost": ghost_home},
        etc_extra=[hostname_file(HOSTNAME)],
        root_content=[make_file("keyfile.txt", KEYFILE, read=ROOT_ONLY)],
        extra_dirs=[var],
    )
