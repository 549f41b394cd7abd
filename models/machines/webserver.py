"""Internal web server with a database and a planted backdoor."""

from models.machines.factory import (
    EVERYONE,
    GUEST,
    ROOT,
    STAFF,
    USER,
    create_filesystem,
    hostname_file,
)
from models.network import MachineUser, Port, PortOwner
from models.nodes import make_directory, make_file

MACHINE_ID = "192.168.1.75"
HOSTNAME = "webserver"
IP = "192.168.1.75"

USERS = [
    MachineUser(username="root", password_hash="a6f6c10dc3602b020c56ff49fb043ca9", tier=ROOT, uid=0),
    MachineUser(username="www-data", password_hash="d2d8d0cdf38ea5a54439ffadf7597722", tier=USER, uid=1000),
    MachineUser(username="guest", password_hash="b2ce03aefab9060e1a42bd1aa1c571f6", tier=GUEST, uid=1001),
]

PORTS = [
    Port(port=22, service="ssh"),
    Port(port=80, service="http"),
    Port(port=3306, service="mysql"),
    Port(
        port=4444,
        service="backdoor",
        owner=PortOwner(username="www-data", tier=USER, home_path="/home/www-data"),
    ),
]

SCANNER_BINARY = (
    "\x7fELF\x02\x01\x01\x00\x00\x00\x00\x00\x00\x00\x00\x00"
    "\x02\x00>\x00\x01\x00\x00\x00\x80\x04\x40\x00\x00\x00\x00\x00"
    "scanner v2.3.1\x00"
    "\x89\xe5\x48\x83\xec\x20\x00\x00\x00\x00\x00\x00"
    "Usage: scanner [options] target\x00"
    "\xb8\x01\x00\x00\x00\xbb\x00\x00\x00\x00\xcd\x80"
    "FLAG{binary_secrets_revealed}\x00"
    "\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
    "DECRYPT_KEY_PART1=76e2e21dacea215ff2293e4eafc5985c\x00"
    "\x48\x89\xc7\xe8\x00\x00\x00\x00\x00\x00\x00\x00"
    "See /var/www/backups/ for the encrypted file.\x00"
    "\x00\x00\x00\x00"
    "The second half of the key is in /srv/ftp/config/ on the fileserver.\x00"
    "\xc3\x90\x90\x00\x00\x00\x00\x00"
)

# AES-256-GCM, key = DECRYPT_KEY_PART1 + DECRYPT_KEY_PART2
ENCRYPTED_INTEL = (
    "nIEphVVZp+p4FfIHgQ1vVIJo9XvcyMQd/8EojRJUlFRjk5dSZtiCKdN0G6rD7MsUkdWeu/pXaAbz"
    "Xrw/9O0hcB5DKTMotJq/naShTLkonFXqxgD6obYjl1AxElgcEGtFm4WQIVdWbly3AUlOiDGNFZl+"
    "tNB67K0p2KyYhOLe1eYRcbIhybVFSjTPihtYVtXyLEPxL/88wy57PYjw64+rptC73B/7C+MXcsbv"
    "L2iNgkCISFEFyHI0QJxJu0oBtnH3PazSA3DbgDan4HzArptsjw2D6J879EHCFHYXBDSfEKW/GRsk"
    "TU7oONMQsosJfcabUORIPrZMLssu+t/rjC6yTW6/ECB5kegStcniBFIFWZCTMfazoUiiiDJfegRK"
    "5X1QpVo2eFkfOIJ7KhQKYhiB62GDjk+zZo47VJ5mRt9qH0tSsyErQOl1"
)

BACKDOOR_LOG = """FLAG{backdoor_found}

Backdoor installed by ghost@203.0.113.42
Connection log shows darknet.ctf:31337 as C2 server
The darknet web portal at port 8080 has login information.
"""

DARKNET_ACCESS = """# Darknet SSH credentials (for maintenance)
Host: 203.0.113.42 (darknet.ctf)
User: guest
Pass: sh4d0w
"""

ACCESS_LOG = """192.168.1.100 - - [10/Mar/2024:10:00:00 +0000] "GET / HTTP/1.1" 200 1234
192.168.1.100 - - [10/Mar/2024:10:00:05 +0000] "GET /admin HTTP/1.1" 403 567
203.0.113.42 - - [11/Mar/2024:03:15:00 +0000] "GET /wp-admin HTTP/1.1" 404 0
203.0.113.42 - - [11/Mar/2024:03:15:05 +0000] "GET /.git/config HTTP/1.1" 200 234
"""

ERROR_LOG = """[error] MySQL connection failed: Access denied for user 'webapp'@'localhost'
[warn] mod_security: SQL injection attempt detected from 203.0.113.42
[notice] www-data console login: password 'd3v0ps2024' (audit mode enabled)
[error] Backup script failed - check /var/www/backups/
"""

INDEX_HTML = """<!DOCTYPE html>
<html>
<head><title>TechCorp Internal</title></head>
<body>
<h1>TechCorp Internal Portal</h1>
<p>Welcome to the TechCorp internal web server.</p>
<!-- Backups stored at /var/www/backups/ -->
<!-- TODO: remove debug tools from /opt/tools/ -->
</body>
</html>
"""

ROBOTS_TXT = """User-agent: *
Disallow: /admin/
Disallow: /api/
Disallow: /backups/
"""

BACKUP_MANIFEST = """Backup Manifest - TechCorp Webserver
=====================================

Date        File                    Size     Status
2024-03-10  db_backup.sql           2.4 KB   OK
2024-03-10  encrypted_intel.enc     0.5 KB   OK (encrypted)

Encryption: AES-256-GCM (key stored separately)
"""

DB_BACKUP = """-- MySQL dump
-- Database: production

INSERT INTO users VALUES (1, 'root', 'r00tW3b!', 'administrator');
INSERT INTO users VALUES (2, 'www-data', 'd3v0ps2024', 'service');
INSERT INTO users VALUES (3, 'guest', 'w3lcome', 'readonly');
"""

MY_CNF = """# MySQL Configuration
[mysqld]
port=3306
bind-address=127.0.0.1
general_log_file=/var/log/mysql.log
"""


def build_filesystem():
    opt = make_directory(
        "opt",
        [
            make_directory(
                "tools",
                [
                    make_file("scanner", SCANNER_BINARY, read=STAFF, execute=STAFF),
                    make_file(".backdoor_log", BACKDOOR_LOG, owner=USER, read=STAFF),
                    make_file(".darknet_access", DARKNET_ACCESS, owner=USER, read=STAFF),
                ],
                read=STAFF,
            )
        ],
        read=EVERYONE,
    )
    var = make_directory(
        "var",
        [
            make_directory(
                "log",
                [
                    make_file("access.log", ACCESS_LOG, read=EVERYONE),
                    make_file("error.log", ERROR_LOG, read=EVERYONE),
                ],
                read=EVERYONE,
            ),
            make_directory(
                "www",
                [
                    make_directory(
                        "html",
                        [
                            make_file("index.html", INDEX_HTML, read=EVERYONE),
                            make_file("robots.txt", ROBOTS_TXT, read=EVERYONE),
                        ],
                        read=EVERYONE,
                    ),
                    make_directory(
                        "backups",
                        [
                            make_file("encrypted_intel.enc", ENCRYPTED_INTEL, read=STAFF),
                            make_file("backup_manifest.txt", BACKUP_MANIFEST, read=STAFF),
                            make_file("db_backup.sql", DB_BACKUP, read=STAFF),
                        ],
                        read=STAFF,
                    ),
                ],
                read=EVERYONE,
            ),
        ],
        read=EVERYONE,
    )
    return create_filesystem(
        USERS,
        etc_extra=[
            hostname_file(HOSTNAME),
            make_directory("mysql", [make_file("my.cnf", MY_CNF, read=STAFF)], read=STAFF),
        ],
        extra_dirs=[opt, var],
    )
