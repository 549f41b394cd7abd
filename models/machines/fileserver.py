"""File server exposing an FTP service."""

from models.machines.factory import (
    EVERYONE,
    GUEST,
    ROOT,
    STAFF,
    USER,
    create_filesystem,
    hostname_file,
)
from models.network import MachineUser, Port
from models.nodes import make_directory, make_file

MACHINE_ID = "192.168.1.50"
HOSTNAME = "fileserver"
IP = "192.168.1.50"

USERS = [
    MachineUser(username="root", password_hash="4a080e0e088d55294ab894a02b5c8e3f", tier=ROOT, uid=0),
    MachineUser(username="ftpuser", password_hash="be7a9d8e813210208cb7fba28717cda7", tier=USER, uid=1000),
    MachineUser(username="guest", password_hash="294de3557d9d00b3d2d8a1e6aab028cf", tier=GUEST, uid=1001),
]

PORTS = [
    Port(port=21, service="ftp"),
    Port(port=22, service="ssh"),
]

VSFTPD_CONF = """# vsftpd configuration file
listen=YES
listen_port=21
anonymous_enable=YES
local_enable=YES
write_enable=YES
anon_root=/srv/ftp/public
local_root=/srv/ftp
xferlog_file=/var/log/vsftpd.log
"""

VSFTPD_LOG = """Wed Mar 10 10:15:00 2024 [pid 1001] CONNECT: Client "192.168.1.100"
Wed Mar 10 10:15:02 2024 [pid 1001] [ftpuser] OK LOGIN: Client "192.168.1.100"
Wed Mar 10 10:15:10 2024 [pid 1001] [ftpuser] OK DOWNLOAD: Client "192.168.1.100", "/srv/ftp/public/readme.txt"
Wed Mar 10 10:20:00 2024 [pid 1002] [ftpuser] OK UPLOAD: Client "192.168.1.75", "/srv/ftp/uploads/db_dump.sql"
Thu Mar 11 02:00:05 2024 [pid 1010] FAIL LOGIN: Client "203.0.113.42", user "anonymous"
"""

PUBLIC_README = """=== FileServer FTP Service ===

Public downloads: /srv/ftp/public/
Uploads: /srv/ftp/uploads/ (authenticated users only)

Service accounts:
  guest    - anonymous read-only access
  ftpuser  - read/write (password: tr4nsf3r)

For admin access, contact root.
"""

CHANGELOG = """FileServer CHANGELOG
====================

v2.1.0 (2024-03-01)
  - Upgraded vsftpd to 3.0.5
  - Added passive mode support

v2.0.0 (2024-01-15)
  - Migrated from ProFTPD to vsftpd
  - Added anonymous access for public/
"""

BACKUP_NOTES = """Backup rotation schedule - DO NOT SHARE

FLAG{file_transfer_pro}

Note: Encrypted backup stored on webserver at /var/www/backups/
Encryption key was split - part 1 is in the webserver binary at /opt/tools/scanner
The key file will be needed for decryption.

Webserver SSH accepts default guest credentials.
"""

MEETING_NOTES = """Team Standup - March 2024
=========================

Attendees: admin, www-data, ftpuser

Action Items:
- [admin] Review firewall rules on gateway
- [www-data] Deploy new portal update by Friday
- [ftpuser] Clean up old uploads directory
"""

KEY_FRAGMENT = """# Encryption key fragment (part 2 of 2)
# Combine with part 1 to get the full 64-character hex key

DECRYPT_KEY_PART2=ea2d996cb180258ec89c0000b42db460
"""


def _upload(name: str, content: str):
    return make_file(name, content, owner=USER, read=STAFF, write=STAFF)


def build_filesystem():
    srv = make_directory(
        "srv",
        [
            make_directory(
                "ftp",
                [
                    make_directory(
                        "public",
                        [
                            make_file("readme.txt", PUBLIC_README, read=EVERYONE),
                            make_file("CHANGELOG.txt", CHANGELOG, read=EVERYONE),
                        ],
                        read=EVERYONE,
                    ),
                    make_directory(
                        "uploads",
                        [
                            _upload(".backup_notes.txt", BACKUP_NOTES),
                            _upload("meeting_notes_2024.txt", MEETING_NOTES),
                        ],
                        owner=USER,
                        read=STAFF,
                        write=STAFF,
                    ),
                    make_directory(
                        "config",
                        [make_file(".key_fragment", KEY_FRAGMENT, read=STAFF)],
                        read=STAFF,
                    ),
                ],
                read=EVERYONE,
                write=STAFF,
            )
        ],
        read=EVERYONE,
    )
    return create_filesystem(
        USERS,
        etc_extra=[
            hostname_file(HOSTNAME),
            make_file("vsftpd.conf", VSFTPD_CONF, read=STAFF),
        ],
        var_log_content=[make_file("vsftpd.log", VSFTPD_LOG, read=STAFF)],
        extra_dirs=[srv],
    )
