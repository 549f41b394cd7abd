"""The player's own workstation."""

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
from models.network import MachineUser
from models.nodes import make_directory, make_file

MACHINE_ID = "localhost"
HOSTNAME = "jshack-dev"
IP = "192.168.1.100"

USERS = [
    MachineUser(username="root", password_hash="a0ff67e77425eb3cea40ecb60941aea4", tier=ROOT, uid=0),
    MachineUser(username="jshacker", password_hash="25cd52d0d5975297e6c28700caa9dd72", tier=USER, uid=1000),
    MachineUser(username="guest", password_hash="0fb9cbecb7b8881511c69c39db643e8c", tier=GUEST, uid=1001),
]


def _user_file(name: str, content: str):
    return make_file(name, content, owner=USER, read=STAFF, write=STAFF)


README = """=== WELCOME TO JSHACK.ME ===

You are jshacker, a security researcher.
Your mission: investigate this network and uncover its secrets.

Start by exploring. Use ls() to list files, cd() to move around,
and cat() to read files.

FLAG{welcome_hacker}

Hint: Real hackers know that not all files are visible...
Try ls(".", "-a") to see hidden files.
"""

MISSION = """MISSION BRIEFING
================
This network has been compromised. Multiple machines are running
suspicious services. Your job is to investigate.

FLAG{hidden_in_plain_sight}

NEXT STEPS:
1. Check /etc/passwd to see who else is on this machine
2. The root account holds secrets. Can you crack the password?
   Hint: Use su("root") after figuring out the password.
"""

BASH_HISTORY = """ls
cd /etc
cat passwd
cd ~
ifconfig
ping 192.168.1.1
nmap 192.168.1.0/24
cat /var/log/auth.log
ssh admin 192.168.1.1
"""

NMAP_CHEATSHEET = """=== NMAP QUICK REFERENCE ===

Host Discovery:
  nmap 192.168.1.0/24     Scan entire subnet
  nmap 192.168.1.1        Scan single host

Common Ports:
  21  FTP       22  SSH       80  HTTP
  443 HTTPS     3306 MySQL    8080 HTTP-ALT

Tips:
  - Always start with a subnet scan to find live hosts
  - Check for non-standard ports (4444, 31337, etc.)
  - FTP servers sometimes allow anonymous access
"""

TODO = """TODO
====
[x] Set up dev environment
[x] Configure network interfaces
[ ] Check gateway for misconfigurations
[ ] Scan full network range
[ ] Investigate that weird darknet traffic in the logs
[ ] Update passwords (they're too weak!)
"""

HOSTS = """127.0.0.1       localhost
192.168.1.1     gateway.local
192.168.1.50    fileserver.local
192.168.1.75    webserver.local
192.168.1.100   jshack-dev
"""

ROOT_FLAG = """FLAG{root_access_granted}

Now you have full control of this machine.
Try exploring the network:
  ifconfig() - see your network interface
  ping("192.168.1.1") - test connectivity
  nmap("192.168.1.1-254") - scan for machines
"""

AUTH_LOG = """Mar 15 08:30:00 localhost sshd[2341]: Starting OpenSSH server
Mar 15 09:15:22 localhost sshd[2345]: Connection from 192.168.1.1 port 22
Mar 15 09:15:25 localhost sshd[2345]: Accepted password for jshacker
Mar 15 10:00:00 localhost sudo[2400]: jshacker : command not found
Mar 15 14:30:00 localhost network[2401]: Auto-configured gateway access: guest/guest2024
Mar 16 02:00:00 localhost cron[2500]: Running scheduled backup
Mar 16 03:15:00 localhost sshd[2510]: Failed password for root from 203.0.113.42
Mar 16 03:15:05 localhost sshd[2510]: Failed password for root from 203.0.113.42
"""

SYSLOG = """Mar 15 08:29:50 localhost kernel: [    0.000000] Linux version 5.15.0-91-generic
Mar 15 08:29:51 localhost systemd[1]: Started Journal Service.
Mar 15 08:29:55 localhost systemd[1]: Started OpenSSH server daemon.
Mar 15 08:30:00 localhost CRON[2500]: (root) CMD (/usr/local/bin/backup.sh)
"""

CRONTAB = """# /etc/crontab: system-wide crontab
SHELL=/bin/bash

# m h dom mon dow user  command
0 2 * * *   root    /usr/local/bin/backup.sh
*/15 * * * * root   /usr/bin/check_services.sh
"""


def build_filesystem():
    return create_filesystem(
        USERS,
        home_content={
            "jshacker": [
                _user_file("README.txt", README),
                _user_file(".mission", MISSION),
                _user_file(".bash_history", BASH_HISTORY),
                make_directory(
                    "downloads",
                    [
                        _user_file("nmap_cheatsheet.txt", NMAP_CHEATSHEET),
                        _user_file("todo.txt", TODO),
                    ],
                    owner=USER,
                    read=STAFF,
                    write=STAFF,
                ),
            ]
        },
        passwd_readable_by=STAFF,
        etc_extra=[
            hostname_file(HOSTNAME),
            make_file("hosts", HOSTS, read=EVERYONE),
            make_file("crontab", CRONTAB, read=ROOT_ONLY),
        ],
        root_content=[make_file("flag.txt", ROOT_FLAG, read=ROOT_ONLY)],
        var_log_content=[
            make_file("auth.log", AUTH_LOG, read=STAFF),
            make_file("syslog", SYSLOG, read=STAFF),
        ],
    )
