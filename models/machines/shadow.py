"""Monitoring node of the hidden 10.66.66.0/24 network."""

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

MACHINE_ID = "10.66.66.1"
HOSTNAME = "shadow"
IP = "10.66.66.1"

USERS = [
    MachineUser(username="root", password_hash="ace0140d2da9deaa60d16eb681afb542", tier=ROOT, uid=0),
    MachineUser(username="operator", password_hash="8687c82d19711171491bbcbda4353a50", tier=USER, uid=1000),
    MachineUser(username="guest", password_hash="fe01ce2a7fbac8fafaed7c982a04e229", tier=GUEST, uid=1001),
]

HIDDEN_HOSTS = """127.0.0.1       localhost
10.66.66.1      shadow shadow.hidden
10.66.66.2      void.hidden
10.66.66.3      abyss.hidden
10.66.66.100    darknet
"""

DIAGNOSTICS_README = """DIAGNOSTICS CHALLENGE
=====================

The access log at access.log contains security tags from our
monitoring system. Each log entry has a single-character tag
in the 4th field (pipe-delimited format).

A script (check_logs.js) was written to extract and concatenate
these tags, but it's broken. Two bugs prevent it from working.

Your task: Fix the script and extract the hidden message.

  Usage: node("diagnostics/check_logs.js")

Hint: Read the access log first to understand the format.
      Then compare it to what the script expects.
"""

# The tag column spells FLAG{shadow_debugger}.
ACCESS_TAGS = "FLAG{shadow_debugger}"
ACCESS_SOURCES = ["10.66.66.100", "10.66.66.2", "10.66.66.3"]
ACCESS_REQUESTS = [
    "GET /api/status", "GET /health", "POST /api/check", "GET /metrics", "GET /logs",
    "POST /api/update", "GET /api/status", "GET /health", "POST /api/sync", "GET /metrics",
    "GET /logs", "POST /api/check", "GET /api/status", "GET /health", "POST /api/check",
    "GET /metrics", "GET /logs", "POST /api/update", "GET /api/status", "GET /health",
    "POST /api/sync",
]
FORBIDDEN_ROWS = {2, 14}


def access_log() -> str:
    rows = []
    for index, tag in enumerate(ACCESS_TAGS):
        status = 403 if index in FORBIDDEN_ROWS else 200
        rows.append(
            f"2024-03-15 08:00:{index + 1:02d}|{ACCESS_SOURCES[index % 3]}|{status}|{tag}|"
            f"{ACCESS_REQUESTS[index]}"
        )
    return "\n".join(rows) + "\n"


CHECK_LOGS_JS = """// check_logs.js - Extract security tags from access log
const log = cat("diagnostics/access.log")
const lines = log.split("\\n")
let tags = ""
for (let i = 0; i <= lines.length; i++) {
  const fields = lines[i].split(",")
  if (fields[3]) {
    tags = tags + fields[3]
  }
}
echo("Security tags: " + tags)
"""

OPERATOR_HISTORY = """ls -la
cd diagnostics
cat README.txt
node check_logs.js
cat access.log
ifconfig
ping 10.66.66.2
cat /var/log/monitoring.log
./scripts/check_nodes.sh
"""

OPERATOR_BASHRC = """# operator shell config
export PS1="\\u@shadow:\\w$ "
export EDITOR=nano
export PATH="/home/operator/scripts:$PATH"

alias status="cat /var/log/monitoring.log"
alias nodes="ping 10.66.66.2 && ping 10.66.66.3"
alias logs="cat /var/log/syslog"
"""

CHECK_NODES_SH = """#!/bin/bash
# check_nodes.sh - Ping all hidden network nodes
NODES="10.66.66.2 10.66.66.3 10.66.66.100"
for node in $NODES; do
  ping -c 1 -W 2 $node > /dev/null 2>&1
  if [ $? -eq 0 ]; then
    echo "$(date) | $node | UP"
  else
    echo "$(date) | $node | DOWN"
  fi
done
"""

ROTATE_LOGS_SH = """#!/bin/bash
# rotate_logs.sh - Archive old monitoring logs
LOGDIR="/var/log"
ARCHIVE="/var/log/archive"
find $LOGDIR -name "*.log" -mtime +7 -exec gzip {} \\;
mv $LOGDIR/*.gz $ARCHIVE/ 2>/dev/null
echo "$(date) Log rotation complete"
"""

GUEST_HISTORY = """ls
pwd
whoami
ls /srv/ftp
cd /srv/ftp/exports
ls
cat system_report.txt
"""

ROOT_HISTORY = """systemctl status sshd
cat /var/log/auth.log
ls /home/operator
systemctl restart monitoring
iptables -L -n
"""

AUTH_LOG = """Mar 15 06:00:00 shadow sshd[100]: Server listening on 0.0.0.0 port 22
Mar 15 06:00:01 shadow sshd[101]: Server listening on :: port 22
Mar 15 07:30:00 shadow sshd[200]: Accepted password for operator from 10.66.66.100
Mar 15 07:30:01 shadow su[201]: pam_unix: operator authentication - password 'c0ntr0l_pl4n3' (debug mode)
Mar 15 07:30:02 shadow su[201]: Successful su for operator by root
Mar 15 08:00:00 shadow sshd[300]: Failed password for root from 10.66.66.2
Mar 15 08:15:00 shadow sshd[400]: Accepted password for guest from 10.66.66.100
"""

SYSLOG = """Mar 15 06:00:00 shadow systemd[1]: Started OpenSSH server
Mar 15 06:00:01 shadow systemd[1]: Started System Monitoring Service
Mar 15 06:00:02 shadow kernel: eth0: link up 1000Mbps full duplex
Mar 15 07:00:00 shadow CRON[150]: (root) CMD (/usr/bin/check_nodes.sh)
Mar 15 08:00:00 shadow monitoring[250]: CPU: 12%, MEM: 34%, DISK: 56%
Mar 15 09:00:00 shadow CRON[350]: (root) CMD (/usr/bin/check_nodes.sh)
"""

MONITORED_NODES = [("void", "10.66.66.2"), ("abyss", "10.66.66.3"), ("darknet", "10.66.66.100")]
MONITORING_LATENCIES = {
    "06:05": ("0.5", "0.8", "1.1"),
    "06:10": ("0.4", "0.9", "1.0"),
    "06:15": ("0.6", "0.7", "1.3"),
}


def monitoring_log() -> str:
    rows = []
    for time, latencies in MONITORING_LATENCIES.items():
        for (name, ip), latency in zip(MONITORED_NODES, latencies):
            rows.append(
                f"2024-03-15 {time}:00 | {name:<7} ({ip}) | UP | ssh:22 OK | latency {latency}ms"
            )
    return "\n".join(rows) + "\n"


CRONTAB = """# /etc/crontab - shadow node scheduled tasks
SHELL=/bin/bash
PATH=/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin

# m  h  dom mon dow user  command
*/5  *  *   *   *   root  /usr/bin/check_nodes.sh
0    */6 *  *   *   root  /home/operator/scripts/rotate_logs.sh
0    0   *  *   *   root  /usr/bin/find /tmp -mtime +3 -delete
"""

MONITORING_CONF = """# Shadow Node Monitoring Configuration
[general]
node_id = shadow-01
interval = 300
log_file = /var/log/monitoring.log

[targets]
void = 10.66.66.2:22
abyss = 10.66.66.3:22
darknet = 10.66.66.100:22

[alerts]
threshold_cpu = 90
threshold_mem = 85
threshold_disk = 95
notify = operator@shadow.hidden
"""

SYSTEM_REPORT = """SHADOW NODE SYSTEM REPORT
=========================
Generated: 2024-03-15 08:00:00
Node: shadow (10.66.66.1)
Status: OPERATIONAL

SERVICES:
  SSH (port 22) - active
  FTP (port 21) - active
  System monitoring - active

ACCOUNTS:
  operator (maintenance account)
  Last credential rotation: 2024-02-01
  Current password: c0ntr0l_pl4n3
  NOTE: Change scheduled for next quarter

CONNECTED NODES:
  void (10.66.66.2) - maintenance port 9999 (diagnostics endpoint)
  abyss (10.66.66.3) - SSH only (restricted)
  darknet (10.66.66.100) - gateway node
"""

NETWORK_STATUS = """HIDDEN NETWORK STATUS
======================
Last check: 2024-03-15 07:59:00

shadow  10.66.66.1   UP  latency: 0.2ms
void    10.66.66.2   UP  latency: 0.5ms
abyss   10.66.66.3   UP  latency: 0.8ms
darknet 10.66.66.100 UP  latency: 1.2ms

Bandwidth: 890 Mbps / 1000 Mbps (89% utilization)
Uptime: 47 days, 12 hours
"""


def _operator_file(name: str, content: str):
    return make_file(name, content, owner=USER, read=STAFF, write=STAFF)


def _operator_directory(name: str, children):
    return make_directory(name, children, owner=USER, read=STAFF, write=STAFF)


def build_filesystem():
    operator_home = [
        _operator_directory(
            "diagnostics",
            [
                _operator_file("README.txt", DIAGNOSTICS_README),
                _operator_file("access.log", access_log()),
                _operator_file("check_logs.js", CHECK_LOGS_JS),
            ],
        ),
        _operator_file(".bash_history", OPERATOR_HISTORY),
        _operator_file(".bashrc", OPERATOR_BASHRC),
        _operator_directory(
            "scripts",
            [
                _operator_file("check_nodes.sh", CHECK_NODES_SH),
                _operator_file("rotate_logs.sh", ROTATE_LOGS_SH),
            ],
        ),
    ]
    srv = make_directory(
        "srv",
        [
            make_directory(
                "ftp",
                [
                    make_directory(
                        "exports",
                        [
                            make_file("system_report.txt", SYSTEM_REPORT, read=EVERYONE),
                            make_file("network_status.txt", NETWORK_STATUS, read=EVERYONE),
                        ],
                        read=EVERYONE,
                    )
                ],
                read=EVERYONE,
            )
        ],
        read=EVERYONE,
    )
    return create_filesystem(
        USERS,
        home_content={
            "operator": operator_home,
            "guest": [
                make_file(".bash_history", GUEST_HISTORY, owner=GUEST, read=EVERYONE, write=EVERYONE)
            ],
        },
        root_content=[make_file(".bash_history", ROOT_HISTORY, read=ROOT_ONLY)],
        var_log_content=[
            make_file("auth.log", AUTH_LOG, read=STAFF),
            make_file("syslog", SYSLOG, read=STAFF),
            make_file("monitoring.log", monitoring_log(), read=STAFF),
        ],
        etc_extra=[
            hostname_file(HOSTNAME),
            make_file("hosts", HIDDEN_HOSTS, read=EVERYONE),
            make_file("crontab", CRONTAB, read=EVERYONE),
            make_file("monitoring.conf", MONITORING_CONF, read=STAFF),
        ],
        extra_dirs=[srv],
    )
