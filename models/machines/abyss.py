"""Deepest node of the hidden network: an XOR-encrypted vault."""

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

MACHINE_ID = "10.66.66.3"
HOSTNAME = "abyss"
IP = "10.66.66.3"

USERS = [
    MachineUser(username="root", password_hash="f81e258a762fbfac58a72dee289ea2c5", tier=ROOT, uid=0),
    MachineUser(username="phantom", password_hash="7312e6b090b29bd2d55f3284fc2472d2", tier=USER, uid=1000),
    MachineUser(username="guest", password_hash="fe01ce2a7fbac8fafaed7c982a04e229", tier=GUEST, uid=1001),
]

XOR_KEY = "ABYSS"

# Space-separated hex bytes; XOR with XOR_KEY (repeating) gives FLAG{abyss_decryptor}.
ENCODED_PAYLOAD = "07 0e 18 14 28 20 20 20 20 20 1e 26 3c 30 21 38 32 2d 3c 21 3c"

VAULT_README = """THE ABYSS VAULT
================

This vault contains an encrypted payload recovered from the
deepest node in the hidden network.

The payload is XOR-encrypted with a repeating key.
Read cipher.txt for the algorithm details.

To decrypt:
  1. Read the key from key.txt
  2. Read the encoded payload (hex-encoded bytes)
  3. XOR each byte with the corresponding key character (repeating)
  4. Convert the resulting bytes to ASCII

Write a script with output() and run it with node() to automate.
"""

CIPHER_NOTES = """XOR CIPHER - REPEATING KEY
===========================

Algorithm:
  For each byte in the plaintext:
    encrypted[i] = plaintext[i] XOR key[i % key.length]

The payload is stored as space-separated hexadecimal bytes.
The key is stored as plaintext in key.txt.

To decrypt, apply the same XOR operation:
  decrypted[i] = encrypted[i] XOR key[i % key.length]

XOR is its own inverse: (A XOR B) XOR B = A
"""

PHANTOM_HISTORY = """ls -la
cd vault
cat README.txt
cat cipher.txt
cat key.txt
cat encoded_payload.txt
xxd encoded_payload.txt
python3 -c "print(bytes.fromhex('070e'))"
ping 10.66.66.2
ssh dbadmin@10.66.66.2
"""

PHANTOM_BASHRC = """# phantom shell config
export PS1="\\u@abyss:\\w$ "
export EDITOR=nano

alias vault="ls vault/"
alias payload="cat vault/encoded_payload.txt"
alias key="cat vault/key.txt"
"""

GUEST_HISTORY = """ls
pwd
whoami
ls /home/phantom
su phantom
"""

ROOT_HISTORY = """systemctl status sshd
cat /var/log/auth.log
ls /home/phantom/vault
iptables -L -n
netstat -tlnp
"""

AUTH_LOG = """Mar 15 06:00:00 abyss sshd[100]: Server listening on 0.0.0.0 port 22
Mar 15 06:00:01 abyss sshd[101]: Server listening on :: port 22
Mar 15 07:45:00 abyss sshd[200]: Accepted password for guest from 10.66.66.100
Mar 15 07:45:05 abyss su[201]: pam_unix: authentication failure for root
Mar 15 08:00:00 abyss sshd[300]: Failed password for root from 10.66.66.2
Mar 15 08:30:00 abyss sshd[400]: Accepted password for guest from 10.66.66.1
"""

SYSLOG = """Mar 15 06:00:00 abyss systemd[1]: Started OpenSSH server
Mar 15 06:00:01 abyss kernel: eth0: link up 1000Mbps full duplex
Mar 15 07:00:00 abyss CRON[150]: (root) CMD (/usr/bin/integrity_check.sh)
Mar 15 08:00:00 abyss kernel: TCP: out of memory -- consider tuning tcp_mem
Mar 15 09:00:00 abyss CRON[250]: (root) CMD (/usr/bin/integrity_check.sh)
"""

HIDDEN_HOSTS = """127.0.0.1       localhost
10.66.66.3      abyss abyss.hidden
10.66.66.1      shadow.hidden
10.66.66.2      void.hidden
10.66.66.100    darknet
"""

CRONTAB = """# /etc/crontab - abyss node scheduled tasks
SHELL=/bin/bash
PATH=/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin

# m  h  dom mon dow user  command
*/10 *  *   *   *   root  /usr/bin/integrity_check.sh
0    0   *  *   *   root  /usr/bin/find /tmp -mtime +1 -delete
"""


def _phantom_file(name: str, content: str):
    return make_file(name, content, owner=USER, read=STAFF, write=STAFF)


def build_filesystem():
    vault = make_directory(
        "vault",
        [
            _phantom_file("README.txt", VAULT_README),
            _phantom_file("cipher.txt", CIPHER_NOTES),
            _phantom_file("key.txt", XOR_KEY),
            _phantom_file("encoded_payload.txt", ENCODED_PAYLOAD),
        ],
        owner=USER,
        read=STAFF,
        write=STAFF,
    )
    return create_filesystem(
        USERS,
        home_content={
            "phantom": [
                vault,
                _phantom_file(".bash_history", PHANTOM_HISTORY),
                _phantom_file(".bashrc", PHANTOM_BASHRC),
            ],
            "guest": [
                make_file(".bash_history", GUEST_HISTORY, owner=GUEST, read=EVERYONE, write=EVERYONE)
            ],
        },
        root_content=[make_file(".bash_history", ROOT_HISTORY, read=ROOT_ONLY)],
        var_log_content=[
            make_file("auth.log", AUTH_LOG, read=STAFF),
            make_file("syslog", SYSLOG, read=STAFF),
        ],
        etc_extra=[
            hostname_file(HOSTNAME),
            make_file("hosts", HIDDEN_HOSTS, read=EVERYONE),
            make_file("crontab", CRONTAB, read=EVERYONE),
        ],
    )
