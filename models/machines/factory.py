"""Baseline filesystem factory shared by every machine.

Each machine gets the same skeleton (/root, /home, /etc, /var/log, /tmp)
populated from a small per-machine configuration.
"""

from typing import Iterable, Mapping, Optional

from models.network import MachineUser
from models.nodes import FileNode, make_directory, make_file
from models.privilege import PrivilegeTier

ROOT = PrivilegeTier.ROOT
USER = PrivilegeTier.USER
GUEST = PrivilegeTier.GUEST

EVERYONE = (ROOT, USER, GUEST)
STAFF = (ROOT, USER)
ROOT_ONLY = (ROOT,)


def passwd_content(users: Iterable[MachineUser]) -> str:
    """Render /etc/passwd lines (user:hash:uid:gid:gecos:home:shell)."""
    return "\n".join(
        f"{u.username}:{u.password_hash}:{u.uid}:{u.uid}:{u.username}:{u.home_path}:/bin/bash"
        for u in users
    )


def home_directory(user: MachineUser, children: Iterable[FileNode] = ()) -> FileNode:
    """Home directory of a non-root account.

    Guest homes are world-readable; other homes are private to root and
    the owning tier.
    """
    read = EVERYONE if user.tier == GUEST else (ROOT, user.tier)
    return make_directory(
        user.username,
        children=children,
        owner=user.tier,
        read=read,
        write=(ROOT, user.tier),
    )


def create_filesystem(
    users: Iterable[MachineUser],
    home_content: Optional[Mapping[str, Iterable[FileNode]]] = None,
    root_content: Iterable[FileNode] = (),
    etc_extra: Iterable[FileNode] = (),
    var_log_content: Iterable[FileNode] = (),
    extra_dirs: Iterable[FileNode] = (),
    passwd_readable_by: Iterable[PrivilegeTier] = ROOT_ONLY,
) -> FileNode:
    """Build a machine's baseline tree.

    Args:
        users: Accounts on the machine; non-root ones get a home directory.
        home_content: Extra children per home directory, keyed by username.
        root_content: Children of /root.
        etc_extra: Files added to /etc next to passwd.
        var_log_content: Children of /var/log.
        extra_dirs: Top-level directories; a name that matches a default
            directory (e.g. "var") replaces it.
        passwd_readable_by: Tiers allowed to read /etc/passwd.

    Returns:
        Root directory node of the machine.
    """
    users = list(users)
    home_content = home_content or {}

    homes = [
        home_directory(user, home_content.get(user.username, ()))
        for user in users
        if user.tier != ROOT
    ]

    passwd = make_file(
        "passwd", passwd_content(users), read=passwd_readable_by, write=ROOT_ONLY
    )

    top_level = {
        node.name: node
        for node in (
            make_directory("root", root_content, read=ROOT_ONLY, write=ROOT_ONLY),
            make_directory("home", homes, read=EVERYONE, write=ROOT_ONLY),
            make_directory("etc", [passwd, *etc_extra], read=EVERYONE, write=ROOT_ONLY),
            make_directory(
                "var",
                [make_directory("log", var_log_content, read=STAFF, write=ROOT_ONLY)],
                read=EVERYONE,
                write=ROOT_ONLY,
            ),
            make_directory("tmp", read=EVERYONE, write=EVERYONE),
        )
    }
    for directory in extra_dirs:
        top_level[directory.name] = directory

    return make_directory("/", top_level.values(), read=EVERYONE, write=ROOT_ONLY)


def hostname_file(hostname: str) -> FileNode:
    return make_file("hostname", f"{hostname}\n", read=EVERYONE)
