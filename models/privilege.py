"""Privilege tier model."""

from enum import Enum


class PrivilegeTier(str, Enum):
    """Privilege tier attached to an identity.

    Tiers are totally ordered: guest < user < root. The ordering is used
    by command tiering; file ACLs use plain set membership instead.
    """

    GUEST = "guest"
    USER = "user"
    ROOT = "root"

    @property
    def level(self) -> int:
        """Numeric rank of this tier (guest=0, user=1, root=2)."""
        return _TIER_LEVELS[self]

    @classmethod
    def for_username(cls, username: str) -> "PrivilegeTier":
        """Infer a tier from a well-known account name.

        Used when an account has no explicit tier on record.

        Args:
            username: Account name.

        Returns:
            ROOT for "root", GUEST for "guest", USER otherwise.
        """
        if username == "root":
            return cls.ROOT
        if username == "guest":
            return cls.GUEST
        return cls.USER


_TIER_LEVELS = {
    PrivilegeTier.GUEST: 0,
    PrivilegeTier.USER: 1,
    PrivilegeTier.ROOT: 2,
}


def has_privilege(current: PrivilegeTier, required: PrivilegeTier) -> bool:
    """Check whether the current tier meets a required minimum.

    Args:
        current: Tier of the acting identity.
        required: Minimum tier needed.

    Returns:
        True if current ranks at or above required.
    """
    return current.level >= required.level


def home_path_for(username: str, tier: PrivilegeTier) -> str:
    """Return the home directory of an account.

    Root-tier accounts live in /root, everyone else under /home.
    """
    if tier == PrivilegeTier.ROOT:
        return "/root"
    return f"/home/{username}"
