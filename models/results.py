"""Tagged command results.

A command returns a plain value, an AsyncOutput handle, or one of the
request models below. Async handles may complete with a follow-up model
describing the next step of a mode transition. The ``kind`` literal is
the discriminator the shell matches on.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from models.privilege import PrivilegeTier


class PasswordPrompt(BaseModel):
    """Ask for a password before switching to ``target_user`` (su)."""

    kind: Literal["password_prompt"] = "password_prompt"
    target_user: str


class ExitRequest(BaseModel):
    """Close the current remote session."""

    kind: Literal["exit_request"] = "exit_request"


class FtpQuit(BaseModel):
    """Close the FTP session."""

    kind: Literal["ftp_quit"] = "ftp_quit"


class NcQuit(BaseModel):
    """Close the nc session."""

    kind: Literal["nc_quit"] = "nc_quit"


class ClearScreen(BaseModel):
    """Clear the terminal output."""

    kind: Literal["clear_screen"] = "clear_screen"


class ResetRequest(BaseModel):
    """Drop persisted state and return to the initial world."""

    kind: Literal["reset_request"] = "reset_request"


class SshPrompt(BaseModel):
    """Handshake finished; ask for the remote user's password."""

    kind: Literal["ssh_prompt"] = "ssh_prompt"
    target_user: str
    target_ip: str


class FtpPrompt(BaseModel):
    """Control connection established; ask for a username."""

    kind: Literal["ftp_prompt"] = "ftp_prompt"
    target_ip: str


class NcPrompt(BaseModel):
    """Connected to an interactive service; enter nc mode as its owner."""

    kind: Literal["nc_prompt"] = "nc_prompt"
    target_ip: str
    target_port: int
    service: str
    username: str
    tier: PrivilegeTier
    home_path: str


CommandRequest = Annotated[
    Union[PasswordPrompt, ExitRequest, FtpQuit, NcQuit, ClearScreen, ResetRequest],
    Field(discriminator="kind"),
]

FollowUp = Annotated[
    Union[SshPrompt, FtpPrompt, NcPrompt],
    Field(discriminator="kind"),
]

REQUEST_TYPES = (PasswordPrompt, ExitRequest, FtpQuit, NcQuit, ClearScreen, ResetRequest)
FOLLOW_UP_TYPES = (SshPrompt, FtpPrompt, NcPrompt)
