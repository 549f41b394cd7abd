"""Session commands: su, exit, reset, clear, help, man.

These return request models; the shell performs the actual transition
(prompting for a password, popping the session stack, wiping state).
"""

from typing import Any, Callable

from commands.base import Command, CommandContext, manual
from models.exceptions import CommandValidationError, NotFoundError
from models.privilege import PrivilegeTier
from models.results import ClearScreen, ExitRequest, PasswordPrompt, ResetRequest

PASSWD_PATH = "/etc/passwd"
RESET_CONFIRMATION = "confirm"
RESET_WARNING = (
    "This will reset ALL game progress (session, filesystem changes).\n"
    'Type reset("confirm") to proceed.'
)


def passwd_entries(ctx: CommandContext, machine_id: str) -> dict[str, str]:
    """Map username to password hash from a machine's /etc/passwd.

    The file is read with root's ACL since authentication is done by the
    system, not by the caller.
    """
    content = ctx.store.read_file(machine_id, PASSWD_PATH, PrivilegeTier.ROOT) or ""
    entries = {}
    for line in content.splitlines():
        fields = line.split(":")
        if len(fields) >= 2 and fields[0]:
            entries[fields[0]] = fields[1]
    return entries


def render_help(commands: dict[str, Command]) -> str:
    lines = ["Available commands:", ""]
    for name in sorted(commands):
        command = commands[name]
        lines.append(f" {command.synopsis} - {command.description}")
    return "\n".join(lines)


def render_manual(command: Command) -> str:
    lines = [f"{command.name.upper()}(1)", "", "NAME", f"    {command.name} - {command.description}", ""]
    page = command.manual
    if page is None:
        lines += ["No detailed manual available for this command.", ""]
        return "\n".join(lines)

    lines += ["SYNOPSIS", f"    {page.synopsis}", "", "DESCRIPTION", f"    {page.description}", ""]
    if page.arguments:
        lines.append("ARGUMENTS")
        for argument in page.arguments:
            required = " (required)" if argument.required else " (optional)"
            lines += [f"    {argument.name}{required}", f"        {argument.description}"]
        lines.append("")
    if page.examples:
        lines.append("EXAMPLES")
        for example in page.examples:
            lines += [f"    {example.command}", f"        {example.description}", ""]
    return "\n".join(lines)


def help_command(visible: Callable[[], dict[str, Command]]) -> Command:
    return Command(
        name="help",
        description="Display list of available commands",
        manual=manual(
            "help()",
            "Display a list of all available commands with their short descriptions. "
            "For detailed information about a specific command, use man(command).",
            examples=(("help()", "List all available commands"),),
        ),
        fn=lambda: render_help(visible()),
    )


def man_command(visible: Callable[[], dict[str, Command]]) -> Command:
    def man(name: Any = None) -> str:
        if not name:
            raise CommandValidationError('man: missing command name\nUsage: man("command")')
        command = visible().get(name)
        if command is None:
            raise NotFoundError(f"man: no manual entry for '{name}'")
        return render_manual(command)

    return Command(
        name="man",
        description="Display manual for a command",
        manual=manual(
            "man(command: string)",
            "Display detailed documentation for a command, including description, "
            "arguments, and usage examples.",
            arguments=(("command", "The name of the command to get help for", True),),
            examples=(('man("ls")', "Show manual for the ls command"),),
        ),
        fn=man,
    )


def build_session_commands(ctx: CommandContext) -> list[Command]:
    def su(username: Any = None) -> PasswordPrompt:
        if not username:
            raise CommandValidationError('su: missing username\nUsage: su("username")')
        if username not in passwd_entries(ctx, ctx.machine):
            raise NotFoundError(f"su: user {username} does not exist")
        return PasswordPrompt(target_user=username)

    def reset(confirmation: Any = None):
        if confirmation != RESET_CONFIRMATION:
            return RESET_WARNING
        return ResetRequest()

    return [
        Command(
            name="su",
            description="Switch user",
            manual=manual(
                "su(username: string)",
                "Switch to another user account on the current machine. You will be "
                "prompted for the password, which is checked against /etc/passwd.",
                arguments=(("username", 'The account to switch to (e.g. "root")', True),),
                examples=(('su("root")', "Switch to root"),),
            ),
            fn=su,
        ),
        Command(
            name="exit",
            description="Close SSH connection and return to previous machine",
            manual=manual(
                "exit()",
                "Close the current SSH session and restore the user, machine and working "
                "directory that were active before it was opened.",
                examples=(("exit()", "Return to the previous machine"),),
            ),
            fn=lambda: ExitRequest(),
        ),
        Command(
            name="reset",
            description="Reset game to factory defaults (clears all saved progress)",
            manual=manual(
                'reset(["confirm"])',
                "Clear all saved state: the session (user, machine, path) and every "
                'filesystem change. Requires "confirm" to prevent accidental resets.',
                arguments=(("confirm", 'Pass "confirm" to execute the reset', True),),
                examples=(
                    ("reset()", "Show reset warning"),
                    ('reset("confirm")', "Reset everything"),
                ),
            ),
            fn=reset,
        ),
        Command(name="clear", description="Clear the terminal screen", fn=lambda: ClearScreen()),
        help_command(lambda: ctx.visible_commands()),
        man_command(lambda: ctx.visible_commands()),
    ]
