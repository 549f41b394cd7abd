"""Commands built on the async output protocol: output, resolve, decrypt."""

import logging
from concurrent.futures import Future
from typing import Any, Optional

from commands.base import Command, CommandContext, manual
from commands.filesystem import readable_file
from models.async_output import AsyncOutput, is_async_output
from models.exceptions import CommandValidationError, ShellError
from utils.crypto import DecryptionError, clean_key, decrypt_content, is_valid_key
from utils.stringify import stringify

logger = logging.getLogger(__name__)

RESOLVE_DELAY_MS = 100
DECRYPT_DELAY_MS = 500
DECRYPT_FAILED = "Error: Decryption failed - invalid key or corrupted data"


def write_output(ctx: CommandContext, path: str, content: str) -> None:
    """Persist captured text, overwriting an existing file or creating one.

    Raises:
        ShellError: If the write or create is refused.
    """
    target = ctx.resolve(path)
    if ctx.store.get_node(ctx.machine, target) is not None:
        result = ctx.store.write_file(ctx.machine, target, content, ctx.tier)
    else:
        result = ctx.store.create_file(ctx.machine, target, content, ctx.tier)
    if not result.allowed:
        raise ShellError(f"output: {result.error}")


def collect(ctx: CommandContext, handle: AsyncOutput, path: Optional[str]) -> Future:
    """Drain an async handle into a promise of its joined lines."""
    future: Future = Future()
    lines: list[str] = []

    def on_complete(follow_up=None):
        content = "\n".join(lines)
        try:
            if path:
                write_output(ctx, path, content)
        except ShellError as e:
            future.set_exception(e)
            return
        future.set_result(content)

    handle.start(lines.append, on_complete)
    return future


def build_async_commands(ctx: CommandContext) -> list[Command]:
    def output(value: Any = None, path: Optional[str] = None):
        if path is not None and not isinstance(path, str):
            raise CommandValidationError("output: file path must be a string")
        if is_async_output(value):
            return collect(ctx, value, path)
        content = stringify(value)
        if path:
            write_output(ctx, path, content)
        return content

    def resolve(value: Any = None) -> AsyncOutput:
        def body(emit, complete, token):
            if not isinstance(value, Future):
                emit(stringify(value))
                complete()
                return

            emit("Resolving...")

            def settle(future: Future) -> None:
                emit("")
                error = future.exception()
                if error is not None:
                    message = error.message if isinstance(error, ShellError) else str(error)
                    emit(f"Error: {message}")
                else:
                    emit(stringify(future.result()))
                complete()

            token.schedule(lambda: value.add_done_callback(settle), RESOLVE_DELAY_MS)

        return AsyncOutput(body, ctx.scheduler, label="resolve")

    def decrypt(path: Any = None, key: Any = None) -> AsyncOutput:
        if not path:
            raise CommandValidationError('decrypt: missing file path\nUsage: decrypt("file", "key")')
        if not key:
            raise CommandValidationError('decrypt: missing key\nUsage: decrypt("file", "key")')
        if not isinstance(key, str) or not is_valid_key(key):
            raise CommandValidationError(
                "decrypt: invalid key format\nKey must be 64 hexadecimal characters (256 bits)"
            )
        _, node = readable_file(ctx, "decrypt", path)
        if not node.content or not node.content.strip():
            raise CommandValidationError(f"decrypt: {path}: File is empty")

        payload = node.content
        key_hex = clean_key(key)

        def body(emit, complete, token):
            emit("Decrypting...")

            def finish():
                emit("")
                try:
                    emit(decrypt_content(payload, key_hex))
                except DecryptionError as e:
                    logger.debug(f"Decryption of {path} failed: {e}")
                    emit(DECRYPT_FAILED)
                complete()

            token.schedule(finish, DECRYPT_DELAY_MS)

        return AsyncOutput(body, ctx.scheduler, label="decrypt")

    return [
        Command(
            name="output",
            description="Capture command output to variable or file",
            manual=manual(
                "output(command, [filePath])",
                "Capture the output of a command. If filePath is provided, the output is "
                "also written to that file. Synchronous commands return the text directly; "
                "asynchronous ones (ping, nslookup, decrypt...) return a Promise that "
                "resolves to the text.",
                arguments=(
                    ("command", "The command whose output to capture", True),
                    ("filePath", "Optional path to write the output to", False),
                ),
                examples=(
                    ('const content = output(cat("file.txt"))', "Capture file content"),
                    ('const log = await output(nslookup("darknet.ctf"))', "Capture async output"),
                    ('output(cat("secret.txt"), "/tmp/backup.txt")', "Copy a file"),
                ),
            ),
            fn=output,
        ),
        Command(
            name="resolve",
            description="Unwrap a Promise and display its resolved value",
            manual=manual(
                "resolve(promise)",
                "Wait for a Promise to settle and display its value. If the value is not "
                "a Promise, it is displayed directly.",
                arguments=(("promise", "The Promise to resolve (or any value)", True),),
                examples=(
                    ('const p = output(nslookup("darknet.ctf")); resolve(p)', "Resolve a stored Promise"),
                ),
            ),
            fn=resolve,
        ),
        Command(
            name="decrypt",
            description="Decrypt a file using AES-256-GCM",
            manual=manual(
                "decrypt(file: string, key: string)",
                "Decrypt an encrypted file using AES-256-GCM. The file holds base64 data "
                "(IV + ciphertext). The key is a 64-character hex string (256 bits).",
                arguments=(
                    ("file", "Path of the encrypted file", True),
                    ("key", "64 hex characters", True),
                ),
                examples=(
                    ('decrypt("secret.enc", "a1b2...")', "Decrypt secret.enc"),
                ),
            ),
            fn=decrypt,
        ),
    ]
