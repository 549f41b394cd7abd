"""Path resolution helpers.

All functions here are pure and machine-agnostic: callers supply the
working directory explicitly, so a path can be resolved "as if" on any
machine with any working directory (FTP resolves against the remote cwd
while the primary session stays on the origin machine).
"""

ROOT_PATH = "/"


def split_path(path: str) -> list[str]:
    """Split a path into its non-empty segments.

    Args:
        path: Any path string.

    Returns:
        List of segments with empty segments (repeated slashes) removed.
    """
    return [segment for segment in path.split("/") if segment]


def normalize_path(path: str) -> str:
    """Normalize an absolute path.

    Collapses repeated slashes, drops "." segments and applies ".."
    segments. A ".." at root is a no-op.

    Args:
        path: Path to normalize (treated as absolute).

    Returns:
        Canonical absolute path, always starting with "/".

    Example:
        >>> normalize_path("//home/./jshacker/../guest/")
        '/home/guest'
    """
    segments: list[str] = []
    for segment in split_path(path):
        if segment == ".":
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    return ROOT_PATH + "/".join(segments)


def resolve_path(path: str, cwd: str) -> str:
    """Resolve a path against a working directory.

    Rules:
        - a path starting with "/" is normalized as-is
        - "." (or an empty path) resolves to the working directory
        - ".." removes the last segment, never going above root
        - any other segment is appended

    Args:
        path: Relative or absolute path.
        cwd: Absolute working directory to resolve against.

    Returns:
        Canonical absolute path.
    """
    if path.startswith("/"):
        return normalize_path(path)
    if path in ("", "."):
        return normalize_path(cwd)
    return normalize_path(f"{cwd}/{path}")


def parent_path(path: str) -> str:
    """Return the parent directory of an absolute path ("/" for root)."""
    segments = split_path(normalize_path(path))
    return ROOT_PATH + "/".join(segments[:-1])


def basename(path: str) -> str:
    """Return the last segment of a path ("" for root)."""
    segments = split_path(normalize_path(path))
    return segments[-1] if segments else ""


def join_path(directory: str, name: str) -> str:
    """Join a directory and a child name into a normalized path."""
    return normalize_path(f"{directory}/{name}")
