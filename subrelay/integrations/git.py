"""Git repository discovery for SUBRELAY.

The project deploy scope is anchored at the repository root, so the same
`.subagents/` directory is used no matter which subdirectory the CLI
runs from.
"""

from pathlib import Path


def find_repo_root(start: Path | None = None) -> Path | None:
    """Find the git repository root by looking for a .git entry.

    Traverses from ``start`` (default: current working directory) upward
    until:
    - A .git directory or file is found (returns that directory)
    - The filesystem root is reached (returns None)

    Args:
        start: Directory to start searching from

    Returns:
        Path to repository root, or None if not in a repository
    """
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / ".git").exists():
            return current

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


__all__ = [
    "find_repo_root",
]
