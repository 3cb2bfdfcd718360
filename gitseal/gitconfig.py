"""
Git integration: filter registration and attribute tracking.

This module is responsible for:
- locating the command Git should run for the filter
- writing the filter definition into the global Git config
- adding filter lines to a ``.gitattributes`` file

This module does NOT:
- load or generate keys
- encrypt or decrypt data
"""

from __future__ import annotations

import shlex
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from .config import FILTER_NAME
from .errors import GitConfigError


def executable_command() -> str:
    """
    Return the command line Git should use to invoke this tool.

    Prefers the installed ``git-seal`` script, falls back to running the
    package with the current interpreter.
    """

    argv0 = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    if argv0 is not None and argv0.name == "git-seal" and argv0.exists():
        return shlex.quote(str(argv0.resolve()))

    found = shutil.which("git-seal")
    if found:
        return shlex.quote(str(Path(found).resolve()))

    return f"{shlex.quote(sys.executable)} -m gitseal"


def filter_settings(command: str, filter_name: str = FILTER_NAME) -> List[Tuple[str, str]]:
    """Return the (key, value) pairs that define the filter."""
    return [
        (f"filter.{filter_name}.clean", f"{command} clean"),
        (f"filter.{filter_name}.smudge", f"{command} smudge"),
        (f"filter.{filter_name}.required", "true"),
    ]


def run_git(args: Sequence[str]) -> None:
    try:
        subprocess.run(
            ["git", *args],
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise GitConfigError("Failed to run git config: git executable not found") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
        raise GitConfigError(f"Failed to run git config: {detail}") from e


def register_filter(command: str, filter_name: str = FILTER_NAME) -> None:
    """Write the clean/smudge filter definition into the global Git config."""
    for key, value in filter_settings(command, filter_name):
        run_git(["config", "--global", key, value])


# ---------------------------------------------------------------------------
# .gitattributes
# ---------------------------------------------------------------------------


def attributes_line(pattern: str, filter_name: str = FILTER_NAME) -> str:
    return f"{pattern} filter={filter_name} diff={filter_name}"


def track(
    patterns: Iterable[str],
    attributes_path: str | Path,
    filter_name: str = FILTER_NAME,
) -> List[str]:
    """
    Append filter lines for ``patterns`` to a ``.gitattributes`` file.

    Lines already present are skipped.

    Returns:
        list[str]: the lines that were added
    """

    path = Path(attributes_path)
    content = path.read_text(encoding="utf-8") if path.exists() else ""

    present = {line.strip() for line in content.splitlines()}
    added: List[str] = []
    for pattern in patterns:
        line = attributes_line(pattern, filter_name)
        if line in present:
            continue
        present.add(line)
        added.append(line)

    if not added:
        return added

    with path.open("a", encoding="utf-8") as fh:
        if content and not content.endswith("\n"):
            fh.write("\n")
        for line in added:
            fh.write(line + "\n")

    return added
