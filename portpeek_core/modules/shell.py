from __future__ import annotations

import subprocess

from portpeek_core.errors import ExecutionError


def run_tool(args: list[str]) -> subprocess.CompletedProcess:
    """
    Run a platform tool and capture its text output.
    Blocks until the tool exits; exit status is left to the caller.
    """
    try:
        return subprocess.run(
            args,
            text=True,
            errors="ignore",
            capture_output=True,
        )
    except OSError as e:
        raise ExecutionError(f"Failed to execute {args[0]}: {e}") from e


def error_text(result: subprocess.CompletedProcess) -> str:
    return (result.stderr or "").strip()
