from __future__ import annotations

import platform
from typing import Optional

from portpeek_core.errors import TerminationFailure, ToolFailure, UnsupportedPlatform
from portpeek_core.modules.ports import PortRecord, parse_lsof_output, parse_netstat_output
from portpeek_core.modules.processes import kill_command, parse_tasklist_output
from portpeek_core.modules.shell import error_text, run_tool

LSOF_CMD = ["lsof", "-i", "-P", "-n"]
NETSTAT_CMD = ["netstat", "-ano"]
TASKLIST_CMD = ["tasklist", "/FO", "CSV", "/NH"]


def _checked_output(cmd: list[str]) -> str:
    r = run_tool(cmd)
    if r.returncode != 0:
        detail = error_text(r)
        msg = f"{cmd[0]} command failed"
        raise ToolFailure(f"{msg}: {detail}" if detail else msg)
    return r.stdout


class Backend:
    """One OS family's way of listing ports and killing processes."""

    family = ""

    def list_ports(self) -> list[PortRecord]:
        raise NotImplementedError

    def kill_process(self, pid: int) -> str:
        r = run_tool(kill_command(self.family, pid))
        if r.returncode != 0:
            # tool diagnostics go through untouched
            raise TerminationFailure(f"Failed to kill process {pid}: {r.stderr or ''}")
        return f"Process {pid} terminated"


class UnixBackend(Backend):
    family = "unix"

    def list_ports(self) -> list[PortRecord]:
        # lsof already reports the owning command per row
        return parse_lsof_output(_checked_output(LSOF_CMD))


class WindowsBackend(Backend):
    family = "windows"

    def process_names(self) -> dict[int, str]:
        r = run_tool(TASKLIST_CMD)
        if r.returncode != 0:
            return {}
        return parse_tasklist_output(r.stdout)

    def list_ports(self) -> list[PortRecord]:
        out = _checked_output(NETSTAT_CMD)
        return parse_netstat_output(out, self.process_names())


BACKENDS = {
    "darwin": UnixBackend,
    "linux": UnixBackend,
    "windows": WindowsBackend,
}


def get_backend(system: Optional[str] = None) -> Backend:
    system = (system or platform.system()).lower()
    cls = BACKENDS.get(system)
    if cls is None:
        raise UnsupportedPlatform()
    return cls()
