from __future__ import annotations

import csv

from portpeek_core.modules.ports import parse_number


def parse_tasklist_output(out: str) -> dict[int, str]:
    """
    Returns a pid -> name table from `tasklist /FO CSV /NH`:
    "svchost.exe","1234","Services","0","12,345 K"
    """
    names: dict[int, str] = {}
    for parts in csv.reader(out.splitlines()):
        if len(parts) < 2:
            continue
        name = parts[0].strip().strip('"')
        pid = parse_number(parts[1].strip().strip('"'))
        if pid is not None:
            names[pid] = name
    return names


def kill_command(family: str, pid: int) -> list[str]:
    if family == "windows":
        return ["taskkill", "/F", "/PID", str(pid)]
    return ["kill", "-9", str(pid)]
