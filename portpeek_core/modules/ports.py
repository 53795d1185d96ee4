from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Iterable, Mapping, Optional

UNKNOWN_PROCESS = "Unknown"
PROTOCOLS = ("TCP", "UDP")


def parse_number(s: str) -> Optional[int]:
    """ASCII digits only; None for anything else."""
    if s.isascii() and s.isdigit():
        return int(s)
    return None


@dataclass
class PortRecord:
    pid: int
    process_name: str
    port: int
    protocol: str
    state: str
    local_address: str

    def key(self) -> tuple[int, int, str]:
        return (self.pid, self.port, self.protocol)

    def to_dict(self) -> dict:
        return asdict(self)


def parse_address_port(field: str) -> tuple[str, int]:
    """
    Split a local-address field into (address, port).
    "10.0.0.1:5000->10.0.0.2:80" -> ("10.0.0.1", 5000)
    Anything unparseable yields port 0.
    """
    local = field.split("->", 1)[0]
    address, sep, port_str = local.rpartition(":")
    if not sep:
        return local, 0
    port = parse_number(port_str)
    if port is None or port > 65535:
        return address, 0
    return address, port


def collect(records: Iterable[PortRecord]) -> list[PortRecord]:
    """
    Drop repeated (pid, port, protocol) keys and zero ports,
    then sort by port keeping input order for equal ports.
    """
    seen: set[tuple[int, int, str]] = set()
    results: list[PortRecord] = []
    for rec in records:
        key = rec.key()
        if key in seen or rec.port == 0:
            continue
        seen.add(key)
        results.append(rec)
    results.sort(key=lambda r: r.port)
    return results


def _lsof_records(out: str) -> Iterable[PortRecord]:
    for line in out.splitlines()[1:]:
        parts = re.split(r"\s+", line.strip())
        if len(parts) < 9:
            continue

        pid = parse_number(parts[1])
        if not pid:
            continue

        address, port = parse_address_port(parts[8])
        state = parts[9].strip("()") if len(parts) > 9 else ""
        yield PortRecord(
            pid=pid,
            process_name=parts[0],
            port=port,
            protocol=parts[7].upper(),
            state=state,
            local_address=address,
        )


def parse_lsof_output(out: str) -> list[PortRecord]:
    """
    Parses `lsof -i -P -n` output:
    COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME [(STATE)]
    """
    return collect(_lsof_records(out))


def _netstat_records(out: str, names: Mapping[int, str]) -> Iterable[PortRecord]:
    for line in out.splitlines():
        parts = re.split(r"\s+", line.strip())
        if len(parts) < 4:
            continue

        proto = parts[0].upper()
        if proto not in PROTOCOLS:
            continue

        if proto == "TCP":
            state = parts[3]
            pid_idx = 4
        else:
            state = ""
            pid_idx = 3
        if len(parts) <= pid_idx:
            continue

        # unlike lsof rows, a bad pid here is kept as 0
        pid = parse_number(parts[pid_idx]) or 0

        address, port = parse_address_port(parts[1])
        yield PortRecord(
            pid=pid,
            process_name=names.get(pid, UNKNOWN_PROCESS),
            port=port,
            protocol=proto,
            state=state,
            local_address=address,
        )


def parse_netstat_output(out: str, names: Mapping[int, str]) -> list[PortRecord]:
    """
    Parses `netstat -ano` output, resolving names through a pid -> name table
    built beforehand from tasklist.
    """
    return collect(_netstat_records(out, names))
