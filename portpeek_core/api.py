from __future__ import annotations

from typing import Optional

from portpeek_core.errors import InvalidProcessId, PortPeekError
from portpeek_core.modules.platforms import get_backend
from portpeek_core.modules.ports import PortRecord


def list_ports(system: Optional[str] = None) -> list[PortRecord]:
    return get_backend(system).list_ports()


def kill_process(pid: int, system: Optional[str] = None) -> str:
    if pid < 1:
        raise InvalidProcessId(f"Invalid process id {pid}: must be a positive integer")
    return get_backend(system).kill_process(pid)


def ports_payload(system: Optional[str] = None) -> dict:
    """
    {"ok": true, "items": [...]} or {"ok": false, "kind": ..., "message": ...}
    """
    try:
        records = list_ports(system)
    except PortPeekError as e:
        return e.to_dict()
    return {"ok": True, "items": [r.to_dict() for r in records]}


def kill_payload(pid: int, system: Optional[str] = None) -> dict:
    try:
        msg = kill_process(pid, system)
    except PortPeekError as e:
        return e.to_dict()
    return {"ok": True, "message": msg}
