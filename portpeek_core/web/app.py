from __future__ import annotations

from fastapi import FastAPI, Path
from fastapi.responses import JSONResponse

from portpeek_core.api import kill_payload, ports_payload
from portpeek_core.audit import log_kill

VERSION = "0.1.0"

app = FastAPI(title="PortPeek", version=VERSION)


@app.get("/api/health")
def api_health():
    return JSONResponse({"ok": True, "name": "portpeek", "version": VERSION})


@app.get("/api/ports")
def api_ports():
    return JSONResponse(ports_payload())


@app.post("/api/kill/{pid}")
def api_kill(pid: int = Path(..., gt=0)):
    """
    Returns: {"ok":true,"message":"Process 123 terminated"}
    or {"ok":false,"kind":"termination_failure","message":"..."}
    Callers refresh /api/ports afterwards.
    """
    res = kill_payload(pid)
    log_kill(pid, res, source="web")
    return JSONResponse(res)
