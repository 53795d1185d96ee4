from __future__ import annotations

import argparse
import json
import subprocess
import sys
import urllib.request
import webbrowser
from pathlib import Path
from typing import Optional

from portpeek_core.api import kill_payload, ports_payload
from portpeek_core.audit import log_kill, tail as audit_tail
from portpeek_core.settings import check_setting, coerce_value, load_settings, set_setting

RUNTIME_DIR = Path(".portpeek")
STATE_DIR = RUNTIME_DIR / "state"
WEB_STATE_FILE = STATE_DIR / "web.json"


def _ensure_runtime() -> None:
    STATE_DIR.mkdir(parents=True, exist_ok=True)


def _print(obj: dict) -> None:
    print(json.dumps(obj, indent=2))


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return n


def _confirm(question: str, assume_yes: bool) -> bool:
    if assume_yes or not load_settings().get("confirm_kill", True):
        return True
    try:
        answer = input(f"{question} [y/N] ")
    except (EOFError, KeyboardInterrupt):
        return False
    return answer.strip().lower() in ("y", "yes")


def cmd_ports(port: Optional[int], protocol: Optional[str], limit: int) -> int:
    res = ports_payload()
    if not res.get("ok"):
        _print(res)
        return 2

    items = res["items"]
    if port is not None:
        items = [x for x in items if x["port"] == port]
    if protocol:
        items = [x for x in items if x["protocol"] == protocol.upper()]
    if limit > 0:
        items = items[:limit]
    _print({"ok": True, "items": items})
    return 0


def _kill_one(pid: int) -> dict:
    res = kill_payload(pid)
    log_kill(pid, res, source="cli")
    return res


def cmd_kill(pid: int, assume_yes: bool) -> int:
    if not _confirm(f"Kill process {pid}?", assume_yes):
        _print({"ok": False, "message": "Aborted."})
        return 1
    res = _kill_one(pid)
    _print(res)
    return 0 if res.get("ok") else 2


def cmd_kill_port(port: int, assume_yes: bool) -> int:
    listing = ports_payload()
    if not listing.get("ok"):
        _print(listing)
        return 2

    owners: list[dict] = []
    seen_pids = set()
    for item in listing["items"]:
        # netstat rows with an unreadable pid carry pid 0
        if item["port"] == port and item["pid"] > 0 and item["pid"] not in seen_pids:
            seen_pids.add(item["pid"])
            owners.append(item)

    if not owners:
        _print({"ok": False, "message": f"No process found on port {port}"})
        return 2

    names = ", ".join(f"{x['process_name']} ({x['pid']})" for x in owners)
    if not _confirm(f"Kill {names} on port {port}?", assume_yes):
        _print({"ok": False, "message": "Aborted."})
        return 1

    results = [dict(_kill_one(x["pid"]), pid=x["pid"]) for x in owners]
    ok = all(r.get("ok") for r in results)
    _print({"ok": ok, "port": port, "results": results})
    return 0 if ok else 2


def cmd_audit_show(tail_n: int) -> int:
    _print({"ok": True, "items": audit_tail(tail_n)})
    return 0


def cmd_settings_show() -> int:
    _print({"ok": True, "settings": load_settings()})
    return 0


def cmd_settings_set(key: str, value: str) -> int:
    parsed = coerce_value(value)
    err = check_setting(key, parsed)
    if err:
        _print({"ok": False, "message": err})
        return 2
    data = set_setting(key, parsed)
    _print({"ok": True, "settings": data})
    return 0


def _read_web_state() -> dict:
    if not WEB_STATE_FILE.exists():
        return {}
    try:
        data = json.loads(WEB_STATE_FILE.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _write_web_state(pid: int, url: str) -> None:
    _ensure_runtime()
    WEB_STATE_FILE.write_text(json.dumps({"pid": pid, "url": url}, indent=2), encoding="utf-8")


def _api_alive(url: str) -> bool:
    try:
        with urllib.request.urlopen(url + "/api/health", timeout=1.2) as r:
            return r.status == 200
    except OSError:
        return False


def _default_url() -> str:
    cfg = load_settings()
    return f"http://{cfg['web_host']}:{cfg['web_port']}"


def uvicorn_command(host: str, port: int) -> list[str]:
    return [
        sys.executable, "-m", "uvicorn",
        "portpeek_core.web.app:app",
        "--host", host,
        "--port", str(port),
    ]


def cmd_status() -> int:
    state = _read_web_state()
    url = state.get("url")
    _print({
        "ok": True,
        "web_running": bool(url) and _api_alive(url),
        "web_url": url,
        "web_pid": state.get("pid"),
    })
    return 0


def cmd_web_start(host: Optional[str], port: Optional[int]) -> int:
    state = _read_web_state()
    if state.get("url") and _api_alive(state["url"]):
        _print({"ok": True, "message": "PortPeek API already running.", "url": state["url"]})
        return 0

    cfg = load_settings()
    host = host or cfg["web_host"]
    port = port or cfg["web_port"]
    p = subprocess.Popen(
        uvicorn_command(host, port),
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    url = f"http://{host}:{port}"
    _write_web_state(p.pid, url)
    _print({"ok": True, "message": "PortPeek API started.", "url": url, "pid": p.pid})
    return 0


def cmd_web_open() -> int:
    url = _read_web_state().get("url") or _default_url()
    webbrowser.open(url + "/api/ports")
    _print({"ok": True, "message": f"Opened {url}/api/ports"})
    return 0


def cmd_web_stop() -> int:
    pid = _read_web_state().get("pid")
    WEB_STATE_FILE.unlink(missing_ok=True)
    if not isinstance(pid, int) or pid < 1:
        _print({"ok": True, "message": "PortPeek API not running."})
        return 0

    # the server goes down through the same forced kill as any listed process
    res = kill_payload(pid)
    _print(res)
    return 0 if res.get("ok") else 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="portpeek", description="PortPeek - what is listening on my ports")
    sub = parser.add_subparsers(dest="cmd", required=True)

    ports_p = sub.add_parser("ports", help="List open ports and their owning processes")
    ports_p.add_argument("--port", type=_positive_int, default=None, help="Only show this port")
    ports_p.add_argument("--protocol", choices=["tcp", "udp"], default=None)
    ports_p.add_argument("--limit", type=int, default=0)

    kill_p = sub.add_parser("kill", help="Force-terminate a process by PID or by port")
    kill_p.add_argument("pid", type=_positive_int, nargs="?", default=None)
    kill_p.add_argument("--port", type=_positive_int, default=None, help="Kill whatever owns this port")
    kill_p.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    audit_p = sub.add_parser("audit", help="Audit log")
    audit_sub = audit_p.add_subparsers(dest="audit_cmd", required=True)
    ash = audit_sub.add_parser("show", help="Show recent audit events")
    ash.add_argument("--tail", type=int, default=50)

    settings_p = sub.add_parser("settings", help="Local settings")
    settings_sub = settings_p.add_subparsers(dest="settings_cmd", required=True)
    settings_sub.add_parser("show", help="Show settings")
    sset = settings_sub.add_parser("set", help="Set a setting")
    sset.add_argument("key", type=str)
    sset.add_argument("value", type=str)

    sub.add_parser("status", help="Show PortPeek runtime status")

    web_p = sub.add_parser("web", help="Control the local PortPeek JSON API")
    web_sub = web_p.add_subparsers(dest="webcmd", required=True)
    web_start = web_sub.add_parser("start", help="Start API server")
    web_start.add_argument("--host", type=str, default=None)
    web_start.add_argument("--port", type=_positive_int, default=None)
    web_sub.add_parser("open", help="Open the port listing in a browser")
    web_sub.add_parser("stop", help="Stop API server")

    return parser


def run(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    rc = 0
    if args.cmd == "ports":
        rc = cmd_ports(args.port, args.protocol, args.limit)
    elif args.cmd == "kill":
        if (args.pid is None) == (args.port is None):
            parser.error("kill needs exactly one of PID or --port")
        if args.pid is not None:
            rc = cmd_kill(args.pid, args.yes)
        else:
            rc = cmd_kill_port(args.port, args.yes)
    elif args.cmd == "audit":
        rc = cmd_audit_show(args.tail)
    elif args.cmd == "settings":
        if args.settings_cmd == "show":
            rc = cmd_settings_show()
        else:
            rc = cmd_settings_set(args.key, args.value)
    elif args.cmd == "status":
        rc = cmd_status()
    elif args.cmd == "web":
        if args.webcmd == "start":
            rc = cmd_web_start(args.host, args.port)
        elif args.webcmd == "open":
            rc = cmd_web_open()
        elif args.webcmd == "stop":
            rc = cmd_web_stop()
    return rc


def main() -> None:
    raise SystemExit(run())
