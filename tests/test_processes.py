from __future__ import annotations

from portpeek_core.modules.processes import kill_command, parse_tasklist_output

from conftest import TASKLIST_OUT


def test_parse_tasklist_output():
    names = parse_tasklist_output(TASKLIST_OUT)
    assert names == {4: "System", 900: "svchost.exe", 4321: "python.exe"}


def test_parse_tasklist_skips_short_and_malformed_rows():
    text = "\n".join([
        '"lonely"',
        '"bad.exe","N/A","Services","0","1 K"',
        '"Image, With Comma.exe","42","Console","1","2,000 K"',
        "",
    ])
    assert parse_tasklist_output(text) == {42: "Image, With Comma.exe"}


def test_kill_command():
    assert kill_command("unix", 12) == ["kill", "-9", "12"]
    assert kill_command("windows", 12) == ["taskkill", "/F", "/PID", "12"]


def test_parse_tasklist_ignores_non_ascii_pids():
    assert parse_tasklist_output('"app.exe","٤٢","Console","1","1 K"\n') == {}
