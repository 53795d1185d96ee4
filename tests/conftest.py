from __future__ import annotations

import platform
import subprocess

import pytest

LSOF_OUT = """\
COMMAND     PID   USER   FD   TYPE             DEVICE SIZE/OFF NODE NAME
sshd        100   root    3u  IPv4 0x1111111111111111      0t0  TCP *:22 (LISTEN)
sshd        100   root    4u  IPv6 0x2222222222222222      0t0  TCP *:22 (LISTEN)
nginx       200   www     6u  IPv4 0x3333333333333333      0t0  TCP 127.0.0.1:80 (LISTEN)
sshd        100   root    3u  IPv4 0x1111111111111111      0t0  TCP *:22 (LISTEN)
"""

NETSTAT_OUT = """\

Active Connections

  Proto  Local Address          Foreign Address        State           PID
  TCP    0.0.0.0:135            0.0.0.0:0              LISTENING       900
  TCP    127.0.0.1:5000         127.0.0.1:50123        ESTABLISHED     4321
  UDP    0.0.0.0:5353           *:*                                    4321
  TCP    [::]:445               [::]:0                 LISTENING       4
"""

TASKLIST_OUT = """\
"System","4","Services","0","144 K"
"svchost.exe","900","Services","0","12,345 K"
"python.exe","4321","Console","1","50,112 K"
"""


class FakeTools:
    """
    Stands in for subprocess.run: maps tool name -> (returncode, stdout, stderr)
    or an OSError to raise on spawn.
    """

    def __init__(self, **tools):
        self.tools = tools
        self.calls: list[list[str]] = []

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        entry = self.tools.get(args[0])
        if entry is None:
            raise FileNotFoundError(2, "No such file or directory", args[0])
        if isinstance(entry, OSError):
            raise entry
        rc, out, err = entry
        return subprocess.CompletedProcess(args, rc, out, err)


@pytest.fixture
def fake_tools(monkeypatch):
    def install(system: str = "Darwin", **tools) -> FakeTools:
        fake = FakeTools(**tools)
        monkeypatch.setattr(subprocess, "run", fake)
        monkeypatch.setattr(platform, "system", lambda: system)
        return fake

    return install


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path
