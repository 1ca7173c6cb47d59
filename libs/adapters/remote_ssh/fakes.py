from __future__ import annotations

import re
import shlex
from collections.abc import Callable, Mapping, Sequence

from ports.remote import RemoteExecPort

Responder = bytes | Callable[[str], bytes]


class FakeRemotePort(RemoteExecPort):
    """Answers commands from a table of regex -> canned stdout.

    The first pattern that matches the shell-quoted command line wins;
    unmatched commands produce empty output, like a failed grep/cat would.
    Every command line is recorded in ``calls``.
    """

    def __init__(self, responses: Mapping[str, Responder] | None = None) -> None:
        self._rules: list[tuple[re.Pattern[str], Responder]] = [
            (re.compile(pat), resp) for pat, resp in (responses or {}).items()
        ]
        self.calls: list[str] = []
        self.closed = False

    def on(self, pattern: str, response: Responder) -> FakeRemotePort:
        self._rules.append((re.compile(pattern), response))
        return self

    def execute(self, command: str, args: Sequence[str] = ()) -> bytes:
        line = shlex.join([command, *args])
        self.calls.append(line)
        for pat, resp in self._rules:
            if pat.search(line):
                return resp(line) if callable(resp) else resp
        return b""

    def close(self) -> None:
        self.closed = True


def device_remote(
    pids: Sequence[str],
    maps_by_pid: Mapping[str, str],
    frame: bytes,
    process_name: str = "xochitl",
) -> FakeRemotePort:
    """A fake device: ``pidof`` lists ``pids``, ``/proc/<pid>/maps`` and ``mem`` answer."""
    fake = FakeRemotePort()
    fake.on(rf"^pidof {re.escape(process_name)}$", (" ".join(pids) + "\n").encode())
    for pid, text in maps_by_pid.items():
        fake.on(rf"^cat /proc/{pid}/maps$", text.encode())
    fake.on(r"/proc/\d+/mem", frame)
    return fake
