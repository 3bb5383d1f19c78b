"""Child process launching.

Every provider invocation goes through :class:`ProcessRunner`.  A
:class:`SpawnRequest` describes the argument vector and how each of
the three standard streams is wired: inherited from our own terminal,
discarded, or (for stdin only) fed from an in‑memory byte buffer.

Providers are mostly Node.js tools installed as ``.cmd`` shims on
Windows, which ``CreateProcess`` cannot resolve from a bare name.  On
that platform the runner re‑wraps such invocations through
``cmd.exe`` and quotes each argument so the child still receives the
original values.  Nothing outside this module knows about it.
"""

from __future__ import annotations

import re
import subprocess
import sys
from dataclasses import dataclass
from enum import Enum
from shutil import which
from typing import List, Optional, Sequence, Union

from loguru import logger


class StreamMode(str, Enum):
    INHERIT = "inherit"
    IGNORE = "ignore"


StdinSource = Union[StreamMode, bytes]

_STREAMS = {
    StreamMode.INHERIT: None,
    StreamMode.IGNORE: subprocess.DEVNULL,
}

_WINDOWS_SHELL_EXCLUSIONS = {"cmd", "cmd.exe", "powershell", "powershell.exe", "pwsh", "pwsh.exe"}
_CMD_SPECIAL = re.compile(r"[\s&|<>()]")


@dataclass
class SpawnRequest:
    """Fully resolved launch description for one child process."""

    argv: List[str]
    stdin: StdinSource = StreamMode.INHERIT
    stdout: StreamMode = StreamMode.INHERIT
    stderr: StreamMode = StreamMode.INHERIT
    # Record the child's code as the status this process exits with.
    mirror_exit: bool = True


def command_exists(name: str) -> bool:
    """Return ``True`` when ``name`` resolves to an executable on PATH."""
    return which(name) is not None


def npm_available() -> bool:
    """Return ``True`` when an npm‑compatible package runner is installed."""
    return any(command_exists(cmd) for cmd in ("npm", "bunx", "npx"))


def should_use_windows_shell(cmd: str, platform: Optional[str] = None) -> bool:
    """Decide whether ``cmd`` must be launched through ``cmd.exe``.

    Only bare command names on Windows qualify: anything with a path
    separator or an extension is launched directly, as are the shells
    themselves.
    """
    platform = platform or sys.platform
    if platform != "win32":
        return False
    if cmd.lower() in _WINDOWS_SHELL_EXCLUSIONS:
        return False
    if "/" in cmd or "\\" in cmd:
        return False
    return "." not in cmd


def quote_for_cmd(arg: str) -> str:
    """Quote a single argument for a ``cmd.exe /s /c`` command line."""
    escaped = arg.replace("^", "^^").replace('"', '^"')
    if escaped == "" or _CMD_SPECIAL.search(escaped):
        return f'"{escaped}"'
    return escaped


def build_command(argv: Sequence[str], platform: Optional[str] = None) -> Union[List[str], str]:
    """Return what to hand to :class:`subprocess.Popen` for ``argv``.

    :returns: ``argv`` as a list, or a complete ``cmd.exe`` command
      line string when the invocation has to go through the Windows
      command interpreter.  A string is used there because
      ``subprocess.list2cmdline`` applies C runtime quoting, which
      ``cmd.exe`` does not understand.
    """
    if not should_use_windows_shell(argv[0], platform):
        return list(argv)
    line = " ".join(quote_for_cmd(arg) for arg in argv)
    # /s strips exactly the outermost pair of quotes around ``line``.
    return f'cmd.exe /d /s /c "{line}"'


def shell_command(line: str, platform: Optional[str] = None) -> List[str]:
    """Return an argv that runs ``line`` through the platform shell."""
    platform = platform or sys.platform
    if platform == "win32":
        return ["powershell", "-Command", line]
    return ["sh", "-c", line]


def _normalize_returncode(code: Optional[int]) -> int:
    # None (unknown) and negative (killed by a signal) both count as 0.
    if code is None or code < 0:
        return 0
    return code


class ProcessRunner:
    """Launch child processes and report their exit codes.

    ``exit_status`` holds the code of the most recent request that
    asked for ``mirror_exit``; the CLI exits with it when nothing else
    determined the outcome.
    """

    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or sys.platform
        self.exit_status = 0

    def spawn(
        self,
        argv: Sequence[str],
        stdin: StdinSource = StreamMode.INHERIT,
        stdout: StreamMode = StreamMode.INHERIT,
        stderr: StreamMode = StreamMode.INHERIT,
        mirror_exit: bool = True,
    ) -> int:
        return self.run(
            SpawnRequest(
                argv=list(argv),
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                mirror_exit=mirror_exit,
            )
        )

    def run(self, request: SpawnRequest) -> int:
        """Run ``request`` to completion and return the child's exit code.

        :returns: The child's exit code, or ``1`` when ``argv`` is empty
          or the executable could not be started at all.
        """
        if not request.argv or not request.argv[0]:
            logger.debug("refusing to spawn an empty command")
            return self._finish(request, 1)

        feed = request.stdin if isinstance(request.stdin, bytes) else None
        stdin = subprocess.PIPE if feed is not None else _STREAMS[request.stdin]
        command = build_command(request.argv, self.platform)
        logger.debug("spawning {!r}", command)
        try:
            proc = subprocess.Popen(
                command,
                stdin=stdin,
                stdout=_STREAMS[request.stdout],
                stderr=_STREAMS[request.stderr],
            )
        except OSError as exc:
            logger.debug("failed to launch {}: {}", request.argv[0], exc)
            return self._finish(request, 1)

        if feed is not None:
            # Writes the buffer, closes the pipe and waits.
            proc.communicate(feed)
        try:
            code = proc.wait()
        except KeyboardInterrupt:
            # The child shares our terminal and received the interrupt
            # too; it decides whether to exit.
            code = proc.wait()
        return self._finish(request, _normalize_returncode(code))

    def _finish(self, request: SpawnRequest, code: int) -> int:
        if request.mirror_exit:
            self.exit_status = code
        return code
