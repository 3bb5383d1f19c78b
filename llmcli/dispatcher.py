"""Invocation dispatch.

:class:`Dispatcher` turns one ``llm`` command line into one provider
invocation:

1. split off the flags ``llm`` owns (``--provider``, ``--self``);
2. resolve the active provider: explicit flag, configured default,
   then auto‑detection;
3. read piped stdin, once;
4. translate the unified ``run`` keyword, or let the provider classify
   the remaining tokens itself;
5. return the child's exit code.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, List, Optional, Sequence

import click
from loguru import logger

from .classifier import is_unified_command, join_parts, split_flags_from_text
from .config import ConfigStore
from .manage import run_self_ui
from .process import ProcessRunner, npm_available
from .providers import Provider, ProviderRegistry, ResolutionError


@dataclass
class ParsedArgs:
    provider: Optional[str] = None
    manage: bool = False
    passthrough: List[str] = field(default_factory=list)


def parse_args(argv: Sequence[str]) -> ParsedArgs:
    """Extract the dispatcher's own flags from ``argv``.

    Unrecognised tokens, including malformed flags, become
    passthrough tokens; this never fails.
    """
    parsed = ParsedArgs()
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--self":
            parsed.manage = True
            i += 1
        elif arg == "--provider":
            parsed.provider = argv[i + 1] if i + 1 < len(argv) else None
            i += 2
        elif arg.startswith("--provider="):
            parsed.provider = arg.split("=")[1]
            i += 1
        else:
            parsed.passthrough.append(arg)
            i += 1
    return parsed


def read_piped_input(stream: Optional[BinaryIO] = None) -> Optional[str]:
    """Return the text piped into stdin, or ``None``.

    Nothing is read from an interactive terminal.  Otherwise the
    stream is read to EOF; an empty stream yields ``None``.
    """
    if stream is None:
        stream = sys.stdin.buffer
    if stream.isatty():
        return None
    data = stream.read()
    if not data:
        return None
    return data.decode("utf-8", errors="replace").strip()


def _warn(message: str) -> None:
    click.echo(click.style(message, fg="yellow"), err=True)


class Dispatcher:
    """Resolve a provider and forward one invocation to it.

    :param registry: Provider catalog.
    :param config: Settings store; only the default provider is read.
    :param runner: The runner shared by the registry's providers.
    :param manage: Callable that runs the management UI.
    :param read_input: Callable returning piped text or ``None``.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        config: ConfigStore,
        runner: ProcessRunner,
        manage: Optional[Callable[[], None]] = None,
        read_input: Callable[[], Optional[str]] = read_piped_input,
    ) -> None:
        self.registry = registry
        self.config = config
        self.runner = runner
        self._manage = manage
        self._read_input = read_input

    def manage(self) -> int:
        if self._manage is not None:
            self._manage()
        else:
            run_self_ui(self.registry, self.config, self.runner)
        return self.runner.exit_status

    def resolve(self, explicit: Optional[str] = None) -> Optional[Provider]:
        """Return the provider to use, or ``None`` if nothing is installed.

        :raises ResolutionError: When ``explicit`` names an unknown or
          uninstalled provider.
        """
        if explicit:
            return self._resolve_explicit(explicit)

        default = self.config.get_default_provider()
        if default:
            provider = self.registry.get(default)
            if provider is not None and provider.is_installed():
                logger.debug("using configured default provider {}", default)
                return provider
            _warn(f'Warning: Default provider "{default}" is not available, auto-detecting...')
        return self.registry.detect()

    def _resolve_explicit(self, name: str) -> Provider:
        provider = self.registry.get(name)
        if provider is None:
            raise ResolutionError(
                f'Unknown provider "{name}"',
                hint=f"Available: {', '.join(self.registry.names())}",
            )
        if not provider.is_installed():
            install = provider.install_hint()
            hints = []
            if install.startswith("npm install") and not npm_available():
                hints.append("Note: npm is not detected on your system; it is required to install this provider.")
            hints.append(f"Install with: {install}")
            raise ResolutionError(f'Provider "{name}" is not installed', hint="\n".join(hints))
        return provider

    def dispatch(self, argv: Sequence[str]) -> int:
        """Handle one command line and return the exit code."""
        parsed = parse_args(argv)
        if parsed.manage:
            return self.manage()

        provider = self.resolve(parsed.provider)
        if provider is None:
            _warn("No LLM providers found. Opening setup...")
            return self.manage()

        piped = self._read_input()
        return self.forward(provider, parsed.passthrough, piped)

    def forward(self, provider: Provider, passthrough: Sequence[str], piped: Optional[str] = None) -> int:
        if passthrough and is_unified_command(passthrough[0]):
            text, options = split_flags_from_text(passthrough[1:])
            logger.debug("unified {!r} via {}", passthrough[0], provider.name)
            return provider.run(join_parts(text, piped), options)
        return provider.forward(passthrough, piped)
