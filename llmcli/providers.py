"""Provider layer for the ``llm`` dispatcher.

A provider is an independently installed AI assistant CLI.  This
module knows, for each supported tool, its executable name, how to
tell whether it is installed and how it wants to be invoked.  The
invocation logic is shared: every provider classifies its arguments
into one of three shapes and only the prompt shape differs per tool.

* :class:`Prompt` – natural‑language text for the tool's one‑shot
  mode, e.g. ``claude -p "<text>"`` or ``opencode run "<text>"``.
* :class:`Subcommand` – one of the tool's own commands passed through
  (``ollama list``, ``gemini mcp``).
* :class:`RawPassthrough` – everything else, forwarded untouched
  (``--help``, ``--version``, no arguments at all).

Supported providers, in auto‑detection priority order:

* ``OpenCodeProvider`` – ``opencode run <text>``
* ``ClaudeProvider`` – ``claude -p <text>``
* ``GeminiProvider`` – ``gemini -p <text>``
* ``CodexProvider`` – ``codex <text>``
* ``OllamaProvider`` – ``ollama run llama3 <text>``; only ollama's
  known commands are treated as subcommands.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union

from loguru import logger

from .classifier import classify_subcommand, join_parts, looks_like_prompt, split_flags_from_text
from .process import ProcessRunner, command_exists


class ProviderError(Exception):
    """Raised when a provider cannot be used for an invocation."""


class ResolutionError(ProviderError):
    """Raised when an explicitly requested provider cannot be resolved.

    ``hint`` carries optional follow‑up advice, such as the command
    that installs the provider.
    """

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static identity of a supported tool."""

    name: str
    description: str
    command: str
    prompt_prefix: Tuple[str, ...] = ()
    install_hint: str = ""
    install_hint_windows: Optional[str] = None
    uninstall_hint: str = ""
    uninstall_hint_windows: Optional[str] = None
    supports_subcommands: bool = True
    # When set, only these tokens are treated as subcommands.
    subcommands: Optional[FrozenSet[str]] = None


@dataclass(frozen=True)
class Prompt:
    text: str
    options: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Subcommand:
    name: str
    args: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RawPassthrough:
    args: Tuple[str, ...] = ()


ClassifiedArguments = Union[Prompt, Subcommand, RawPassthrough]


class Provider:
    """Base class for all providers.

    Subclasses only supply a :class:`ProviderDescriptor`; the
    classification and invocation algorithm lives here.  The runner
    and the installed‑command probe are injected so the whole
    decision path can be exercised without launching anything.
    """

    descriptor: ProviderDescriptor

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        probe: Optional[Callable[[str], bool]] = None,
    ) -> None:
        self.runner = runner or ProcessRunner()
        self.probe = probe or command_exists

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def description(self) -> str:
        return self.descriptor.description

    @property
    def command(self) -> str:
        return self.descriptor.command

    def is_installed(self) -> bool:
        return self.probe(self.command)

    def install_hint(self, platform: Optional[str] = None) -> str:
        """Return the shell command that installs this provider."""
        if (platform or sys.platform) == "win32" and self.descriptor.install_hint_windows:
            return self.descriptor.install_hint_windows
        return self.descriptor.install_hint

    def uninstall_hint(self, platform: Optional[str] = None) -> str:
        """Return the shell command that removes this provider."""
        if (platform or sys.platform) == "win32" and self.descriptor.uninstall_hint_windows:
            return self.descriptor.uninstall_hint_windows
        return self.descriptor.uninstall_hint

    def is_subcommand(self, token: str) -> bool:
        if not self.descriptor.supports_subcommands or not classify_subcommand(token):
            return False
        allowed = self.descriptor.subcommands
        return allowed is None or token in allowed

    def classify(self, args: Sequence[str], piped: Optional[str] = None) -> ClassifiedArguments:
        """Decide how ``args`` (and optional piped text) reach the tool.

        :param args: Passthrough tokens from the command line.
        :param piped: Text read from a redirected stdin, if any.
        :returns: A :class:`Prompt`, :class:`Subcommand` or
          :class:`RawPassthrough`.
        """
        if args and self.is_subcommand(args[0]):
            if piped:
                # Remaining tokens and piped text become one argument.
                return Subcommand(args[0], (join_parts(*args[1:], piped),))
            return Subcommand(args[0], tuple(args[1:]))
        if piped or looks_like_prompt(args):
            text, options = split_flags_from_text(args)
            return Prompt(join_parts(text, piped), tuple(options))
        return RawPassthrough(tuple(args))

    def build_argv(self, classified: ClassifiedArguments) -> List[str]:
        if isinstance(classified, Prompt):
            return [self.command, *self.descriptor.prompt_prefix, classified.text, *classified.options]
        if isinstance(classified, Subcommand):
            return [self.command, classified.name, *classified.args]
        return [self.command, *classified.args]

    def run(self, text: str, options: Sequence[str] = ()) -> int:
        """Send ``text`` to the tool's one‑shot prompt mode."""
        return self.runner.spawn(self.build_argv(Prompt(text, tuple(options))))

    def forward(self, args: Sequence[str], piped: Optional[str] = None) -> int:
        """Forward an invocation to the tool with inherited terminal streams.

        :returns: The tool's exit code, or ``1`` if it could not be
          started.
        """
        classified = self.classify(args, piped)
        logger.debug("{} classified {!r} as {}", self.name, list(args), classified)
        return self.runner.spawn(self.build_argv(classified))


class OpenCodeProvider(Provider):
    descriptor = ProviderDescriptor(
        name="opencode",
        description="OpenCode CLI",
        command="opencode",
        prompt_prefix=("run",),
        install_hint="bun add -g opencode-ai",
        install_hint_windows="bun add -g opencode-ai",
        uninstall_hint="opencode uninstall",
        uninstall_hint_windows="bun remove -g opencode-ai",
    )


class ClaudeProvider(Provider):
    descriptor = ProviderDescriptor(
        name="claude",
        description="Claude Code CLI by Anthropic",
        command="claude",
        prompt_prefix=("-p",),
        install_hint="curl -fsSL https://claude.ai/install.sh | bash",
        install_hint_windows='powershell -c "irm https://claude.ai/install.ps1 | iex"',
        uninstall_hint="rm -f ~/.local/bin/claude && rm -rf ~/.local/share/claude",
        uninstall_hint_windows='powershell -c "Remove-Item -Force $env:LOCALAPPDATA\\claude.exe"',
    )


class GeminiProvider(Provider):
    descriptor = ProviderDescriptor(
        name="gemini",
        description="Gemini CLI by Google",
        command="gemini",
        prompt_prefix=("-p",),
        install_hint="npm install -g @google/gemini-cli",
        uninstall_hint="npm uninstall -g @google/gemini-cli",
    )


class CodexProvider(Provider):
    descriptor = ProviderDescriptor(
        name="codex",
        description="OpenAI Codex CLI",
        command="codex",
        install_hint="npm install -g @openai/codex",
        uninstall_hint="npm uninstall -g @openai/codex",
    )


class OllamaProvider(Provider):
    """Local models through the ``ollama`` CLI.

    Prompts go to a fixed default model.  Unlike the agentic CLIs,
    a bare word is only a subcommand when ollama actually has it, so
    ``llm hello`` is not mistaken for ``ollama hello``.
    """

    DEFAULT_MODEL = "llama3"

    descriptor = ProviderDescriptor(
        name="ollama",
        description="Ollama (Local LLMs)",
        command="ollama",
        prompt_prefix=("run", DEFAULT_MODEL),
        install_hint="curl -fsSL https://ollama.com/install.sh | sh",
        uninstall_hint=(
            "sudo systemctl stop ollama && sudo systemctl disable ollama "
            "&& sudo rm /etc/systemd/system/ollama.service "
            "&& sudo rm -r $(which ollama | tr 'bin' 'lib') && sudo rm $(which ollama) "
            "&& sudo userdel ollama && sudo groupdel ollama && sudo rm -r /usr/share/ollama"
        ),
        subcommands=frozenset(
            {
                "serve", "create", "show", "run", "stop", "pull", "push",
                "signin", "signout", "list", "ls", "ps", "cp", "rm", "help",
            }
        ),
    )


# Auto‑detection priority order.
PROVIDER_CLASSES = (
    OpenCodeProvider,
    ClaudeProvider,
    GeminiProvider,
    CodexProvider,
    OllamaProvider,
)


class ProviderRegistry:
    """Ordered catalog of providers.

    The catalog order is the tie‑break for auto‑detection and is
    preserved by every listing.
    """

    def __init__(self, providers: Sequence[Provider]) -> None:
        self._providers: Tuple[Provider, ...] = tuple(providers)

    def __iter__(self):
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def names(self) -> List[str]:
        return [p.name for p in self._providers]

    def get(self, name: str) -> Optional[Provider]:
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    def detect(self) -> Optional[Provider]:
        """Return the first installed provider, in catalog order."""
        for provider in self._providers:
            if provider.is_installed():
                logger.debug("auto-detected provider {}", provider.name)
                return provider
        return None

    def installed(self) -> List[Provider]:
        return [p for p in self._providers if p.is_installed()]

    def list_with_status(self) -> List[Tuple[Provider, bool]]:
        return [(p, p.is_installed()) for p in self._providers]


def build_registry(
    runner: Optional[ProcessRunner] = None,
    probe: Optional[Callable[[str], bool]] = None,
) -> ProviderRegistry:
    """Factory for the default provider catalog.

    All providers share one runner so the exit status of whichever
    one ran is visible to the caller.
    """
    runner = runner or ProcessRunner()
    return ProviderRegistry([cls(runner=runner, probe=probe) for cls in PROVIDER_CLASSES])
