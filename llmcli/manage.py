"""Interactive management menu (``llm --self``).

The menu lets the user pick a default provider, install or uninstall
providers and see which ones are available.  Prompts use ``click`` so
they can be driven from tests with ``CliRunner`` input.  Install and
uninstall commands are shown first and only run after confirmation.
"""

from __future__ import annotations

import datetime as _datetime
import sys
from typing import List, Optional, Sequence, Tuple

import click

from . import __version__
from .config import ConfigStore
from .process import ProcessRunner, npm_available, shell_command
from .providers import Provider, ProviderRegistry

AUTO_DETECT = "__auto__"
OH_MY_OPENCODE = "oh-my-opencode"
OH_MY_OPENCODE_INSTALL = f"npm install -g {OH_MY_OPENCODE}"

_MENU = [
    ("set-default", "Set Default Provider"),
    ("install", "Install Provider"),
    ("uninstall", "Uninstall Provider"),
    ("list", "List Available Providers"),
    ("exit", "Exit"),
]


def _dim(text: str) -> str:
    return click.style(text, dim=True)


def _success(message: str) -> None:
    click.echo(click.style(message, fg="green"))


def _warn(message: str) -> None:
    click.echo(click.style(message, fg="yellow"))


def _error(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)


def _format_timestamp(epoch_ms: Optional[int]) -> str:
    if epoch_ms is None:
        return "Never"
    moment = _datetime.datetime.fromtimestamp(epoch_ms / 1000)
    return moment.strftime("%Y-%m-%d %H:%M")


def _choose(message: str, options: Sequence[Tuple[str, str]]) -> Optional[str]:
    """Show a numbered list and return the chosen value (``None`` for back)."""
    click.echo(f"  0) {_dim('Back to Main Menu')}")
    for idx, (_, label) in enumerate(options, start=1):
        click.echo(f"  {idx}) {label}")
    choice = click.prompt(message, type=click.IntRange(0, len(options)), default=0)
    if choice == 0:
        return None
    return options[choice - 1][0]


def _show_status(registry: ProviderRegistry, config: ConfigStore) -> None:
    default = config.get_default_provider()
    detected = registry.detect()
    click.echo()
    click.echo(click.style("System Status", bold=True))
    click.echo(f"  {click.style('Version:', fg='blue')}           v{__version__}")
    click.echo(f"  {click.style('Config Path:', fg='blue')}       {config.path}")
    click.echo(
        f"  {click.style('Default Provider:', fg='blue')}  "
        f"{click.style(default, fg='green') if default else click.style('Auto-detect', fg='magenta')}"
    )
    click.echo(
        f"  {click.style('System Detected:', fg='blue')}   "
        f"{click.style(detected.name, fg='cyan') if detected else click.style('None', fg='red')}"
    )
    click.echo(
        f"  {click.style('Last Update Check:', fg='blue')} "
        f"{_format_timestamp(config.get_update_check_last_at())}"
    )
    click.echo()


def handle_set_default(installed: List[Provider], config: ConfigStore) -> None:
    if not installed:
        _warn("No providers installed. Please install one first.")
        return
    options = [(AUTO_DETECT, f"{click.style('Auto-detect', fg='magenta')} {_dim('(Use first available)')}")]
    options.extend((p.name, f"{p.name} {_dim('- ' + p.description)}") for p in installed)
    choice = _choose("Select default provider", options)
    if choice is None:
        return
    if choice == AUTO_DETECT:
        config.clear_default_provider()
        _success("Default set to auto-detect")
    else:
        config.set_default_provider(choice)
        _success(f"Default set to {choice}")


def handle_list(statuses: List[Tuple[Provider, bool]], default: Optional[str], platform: Optional[str] = None) -> None:
    click.echo(click.style("Providers", bold=True))
    for provider, installed in statuses:
        marker = click.style(" (default)", fg="yellow") if provider.name == default else ""
        status = click.style("✓ Installed", fg="green") if installed else _dim("○ Not installed")
        click.echo(f"  {click.style(provider.name, bold=True)}{marker}")
        click.echo(f"    {_dim(provider.description)}")
        click.echo(f"    {status}")
        if not installed:
            click.echo(f"    {_dim('Install: ' + provider.install_hint(platform))}")
        click.echo()


def _run_hint(runner: ProcessRunner, hint: str, platform: Optional[str]) -> int:
    click.echo(f"Running: {hint}")
    return runner.spawn(shell_command(hint, platform), mirror_exit=False)


def handle_install(
    statuses: List[Tuple[Provider, bool]], runner: ProcessRunner, platform: Optional[str] = None
) -> None:
    missing = [p for p, installed in statuses if not installed]
    if not missing:
        _success("All providers are already installed!")
        return

    if any(p.install_hint(platform).startswith("npm install") for p in missing) and not npm_available():
        _warn("npm is not detected on your system.")
        _warn("Some providers require npm for installation.")

    options = [(p.name, f"{p.name} {_dim('- ' + p.description)}") for p in missing]
    choice = _choose("Select a provider to install", options)
    provider = next((p for p in missing if p.name == choice), None)
    if provider is None:
        return

    hint = provider.install_hint(platform)
    click.echo(f"To install {click.style(provider.name, fg='cyan')}, run:")
    click.echo(click.style(hint, bold=True))
    if not click.confirm("Run installation command now?", default=False):
        click.echo("Installation skipped.")
        return

    code = _run_hint(runner, hint, platform)
    if code != 0:
        _error(f"Installation failed with exit code {code}")
        return
    _success(f"{provider.name} installed successfully!")
    if provider.name == "opencode":
        _offer_oh_my_opencode(runner, platform)


def _offer_oh_my_opencode(runner: ProcessRunner, platform: Optional[str]) -> None:
    """Offer the optional agent-orchestration plugin that pairs with opencode."""
    click.echo()
    if not click.confirm(
        f"Would you also like to install '{OH_MY_OPENCODE}' for enhanced agent orchestration?",
        default=True,
    ):
        click.echo(_dim(f"You can install it later with: {OH_MY_OPENCODE_INSTALL}"))
        return
    code = _run_hint(runner, OH_MY_OPENCODE_INSTALL, platform)
    if code == 0:
        _success(f"{OH_MY_OPENCODE} installed successfully!")
    else:
        _error(f"{OH_MY_OPENCODE} installation failed with exit code {code}")


def handle_uninstall(
    statuses: List[Tuple[Provider, bool]], runner: ProcessRunner, platform: Optional[str] = None
) -> None:
    installed = [p for p, ok in statuses if ok]
    if not installed:
        _warn("No providers installed.")
        return

    options = [(p.name, f"{p.name} {_dim('- ' + p.description)}") for p in installed]
    choice = _choose("Select a provider to uninstall", options)
    provider = next((p for p in installed if p.name == choice), None)
    if provider is None:
        return

    hint = provider.uninstall_hint(platform)
    click.echo(f"To uninstall {click.style(provider.name, fg='cyan')}, run:")
    click.echo(click.style(hint, bold=True))
    if not click.confirm("Run uninstall command now?", default=False):
        click.echo("Uninstall skipped.")
        return

    code = _run_hint(runner, hint, platform)
    if code == 0:
        _success(f"{provider.name} uninstalled successfully!")
    else:
        _error(f"Uninstall failed with exit code {code}")


def run_self_ui(
    registry: ProviderRegistry,
    config: ConfigStore,
    runner: Optional[ProcessRunner] = None,
    platform: Optional[str] = None,
) -> None:
    """Run the management menu until the user exits.

    End of input or Ctrl‑C at any prompt leaves the menu.
    """
    runner = runner or ProcessRunner()
    platform = platform or sys.platform
    try:
        while True:
            _show_status(registry, config)
            for idx, (_, label) in enumerate(_MENU, start=1):
                click.echo(f"  {idx}) {label}")
            action = _MENU[click.prompt("Main Menu", type=click.IntRange(1, len(_MENU))) - 1][0]
            if action == "exit":
                break

            statuses = registry.list_with_status()
            if action == "set-default":
                handle_set_default(registry.installed(), config)
            elif action == "list":
                handle_list(statuses, config.get_default_provider(), platform)
            elif action == "install":
                handle_install(statuses, runner, platform)
            elif action == "uninstall":
                handle_uninstall(statuses, runner, platform)
    except click.Abort:
        click.echo()
    click.echo(_dim("Goodbye!"))
