import click
import pytest
from click.testing import CliRunner

from llmcli import __version__, manage
from llmcli.manage import run_self_ui


@pytest.fixture
def menu(make_registry, config, runner):
    """Build a click command that runs the menu against fake providers."""

    def _make(*installed: str) -> click.Command:
        registry = make_registry(*installed)

        @click.command()
        def _menu() -> None:
            run_self_ui(registry, config, runner, platform="linux")

        return _menu

    return _make


def test_exit_immediately(menu) -> None:
    result = CliRunner().invoke(menu("claude"), input="5\n")
    assert result.exit_code == 0
    assert "Default Provider:  Auto-detect" in result.output
    assert "System Detected:   claude" in result.output
    assert "Goodbye!" in result.output


def test_end_of_input_leaves_the_menu(menu) -> None:
    result = CliRunner().invoke(menu(), input="")
    assert result.exit_code == 0
    assert "Goodbye!" in result.output


def test_set_default_provider(menu, config) -> None:
    result = CliRunner().invoke(menu("claude", "ollama"), input="1\n3\n5\n")
    assert result.exit_code == 0
    assert config.get_default_provider() == "ollama"
    assert "Default set to ollama" in result.output


def test_set_default_back_to_auto_detect(menu, config) -> None:
    config.set_default_provider("claude")
    result = CliRunner().invoke(menu("claude"), input="1\n1\n5\n")
    assert result.exit_code == 0
    assert config.get_default_provider() is None
    assert "Default set to auto-detect" in result.output


def test_set_default_requires_an_installed_provider(menu, config) -> None:
    result = CliRunner().invoke(menu(), input="1\n5\n")
    assert "No providers installed. Please install one first." in result.output
    assert config.get_default_provider() is None


def test_list_providers(menu, config) -> None:
    config.set_default_provider("codex")
    result = CliRunner().invoke(menu("codex"), input="4\n5\n")
    assert result.exit_code == 0
    assert "codex (default)" in result.output
    assert "✓ Installed" in result.output
    assert "Install: npm install -g @google/gemini-cli" in result.output


def test_install_runs_hint_after_confirmation(menu, runner, monkeypatch) -> None:
    monkeypatch.setattr(manage, "npm_available", lambda: True)
    # Not installed, in order: opencode, gemini, codex, ollama.
    result = CliRunner().invoke(menu("claude"), input="2\n3\ny\n5\n")
    assert result.exit_code == 0
    assert runner.argvs == [["sh", "-c", "npm install -g @openai/codex"]]
    assert runner.requests[0].mirror_exit is False
    assert "codex installed successfully!" in result.output


def test_install_declined(menu, runner, monkeypatch) -> None:
    monkeypatch.setattr(manage, "npm_available", lambda: False)
    result = CliRunner().invoke(menu(), input="2\n1\nn\n5\n")
    assert "npm is not detected on your system." in result.output
    assert "bun add -g opencode-ai" in result.output
    assert "Installation skipped." in result.output
    assert runner.requests == []


def test_install_failure_reports_exit_code(menu, runner, monkeypatch) -> None:
    monkeypatch.setattr(manage, "npm_available", lambda: True)
    runner.returncode = 2
    result = CliRunner().invoke(menu(), input="2\n5\ny\n5\n")
    assert runner.argvs == [["sh", "-c", "curl -fsSL https://ollama.com/install.sh | sh"]]
    assert "Installation failed with exit code 2" in result.output
    assert runner.exit_status == 0


def test_nothing_to_install(menu) -> None:
    result = CliRunner().invoke(menu("opencode", "claude", "gemini", "codex", "ollama"), input="2\n5\n")
    assert "All providers are already installed!" in result.output


def test_uninstall(menu, runner) -> None:
    result = CliRunner().invoke(menu("gemini"), input="3\n1\ny\n5\n")
    assert result.exit_code == 0
    assert runner.argvs == [["sh", "-c", "npm uninstall -g @google/gemini-cli"]]
    assert "gemini uninstalled successfully!" in result.output


def test_uninstall_back_to_menu(menu, runner) -> None:
    result = CliRunner().invoke(menu("gemini"), input="3\n0\n5\n")
    assert result.exit_code == 0
    assert runner.requests == []


def test_status_shows_version(menu) -> None:
    result = CliRunner().invoke(menu(), input="5\n")
    assert f"Version:           v{__version__}" in result.output


def test_opencode_install_offers_oh_my_opencode(menu, runner, monkeypatch) -> None:
    monkeypatch.setattr(manage, "npm_available", lambda: True)
    result = CliRunner().invoke(menu(), input="2\n1\ny\ny\n5\n")
    assert result.exit_code == 0
    assert runner.argvs == [
        ["sh", "-c", "bun add -g opencode-ai"],
        ["sh", "-c", "npm install -g oh-my-opencode"],
    ]
    assert "oh-my-opencode installed successfully!" in result.output


def test_oh_my_opencode_declined(menu, runner, monkeypatch) -> None:
    monkeypatch.setattr(manage, "npm_available", lambda: True)
    result = CliRunner().invoke(menu(), input="2\n1\ny\nn\n5\n")
    assert runner.argvs == [["sh", "-c", "bun add -g opencode-ai"]]
    assert "You can install it later with: npm install -g oh-my-opencode" in result.output


def test_failed_opencode_install_skips_the_follow_up(menu, runner, monkeypatch) -> None:
    monkeypatch.setattr(manage, "npm_available", lambda: True)
    runner.returncode = 1
    result = CliRunner().invoke(menu(), input="2\n1\ny\n5\n")
    assert "Installation failed with exit code 1" in result.output
    assert "oh-my-opencode" not in result.output
    assert len(runner.requests) == 1


def test_set_default_lists_only_installed_providers(menu) -> None:
    result = CliRunner().invoke(menu("gemini", "ollama"), input="1\n0\n5\n")
    assert "2) gemini" in result.output
    assert "3) ollama" in result.output
    assert "claude -" not in result.output
