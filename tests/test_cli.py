import pytest
from click.testing import CliRunner

from llmcli import cli as cli_module
from llmcli import process
from llmcli.config import ConfigStore


class _FakePopen:
    calls: list = []
    returncode = 0

    def __init__(self, command, stdin=None, stdout=None, stderr=None) -> None:
        self.command = command
        self.fed = None
        type(self).calls.append(self)

    def communicate(self, data=None):
        self.fed = data
        return None, None

    def wait(self):
        return type(self).returncode


@pytest.fixture
def popen(monkeypatch):
    fake = type("FakePopen", (_FakePopen,), {"calls": [], "returncode": 0})
    monkeypatch.setattr(process.subprocess, "Popen", fake)
    return fake


@pytest.fixture
def installed(monkeypatch):
    names = set()
    monkeypatch.setattr(process, "which", lambda name: f"/usr/bin/{name}" if name in names else None)
    return names


def _invoke(args, **kwargs):
    return CliRunner().invoke(cli_module.cli, args, **kwargs)


def test_unknown_provider_exits_one(config_dir, installed, popen) -> None:
    installed.add("claude")
    result = _invoke(["--provider", "unknownname", "hello there"])
    assert result.exit_code == 1
    assert 'Unknown provider "unknownname"' in result.output
    assert popen.calls == []


def test_provider_not_installed_shows_install_hint(config_dir, installed, popen) -> None:
    result = _invoke(["--provider=ollama", "list"])
    assert result.exit_code == 1
    assert 'Provider "ollama" is not installed' in result.output
    assert "Install with: curl -fsSL https://ollama.com/install.sh | sh" in result.output


def test_prompt_is_forwarded(config_dir, installed, popen) -> None:
    installed.update({"claude", "gemini"})
    result = _invoke(["why is the sky blue?"])
    assert result.exit_code == 0
    assert [c.command for c in popen.calls] == [["claude", "-p", "why is the sky blue?"]]


def test_piped_input_joins_the_prompt(config_dir, installed, popen) -> None:
    installed.add("claude")
    result = _invoke(["--model", "opus"], input="def f(): pass\n")
    assert result.exit_code == 0
    assert popen.calls[0].command == ["claude", "-p", "def f(): pass", "--model", "opus"]


def test_reading_stdin_emits_no_deprecation_warning(config_dir, installed, popen, recwarn) -> None:
    installed.add("claude")
    result = _invoke(["--model", "opus"], input="notes\n")
    assert result.exit_code == 0
    assert popen.calls[0].command == ["claude", "-p", "notes", "--model", "opus"]
    assert [w for w in recwarn if issubclass(w.category, DeprecationWarning)] == []


def test_child_exit_code_is_propagated(config_dir, installed, popen) -> None:
    installed.add("gemini")
    popen.returncode = 3
    assert _invoke(["--version"]).exit_code == 3


def test_launch_failure_exits_one(config_dir, installed, monkeypatch) -> None:
    installed.add("codex")

    def _missing(*args, **kwargs):
        raise FileNotFoundError("codex")

    monkeypatch.setattr(process.subprocess, "Popen", _missing)
    assert _invoke(["hi there"]).exit_code == 1


def test_help_and_double_dash_reach_the_provider(config_dir, installed, popen) -> None:
    installed.add("claude")
    assert _invoke(["--help"]).exit_code == 0
    assert _invoke(["--", "x"]).exit_code == 0
    assert [c.command for c in popen.calls] == [["claude", "--help"], ["claude", "--", "x"]]


def test_unified_run_with_configured_default(config_dir, installed, popen) -> None:
    installed.update({"opencode", "claude"})
    ConfigStore().set_default_provider("claude")
    popen.returncode = 9
    result = _invoke(["run", "explain", "this"])
    assert result.exit_code == 9
    assert popen.calls[0].command == ["claude", "-p", "explain this"]


def test_unexpected_error_is_fatal(config_dir, installed, popen, monkeypatch) -> None:
    installed.add("claude")

    def _boom(self, argv):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli_module.Dispatcher, "dispatch", _boom)
    result = _invoke(["hello"])
    assert result.exit_code == 1
    assert "Fatal error: boom" in result.output


def test_self_opens_menu(config_dir, installed, popen) -> None:
    result = _invoke(["--self"], input="5\n")
    assert result.exit_code == 0
    assert "System Status" in result.output
    assert "Goodbye!" in result.output
    assert popen.calls == []


def test_no_provider_redirects_to_setup(config_dir, installed, popen) -> None:
    result = _invoke(["hello there"], input="5\n")
    assert result.exit_code == 0
    assert "No LLM providers found. Opening setup..." in result.output
    assert "Main Menu" in result.output
    assert popen.calls == []
