"""Top-level package for the ``llm`` command dispatcher.

``llm`` is a thin front end for locally installed AI assistant command
line tools (OpenCode, Claude Code, Gemini CLI, Codex CLI and Ollama).
It picks the active tool, decides whether the arguments are a prompt
or one of the tool's own subcommands, folds piped stdin into the
prompt and launches the tool with the terminal attached.

The entry point lives in ``cli.py``; provider definitions are in
``providers.py``, argument heuristics in ``classifier.py`` and
process launching in ``process.py``.  Run ``python -m llmcli`` for
local development.
"""

__version__ = "0.3.0"

__all__ = [
    "cli",
    "classifier",
    "config",
    "dispatcher",
    "manage",
    "process",
    "providers",
]
