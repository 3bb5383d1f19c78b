"""Argument classification helpers.

The dispatcher never parses a provider's command line properly; it
only needs to know whether the tokens it received read like a
natural‑language prompt or like one of the provider's own
subcommands.  The functions in this module implement that decision
with a few cheap heuristics.  They are pure and never raise, so the
boundary cases can be exercised without spawning any process.

* :func:`classify_subcommand` – does a single token look like a
  subcommand name (``list``, ``pull``, ``mcp``)?
* :func:`looks_like_prompt` – does a token list look like a sentence?
* :func:`split_flags_from_text` – separate option flags from free
  text so each provider can place them where it expects them.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

# Keywords intercepted by ``llm`` itself and translated per provider,
# e.g. ``llm run "prompt"`` becomes ``opencode run`` or ``claude -p``.
UNIFIED_COMMANDS = ("run",)

_QUOTES = ('"', "'")


def classify_subcommand(token: str) -> bool:
    """Return ``True`` when ``token`` may be a provider subcommand name.

    A subcommand is a single bare word: non‑empty, not a flag, not
    quoted, and free of whitespace, ``?``, ``!`` and newlines.
    """
    if not token or token.startswith("-"):
        return False
    if token.startswith(_QUOTES):
        return False
    return not any(c.isspace() or c in "?!" for c in token)


def looks_like_prompt(tokens: Sequence[str]) -> bool:
    """Return ``True`` when any token reads like natural language.

    This is a heuristic, not a grammar: a single token with a space,
    a leading quote, a ``?``, a ``!`` or an embedded newline is
    enough to treat the whole invocation as a prompt.
    """
    if not tokens:
        return False
    for token in tokens:
        if " " in token:
            return True
        if token.startswith(_QUOTES):
            return True
        if "?" in token or "!" in token or "\n" in token:
            return True
    return False


def split_flags_from_text(tokens: Sequence[str]) -> Tuple[str, List[str]]:
    """Split ``tokens`` into prompt text and option flags.

    :param tokens: Raw argument tokens.
    :returns: Tuple ``(text, options)``.  ``text`` is the non‑flag
      tokens joined by single spaces.  ``options`` keeps every flag in
      order; a flag without ``=`` also claims the following token as
      its value unless that token is itself a flag.
    """
    options: List[str] = []
    text: List[str] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.startswith("-"):
            options.append(token)
            if "=" not in token and i + 1 < len(tokens) and not tokens[i + 1].startswith("-"):
                options.append(tokens[i + 1])
                i += 2
            else:
                i += 1
        else:
            text.append(token)
            i += 1
    return " ".join(text), options


def join_parts(*parts: Optional[str]) -> str:
    """Newline‑join the non‑empty ``parts``."""
    return "\n".join(part for part in parts if part)


def is_unified_command(token: str) -> bool:
    return token in UNIFIED_COMMANDS
