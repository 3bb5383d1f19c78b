"""Command line interface for the ``llm`` dispatcher.

``llm`` forwards its arguments to whichever AI assistant CLI is
active.  Only two flags belong to ``llm`` itself:

``--provider NAME`` / ``--provider=NAME``
    Use the named provider for this invocation.

``--self``
    Open the management menu (default provider, install/uninstall).

Everything else, ``--help`` included, is passed to the provider.
Examples::

    llm "why is the sky blue?"
    llm run explain this --model sonnet
    git diff | llm "write a commit message"
    llm --provider ollama list

The exit status is the provider's own exit status.  It is ``1`` when
the requested provider is unknown or not installed, when the provider
could not be started, or on any unexpected error.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import click

from .config import ConfigStore
from .dispatcher import Dispatcher
from .logging_utils import configure_logging
from .process import ProcessRunner
from .providers import ResolutionError, build_registry

_ARGV_KEY = "llmcli.argv"


class PassthroughCommand(click.Command):
    """A command that receives every token untouched.

    Click's own option parsing would swallow ``--`` and reject
    unknown options, both of which belong to the provider.
    """

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        ctx.meta[_ARGV_KEY] = list(args)
        return []


def run(argv: Sequence[str], config: Optional[ConfigStore] = None) -> int:
    """Dispatch ``argv`` and return the exit code.

    Resolution errors and any other exception are reported here, once.
    """
    runner = ProcessRunner()
    dispatcher = Dispatcher(build_registry(runner), config or ConfigStore(), runner)
    try:
        return dispatcher.dispatch(argv)
    except ResolutionError as exc:
        click.echo(click.style(f"Error: {exc}", fg="red"), err=True)
        if exc.hint:
            click.echo(click.style(exc.hint, dim=True), err=True)
        return 1
    except Exception as exc:
        click.echo(f"{click.style('Fatal error:', fg='red')} {exc}", err=True)
        return 1


@click.command(cls=PassthroughCommand, add_help_option=False)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Route prompts and commands to an installed AI assistant CLI."""
    configure_logging()
    ctx.exit(run(ctx.meta[_ARGV_KEY]))


def main() -> None:
    cli(prog_name="llm")


if __name__ == "__main__":
    main()
