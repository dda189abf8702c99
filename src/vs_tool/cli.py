#!/usr/bin/env python3
"""vs-tool CLI"""

from __future__ import annotations

import functools
import os
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import click
from click.shell_completion import get_completion_class
from rich.panel import Panel
from rich.table import Table

from vs_tool import __version__
from vs_tool.client import KubernetesResourceClient, ResourceClient
from vs_tool.config import Settings
from vs_tool.console import CONSOLE, configure_logging, print_error, print_success
from vs_tool.errors import FlowCancelled, TemplateNotFound
from vs_tool.flow import Prompter
from vs_tool.prompter import RichPrompter
from vs_tool.wizard import WizardSession, run_new, run_template

COMPLETE_VAR = "_VS_TOOL_COMPLETE"


@dataclass
class CliContext:
    """Settings and collaborator factories; tests swap the factories."""

    settings: Settings = field(default_factory=Settings.from_env)
    client_factory: Callable[[], ResourceClient] = KubernetesResourceClient
    prompter_factory: Callable[[], Prompter] = RichPrompter

    def session(self) -> WizardSession:
        return WizardSession.open(self.settings, self.prompter_factory(), self.client_factory)


class AliasedGroup(click.Group):
    """Group that also resolves command aliases"""

    aliases: dict[str, str] = {"tpl": "template"}

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))


def wizard_command(func: Callable[..., Any]) -> Callable[..., Any]:
    """Exit quietly on cancellation; report anything else and abort."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except FlowCancelled:
            raise SystemExit(0)
        except Exception as e:
            CONSOLE.print(f"\n[bold red]❌ Error: {e.__class__.__name__}: {e}[/bold red]")
            raise click.Abort()

    return wrapper


@click.group(cls=AliasedGroup, invoke_without_command=True)
@click.option("--debug", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="vs-tool")
@click.pass_context
def main(ctx: click.Context, debug: bool):
    """vs-tool - Create CoreWeave Virtual Servers interactively"""
    if ctx.obj is None:
        ctx.obj = CliContext()
    if debug:
        ctx.obj.settings = replace(ctx.obj.settings, debug=True)
    configure_logging(ctx.obj.settings.debug)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(1)


@main.command()
@click.pass_obj
@wizard_command
def new(obj: CliContext):
    """Create a Virtual Server"""
    CONSOLE.print(
        Panel.fit(
            "[bold blue]Virtual Server Wizard[/bold blue]\n"
            "Answer the questions below. Press Ctrl-C at any time to quit.",
            border_style="blue",
        )
    )
    run_new(obj.session())


@main.command()
@click.option("--from-save", "-s", "from_save", metavar="NAME", help="The template to use")
@click.option("--delete", "-d", "delete", metavar="NAME", help="Delete a template")
@click.option("--list", "-l", "list_", is_flag=True, help="List all templates")
@click.pass_obj
@wizard_command
def template(obj: CliContext, from_save: str | None, delete: str | None, list_: bool):
    """Create a Virtual Server using a saved template"""
    session = obj.session()

    if delete:
        try:
            session.templates.delete(delete)
        except TemplateNotFound as e:
            print_error(str(e))
            return
        print_success(f"Template {delete} deleted.")
    elif list_:
        display_templates(session.templates.names())
    else:
        run_template(session, from_save)


@main.command()
@click.option(
    "--shell",
    type=click.Choice(["bash", "zsh", "fish"]),
    help="Target shell (defaults to $SHELL)",
)
def completion(shell: str | None):
    """Generate completion script"""
    shell = shell or Path(os.environ.get("SHELL", "bash")).name
    completion_class = get_completion_class(shell)
    if completion_class is None:
        raise click.UsageError(f"Unsupported shell: {shell}")
    click.echo(completion_class(main, {}, "vs-tool", COMPLETE_VAR).source())


def display_templates(names: list[str]):
    """Display saved template names in a table"""
    if not names:
        CONSOLE.print("No saved templates.")
        return

    table = Table(title="Saved templates", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)
    CONSOLE.print(table)


if __name__ == "__main__":
    main()
