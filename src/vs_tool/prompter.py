"""Terminal prompter built on rich.prompt"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, IntPrompt, Prompt

from vs_tool.console import CONSOLE
from vs_tool.errors import FlowCancelled
from vs_tool.flow import Kind, RenderedQuestion


class RichPrompter:
    """Asks questions on the terminal. Ctrl-C or EOF cancels the flow."""

    def __init__(self, console: Console = CONSOLE) -> None:
        self.console: Console = console

    def ask(self, question: RenderedQuestion) -> Any:
        try:
            return self._ask(question)
        except (KeyboardInterrupt, EOFError) as e:
            self.console.print()
            raise FlowCancelled(question.key) from e

    def error(self, message: str) -> None:
        self.console.print(f"  [red]{escape(message)}[/red]")

    def _ask(self, question: RenderedQuestion) -> Any:
        message = f"[bold]{escape(question.message)}[/bold]"
        kwargs: dict[str, Any] = {"console": self.console}
        if question.default is not None:
            kwargs["default"] = question.default

        if question.kind is Kind.TOGGLE:
            return Confirm.ask(message, default=bool(question.default), console=self.console)
        if question.kind is Kind.NUMBER:
            return IntPrompt.ask(message, **kwargs)
        if question.kind is Kind.SECRET:
            return Prompt.ask(message, password=True, console=self.console)
        if question.kind is Kind.SINGLE_SELECT:
            self._show_choices(question)
            return self._pick(question, Prompt.ask(message, **kwargs))
        if question.kind is Kind.MULTI_SELECT:
            self._show_choices(question)
            raw = Prompt.ask(
                f"{message} [dim](comma-separated, blank for none)[/dim]",
                default="",
                show_default=False,
                console=self.console,
            )
            return [self._pick(question, part.strip()) for part in raw.split(",") if part.strip()]
        return Prompt.ask(message, **kwargs)

    def _show_choices(self, question: RenderedQuestion) -> None:
        for i, title in enumerate(question.titles, 1):
            marker = "[green]->[/green]" if title == question.default else "  "
            self.console.print(f"    {marker} [bold]{i}[/bold]. {escape(title)}")

    @staticmethod
    def _pick(question: RenderedQuestion, raw: str) -> str:
        """Accept either a listed title or its 1-based number."""
        titles = question.titles
        if raw not in titles and raw.isdigit() and 1 <= int(raw) <= len(titles):
            return titles[int(raw) - 1]
        return raw
