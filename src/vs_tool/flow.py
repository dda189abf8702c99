"""Conditional question flow.

A flow is an ordered list of :class:`Question` objects. Any field of a
question other than its key may be a function of the answers collected so
far; those functions are evaluated when the question is reached, so a
question can depend on anything answered before it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, TypeVar, Union

from vs_tool.errors import FlowCancelled

T = TypeVar("T")


class Kind(str, Enum):
    TEXT = "text"
    TOGGLE = "toggle"
    NUMBER = "number"
    SINGLE_SELECT = "single-select"
    MULTI_SELECT = "multi-select"
    SECRET = "secret"


SELECT_KINDS = (Kind.SINGLE_SELECT, Kind.MULTI_SELECT)


class AnswerSet(Mapping[str, Any]):
    """Answers keyed by question key. Answers are only ever added."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._answers: dict[str, Any] = dict(initial or {})

    def __getitem__(self, key: str) -> Any:
        return self._answers[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)

    def __repr__(self) -> str:
        return f"AnswerSet({self._answers!r})"

    def record(self, key: str, value: Any) -> None:
        if key in self._answers:
            raise KeyError(f"{key!r} has already been answered")
        self._answers[key] = value


Dynamic = Union[T, Callable[[AnswerSet], T]]
Validator = Callable[[Any, AnswerSet], Union[str, None]]
Formatter = Callable[[Any, AnswerSet], Any]


@dataclass(frozen=True)
class Choice:
    """A selectable option. ``value`` is what gets stored; defaults to the title."""

    title: str
    value: Any = None

    @property
    def stored(self) -> Any:
        return self.title if self.value is None else self.value


@dataclass(frozen=True)
class RenderedQuestion:
    """A question with every late-bound field resolved, ready to show."""

    key: str
    kind: Kind
    message: str
    default: Any = None
    choices: tuple[Choice, ...] = ()

    @property
    def titles(self) -> list[str]:
        return [c.title for c in self.choices]


class Prompter(Protocol):
    def ask(self, question: RenderedQuestion) -> Any:
        """Collect one raw answer. Raises FlowCancelled when the operator cancels."""

    def error(self, message: str) -> None:
        """Show a validation error before the question is asked again."""


def _resolve(value: Dynamic[T], answers: AnswerSet) -> T:
    return value(answers) if callable(value) else value  # type: ignore[return-value]


@dataclass(frozen=True)
class Question:
    key: str
    kind: Dynamic[Kind]
    message: Dynamic[str]
    default: Dynamic[Any] = None
    choices: Dynamic[Sequence[Choice] | None] = None
    active: Dynamic[bool] = True
    validate: Validator | None = None
    format: Formatter | None = None

    def is_active(self, answers: AnswerSet) -> bool:
        return bool(_resolve(self.active, answers))

    def render(self, answers: AnswerSet) -> RenderedQuestion:
        kind = _resolve(self.kind, answers)
        choices = tuple(_resolve(self.choices, answers) or ())
        # nothing to pick from, so the operator types the value instead
        if kind is Kind.SINGLE_SELECT and not choices:
            kind = Kind.TEXT
        return RenderedQuestion(
            key=self.key,
            kind=kind,
            message=_resolve(self.message, answers),
            default=_resolve(self.default, answers),
            choices=choices,
        )

    def check(self, raw: Any, rendered: RenderedQuestion, answers: AnswerSet) -> str | None:
        """Return an error message for an unacceptable answer, else None."""
        if rendered.kind is Kind.SINGLE_SELECT and raw not in rendered.titles:
            return "Select one of the listed options."
        if rendered.kind is Kind.MULTI_SELECT:
            unknown = [v for v in raw if v not in rendered.titles]
            if unknown:
                return f"Unknown option(s): {', '.join(map(str, unknown))}"
        if self.validate is not None:
            return self.validate(raw, answers)
        return None

    def value(self, raw: Any, rendered: RenderedQuestion, answers: AnswerSet) -> Any:
        """Map a checked raw answer to the value stored in the answer set."""
        by_title = {c.title: c for c in rendered.choices}
        if rendered.kind is Kind.SINGLE_SELECT:
            raw = by_title[raw].stored
        elif rendered.kind is Kind.MULTI_SELECT:
            raw = [by_title[t].stored for t in dict.fromkeys(raw)]
        return self.format(raw, answers) if self.format is not None else raw


@dataclass
class FlowEngine:
    """Walks question lists against a prompter."""

    prompter: Prompter
    asked: list[str] = field(default_factory=list)

    def ask(self, question: Question, answers: AnswerSet | None = None) -> Any:
        """Ask one question until it validates and return its stored value."""
        answers = answers if answers is not None else AnswerSet()
        rendered = question.render(answers)
        self.asked.append(question.key)
        while True:
            raw = self.prompter.ask(rendered)
            error = question.check(raw, rendered, answers)
            if error is None:
                return question.value(raw, rendered, answers)
            self.prompter.error(error)

    def run(self, questions: Iterable[Question], answers: AnswerSet | None = None) -> AnswerSet:
        """Ask every active question in order, recording answers as they resolve.

        FlowCancelled from the prompter propagates; no partial answer set is
        returned.
        """
        answers = answers if answers is not None else AnswerSet()
        for question in questions:
            if not question.is_active(answers):
                continue
            answers.record(question.key, self.ask(question, answers))
        return answers

    def confirm(self, message: str, default: bool = False) -> bool:
        return bool(self.ask(Question(key="confirm", kind=Kind.TOGGLE, message=message, default=default)))


def user_questions(existing: Sequence[Mapping[str, str]]) -> list[Question]:
    taken = {u["username"] for u in existing}

    def validate_username(value: str, _: AnswerSet) -> str | None:
        if not value:
            return "Username is required."
        if value in taken:
            return "User already added."
        return None

    return [
        Question(
            key="username",
            kind=Kind.TEXT,
            message="Enter a username.",
            validate=validate_username,
        ),
        Question(key="password", kind=Kind.SECRET, message="Enter a password."),
    ]


def collect_users(engine: FlowEngine) -> list[dict[str, str]]:
    """Ask for user accounts until the operator says no.

    Cancelling the username or password prompt ends the loop and keeps the
    users added so far. Cancelling the "add a user?" prompt itself propagates.
    """
    users: list[dict[str, str]] = []
    while engine.confirm(f"Add {'another' if users else 'a'} User?"):
        try:
            entry = engine.run(user_questions(users))
        except FlowCancelled:
            break
        users.append({"username": entry["username"], "password": entry["password"]})
    return users
