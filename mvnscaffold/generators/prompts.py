"""Questions asked by generators and the prompters that answer them.

A generator describes what it needs as a list of :class:`Question` objects;
the ``Prompter`` attached to the environment decides how they are answered.
``RichPrompter`` asks on the terminal with ``rich.prompt``; ``StaticPrompter``
answers from a mapping and falls back to each question's default, which is
what ``--defaults`` runs and the tests use.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from rich.prompt import Confirm, Prompt

from mvnscaffold.errors import InvalidInputError
from mvnscaffold.utils import console

Validator = Callable[[Any], "str | None"]


@dataclass
class Question:
    """A single generation property to obtain from the user.

    ``validate`` returns an error message, or ``None`` when the answer is
    acceptable.  Questions with ``when=False`` are skipped.
    """

    name: str
    message: str
    kind: Literal["text", "confirm", "choice"] = "text"
    default: Any = None
    choices: list[str] = field(default_factory=list)
    when: bool = True
    validate: Validator | None = None


def required(label: str) -> Validator:
    def _check(value: Any) -> str | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return f"{label} must be provided."
        return None

    return _check


class Prompter(Protocol):
    async def ask(self, questions: list[Question]) -> dict[str, Any]: ...


def _check(question: Question, value: Any) -> str | None:
    if question.validate is None:
        return None
    return question.validate(value)


class StaticPrompter:
    """Answer questions from a fixed mapping, falling back to defaults.

    Raises:
        InvalidInputError: If an answer (or default) fails validation.
    """

    def __init__(self, answers: dict[str, Any] | None = None) -> None:
        self.answers = dict(answers or {})

    async def ask(self, questions: list[Question]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for question in questions:
            if not question.when:
                continue
            value = self.answers.get(question.name, question.default)
            error = _check(question, value)
            if error:
                raise InvalidInputError(error)
            if value is not None:
                result[question.name] = value
        return result


class RichPrompter:
    """Ask questions interactively on the console."""

    async def ask(self, questions: list[Question]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for question in questions:
            if not question.when:
                continue
            result[question.name] = await asyncio.to_thread(self._ask_one, question)
        return result

    @staticmethod
    def _ask_one(question: Question) -> Any:
        kwargs: dict[str, Any] = {"console": console}
        if question.default is not None:
            kwargs["default"] = question.default
        while True:
            if question.kind == "confirm":
                value: Any = Confirm.ask(question.message, **kwargs)
            elif question.kind == "choice":
                value = Prompt.ask(question.message, choices=question.choices, **kwargs)
            else:
                value = Prompt.ask(question.message, **kwargs)

            error = _check(question, value)
            if error is None:
                return value
            console.print(f"[bold red]{error}[/bold red]")
