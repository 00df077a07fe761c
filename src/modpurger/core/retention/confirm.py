"""Operator confirmation before a target's deletion set is executed."""

from __future__ import annotations

from collections.abc import Callable

from modpurger.contracts.enums import Decision

AskFn = Callable[[str], Decision]


class ConfirmationGate:
    """Wraps an injected yes/no/all prompt.

    Once the operator answers YES_TO_ALL, every later confirm() returns
    YES_TO_ALL without prompting. The override lives only as long as this
    gate; nothing is persisted.
    """

    def __init__(self, ask: AskFn) -> None:
        self._ask = ask
        self._yes_to_all = False

    @classmethod
    def always_yes(cls) -> ConfirmationGate:
        """Gate for forced runs: never prompts, always proceeds."""
        return cls(lambda _prompt: Decision.YES)

    @property
    def yes_to_all(self) -> bool:
        return self._yes_to_all

    def confirm(self, prompt: str) -> Decision:
        if self._yes_to_all:
            return Decision.YES_TO_ALL
        decision = self._ask(prompt)
        if decision is Decision.YES_TO_ALL:
            self._yes_to_all = True
        return decision
