"""Tests for ConfirmationGate yes/no/all semantics."""

from modpurger.contracts import Decision
from modpurger.core.retention.confirm import ConfirmationGate


class _ScriptedPrompt:
    def __init__(self, *answers: Decision) -> None:
        self._answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> Decision:
        self.prompts.append(prompt)
        return self._answers.pop(0)


class TestConfirmationGate:
    def test_yes_and_no_are_per_call(self) -> None:
        ask = _ScriptedPrompt(Decision.YES, Decision.NO, Decision.YES)
        gate = ConfirmationGate(ask)

        assert [gate.confirm(f"t{i}") for i in range(3)] == [Decision.YES, Decision.NO, Decision.YES]
        assert ask.prompts == ["t0", "t1", "t2"]

    def test_yes_to_all_suppresses_later_prompts(self) -> None:
        ask = _ScriptedPrompt(Decision.NO, Decision.YES_TO_ALL)
        gate = ConfirmationGate(ask)

        decisions = [gate.confirm(f"t{i}") for i in range(4)]

        assert decisions == [Decision.NO, Decision.YES_TO_ALL, Decision.YES_TO_ALL, Decision.YES_TO_ALL]
        assert ask.prompts == ["t0", "t1"]
        assert gate.yes_to_all

    def test_yes_to_all_is_scoped_to_gate(self) -> None:
        first = ConfirmationGate(_ScriptedPrompt(Decision.YES_TO_ALL))
        first.confirm("t0")

        ask = _ScriptedPrompt(Decision.NO)
        second = ConfirmationGate(ask)

        assert second.confirm("t0") is Decision.NO
        assert not second.yes_to_all

    def test_always_yes_never_prompts(self) -> None:
        gate = ConfirmationGate.always_yes()

        assert all(gate.confirm("anything") is Decision.YES for _ in range(3))
