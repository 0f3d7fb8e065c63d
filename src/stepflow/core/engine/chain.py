# src/stepflow/core/engine/chain.py
"""
Composição de sub-sequências de Steps em um único Step.

Um ChainStep executa sua sub-sequência via `execute` e reapresenta o erro
interno sem encapsulamento. Chains podem ser aninhadas livremente.

Invariante:
    Invocar a chain equivale a chamar `execute` sobre a mesma sub-sequência:
    os mesmos Steps são invocados e o mesmo objeto de erro é observado.
"""

from __future__ import annotations

from typing import Generic, Sequence, Tuple, TypeVar

from stepflow.core.pipeline.context import RunContext
from stepflow.core.pipeline.step import Step

from .executor import execute, validate_steps

S = TypeVar("S")


class ChainStep(Generic[S]):
    """Step composto por uma sub-sequência ordenada de Steps."""

    def __init__(self, step_id: str, steps: Sequence[Step[S]]):
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")
        self.id = step_id
        self.steps: Tuple[Step[S], ...] = tuple(steps)
        validate_steps(self.steps)

    def run(self, ctx: RunContext, state: S) -> None:
        result = execute(ctx, state, self.steps)
        if result.error is not None:
            raise result.error

    def __repr__(self) -> str:
        return f"ChainStep(id={self.id!r}, steps={len(self.steps)})"


def chain(*steps: Step[S], step_id: str = "chain") -> ChainStep[S]:
    return ChainStep(step_id, steps)
