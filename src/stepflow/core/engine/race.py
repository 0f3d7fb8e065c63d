# src/stepflow/core/engine/race.py
"""
Extensão de corrida: o primeiro ramo bem-sucedido vence.

`first_success` NÃO faz parte do contrato do executor sequencial. Cada
ramo roda em uma thread própria sobre uma cópia profunda do State, de
modo que ramos nunca compartilham estado mutável.

Regras:
    - Vence o ramo bem-sucedido declarado primeiro (determinístico,
      independente de qual thread terminou antes)
    - Apenas os atributos do State do vencedor são copiados de volta
    - Se todos os ramos falharem, `AllBranchesFailedError` carrega os
      erros de cada ramo na ordem de declaração
    - Os ramos são resolvidos em ordem de declaração: assim que o ramo
      vencedor termina, o Step retorna sem esperar pelos ramos seguintes
    - Ramos não são interrompidos; devem observar `ctx.raise_if_cancelled()`
"""

from __future__ import annotations

import copy
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Generic, List, Optional, Sequence, Tuple, TypeVar

from stepflow.core.exceptions import AllBranchesFailedError
from stepflow.core.pipeline.context import RunContext
from stepflow.core.pipeline.step import Step

from .executor import validate_steps

S = TypeVar("S")


def _run_branch(branch: Step[S], ctx: RunContext, state: S) -> Tuple[S, Optional[Exception]]:
    try:
        branch.run(ctx, state)
    except Exception as exc:
        return state, exc
    return state, None


def _copy_back(target: Any, source: Any) -> None:
    if isinstance(target, dict):
        target.clear()
        target.update(source)
        return
    target.__dict__.update(source.__dict__)


class FirstSuccessStep(Generic[S]):
    """Step que corre ramos em paralelo e adota o State do vencedor."""

    def __init__(self, step_id: str, branches: Sequence[Step[S]], max_workers: Optional[int] = None):
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")
        if not branches:
            raise ValueError("first_success requer ao menos um ramo")
        self.id = step_id
        self.branches: Tuple[Step[S], ...] = tuple(branches)
        self.branch_ids = validate_steps(self.branches)
        self.max_workers = max_workers

    def run(self, ctx: RunContext, state: S) -> None:
        copies = [copy.deepcopy(state) for _ in self.branches]
        workers = self.max_workers or len(self.branches)

        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"stepflow-{self.id}")
        try:
            futures = [
                pool.submit(_run_branch, branch, ctx, branch_state)
                for branch, branch_state in zip(self.branches, copies)
            ]
            errors: List[BaseException] = []
            for branch_id, future in zip(self.branch_ids, futures):
                branch_state, error = future.result()
                if error is None:
                    _copy_back(state, branch_state)
                    ctx.log(step_id=self.id, level="info", message="branch won", branch=branch_id)
                    return
                errors.append(error)
        finally:
            # ramos posteriores ao vencedor seguem em background sobre suas cópias
            pool.shutdown(wait=False, cancel_futures=True)

        raise AllBranchesFailedError(
            f"Todos os {len(errors)} ramos falharam",
            details={
                "step_id": self.id,
                "branches": list(self.branch_ids),
                "exception_classes": [e.__class__.__name__ for e in errors],
            },
            errors=tuple(errors),
        )

    def __repr__(self) -> str:
        return f"FirstSuccessStep(id={self.id!r}, branches={list(self.branch_ids)})"


def first_success(*branches: Step[S], step_id: str = "first_success") -> FirstSuccessStep[S]:
    return FirstSuccessStep(step_id, branches)
