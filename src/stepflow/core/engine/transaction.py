# src/stepflow/core/engine/transaction.py
"""
Wrapper transacional de sub-sequências de Steps.

O `TxStep` delega a fronteira transacional a um colaborador externo
(`UnitOfWork`). O wrapper nunca acessa armazenamento e nunca faz retry:
ele apenas entrega ao UnitOfWork um bloco que executa os Steps e levanta
o erro do Step quando houver um.

Semântica:
    - Todos os Steps concluem → o bloco retorna normalmente → commit
    - Qualquer Step falha (inclusive `StopPipeline` e cancelamento) →
      o bloco levanta o MESMO erro → rollback → o erro se propaga

Atenção:
    Mutações no State feitas antes da falha já aconteceram e não são
    desfeitas pelo wrapper. O chamador deve tratá-las como não persistidas.

`BaseUnitOfWork` é um template opcional para implementações concretas
sobre `begin` / `commit` / `rollback`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, Protocol, Sequence, Tuple, TypeVar, runtime_checkable

from stepflow.core.exceptions import CommitFailedError, RollbackFailedError
from stepflow.core.pipeline.context import RunContext
from stepflow.core.pipeline.step import Step

from .executor import execute, validate_steps

S = TypeVar("S")

TxBlock = Callable[[RunContext], None]


@runtime_checkable
class UnitOfWork(Protocol):
    """
    Colaborador externo que delimita uma transação.

    Contrato de `run_in_transaction(ctx, fn)`:
        - `fn(ctx)` retorna normalmente → commit
        - `fn(ctx)` levanta → rollback e o erro de `fn` é propagado
    """

    def run_in_transaction(self, ctx: RunContext, fn: TxBlock) -> None:
        ...


class BaseUnitOfWork(ABC):
    """Template de UnitOfWork sobre begin/commit/rollback."""

    @abstractmethod
    def begin(self, ctx: RunContext) -> None:
        ...

    @abstractmethod
    def commit(self, ctx: RunContext) -> None:
        ...

    @abstractmethod
    def rollback(self, ctx: RunContext) -> None:
        ...

    def run_in_transaction(self, ctx: RunContext, fn: TxBlock) -> None:
        self.begin(ctx)
        try:
            fn(ctx)
        except Exception as exc:
            try:
                self.rollback(ctx)
            except Exception as rollback_exc:
                err = RollbackFailedError(
                    f"Rollback falhou após erro: {exc}",
                    details={
                        "run_id": ctx.run_id,
                        "original_class": exc.__class__.__name__,
                        "rollback_class": rollback_exc.__class__.__name__,
                    },
                    hint="O estado do armazenamento é indeterminado; verifique a transação.",
                    original=exc,
                )
                raise err from rollback_exc
            raise

        try:
            self.commit(ctx)
        except Exception as commit_exc:
            raise CommitFailedError(
                f"Commit falhou: {commit_exc}",
                details={"run_id": ctx.run_id, "exception_class": commit_exc.__class__.__name__},
            ) from commit_exc


class TxStep(Generic[S]):
    """Step que executa uma sub-sequência dentro de uma transação."""

    def __init__(self, step_id: str, uow: UnitOfWork, steps: Sequence[Step[S]]):
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")
        if not callable(getattr(uow, "run_in_transaction", None)):
            raise TypeError(f"UnitOfWork inválido: {type(uow).__name__} não implementa run_in_transaction")
        self.id = step_id
        self.uow = uow
        self.steps: Tuple[Step[S], ...] = tuple(steps)
        validate_steps(self.steps)

    def run(self, ctx: RunContext, state: S) -> None:
        def block(tx_ctx: RunContext) -> None:
            result = execute(tx_ctx, state, self.steps)
            if result.error is not None:
                raise result.error

        self.uow.run_in_transaction(ctx, block)

    def __repr__(self) -> str:
        return f"TxStep(id={self.id!r}, steps={len(self.steps)})"


def transactional(uow: UnitOfWork, *steps: Step[S], step_id: str = "tx") -> TxStep[S]:
    return TxStep(step_id, uow, steps)
