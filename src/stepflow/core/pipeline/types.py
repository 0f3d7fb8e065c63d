# src/stepflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do stepflow.

Componentes principais:
    - StepStatus → enum de estados finais de um Step em uma execução
    - ExecResult → desfecho imutável de uma execução (PipelineOutcome)

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não executa Steps
    - Não registra eventos
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

from stepflow.core.exceptions import StepFailedError, is_stop


class StepStatus(str, Enum):
    """
    Estados finais possíveis de um Step em uma execução.

    Os valores são strings para facilitar serialização no Manifest.

    Estados definidos:
        - SUCCESS: `run` retornou normalmente
        - FAILED: `run` levantou uma exceção (falha real)
        - STOPPED: `run` levantou o sinal sentinela `StopPipeline`
        - NOT_RUN: o Step não foi invocado por causa de uma interrupção anterior
    """
    SUCCESS = "success"
    FAILED = "failed"
    STOPPED = "stopped"
    NOT_RUN = "not_run"


@dataclass(frozen=True)
class ExecResult:
    """
    Desfecho de uma execução de sequência de Steps.

    Campos:
        - completed: quantidade de Steps concluídos com sucesso
        - total: quantidade de Steps na sequência
        - error: exceção levantada pelo Step que interrompeu (o mesmo objeto)
        - failed_step: id declarado do Step que interrompeu
        - failed_index: posição (0-based) do Step que interrompeu
        - step_ids: ids declarados, na ordem de execução

    Desempacotável como par: `completed, error = execute(...)`.

    Invariantes:
        - `error is None` ⇔ `completed == total`
        - quando há erro, `failed_index == completed`
    """

    completed: int
    total: int
    error: Optional[BaseException] = None
    failed_step: Optional[str] = None
    failed_index: Optional[int] = None
    step_ids: Tuple[str, ...] = ()

    def __iter__(self) -> Iterator[object]:
        yield self.completed
        yield self.error

    @property
    def ok(self) -> bool:
        """Todos os Steps concluíram."""
        return self.error is None

    @property
    def stopped(self) -> bool:
        """Interrompido pelo sinal sentinela (não é falha real)."""
        return is_stop(self.error)

    @property
    def failed(self) -> bool:
        """Interrompido por uma falha real."""
        return self.error is not None and not is_stop(self.error)

    def status_of(self, index: int) -> StepStatus:
        if index < self.completed:
            return StepStatus.SUCCESS
        if self.error is not None and index == self.failed_index:
            return StepStatus.STOPPED if self.stopped else StepStatus.FAILED
        return StepStatus.NOT_RUN

    def wrapped_error(self) -> Optional[BaseException]:
        """Erro com a identidade do Step anexada (`StepFailedError`).

        O sinal de parada nunca é encapsulado.
        """
        if self.error is None or self.stopped:
            return self.error
        wrapped = StepFailedError(
            f"Step '{self.failed_step}' falhou ({self.position()}): {self.error}",
            details={
                "step_id": self.failed_step,
                "index": self.failed_index,
                "completed": self.completed,
                "total": self.total,
                "exception_class": self.error.__class__.__name__,
            },
            step_id=self.failed_step,
            index=self.failed_index,
            cause=self.error,
        )
        wrapped.__cause__ = self.error
        return wrapped

    def raise_for_error(self, *, wrap: bool = False) -> None:
        """Levanta o erro se houve falha real; o sinal de parada é ignorado."""
        if not self.failed:
            return
        err = self.wrapped_error() if wrap else self.error
        raise err  # type: ignore[misc]

    def position(self) -> str:
        """Posição 1-based do Step que interrompeu: "step N of M"."""
        if self.failed_index is None:
            return f"{self.completed} of {self.total}"
        return f"step {self.failed_index + 1} of {self.total}"

    def summary(self) -> str:
        if self.ok:
            return f"completed {self.completed} of {self.total} steps"
        verb = "stopped" if self.stopped else "failed"
        return f"{verb} at {self.position()} ({self.failed_step})"
