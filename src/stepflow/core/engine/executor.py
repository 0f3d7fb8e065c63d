# src/stepflow/core/engine/executor.py
"""
Executor sequencial de Steps do stepflow.

Este módulo implementa o contrato central do core:

    execute(ctx, state, steps) -> ExecResult(completed, error)

Semântica:
    - Steps são invocados estritamente na ordem declarada, um por vez
    - A primeira exceção interrompe a sequência: nenhum Step posterior roda
    - O erro retornado é o MESMO objeto levantado pelo Step (sem wrap)
    - `completed` conta apenas Steps que retornaram normalmente
    - Zero Steps → sucesso com `completed == 0`

Decisões arquiteturais:
    - O executor nunca muta o State diretamente
    - O executor nunca loga, nunca faz retry e nunca verifica cancelamento;
      observabilidade é um decorator opcional (`traceability.observer`) e
      cancelamento é responsabilidade de cada Step
    - Validação estrutural (ids, `run` chamável) ocorre antes do primeiro
      Step; violações são erro de configuração, não falha de Step
    - BaseException que não é Exception (KeyboardInterrupt, SystemExit)
      atravessa o executor sem ser capturada

Limites explícitos:
    - Não executa Steps em paralelo, nunca
    - Não interpreta o sinal `StopPipeline` (isso é papel do chamador)
"""

from __future__ import annotations

from typing import Any, Generic, List, Sequence, Tuple, TypeVar

from stepflow.core.exceptions import EngineConfigurationError
from stepflow.core.pipeline.context import RunContext
from stepflow.core.pipeline.step import Step, step_name
from stepflow.core.pipeline.types import ExecResult

S = TypeVar("S")


def validate_steps(steps: Sequence[Any]) -> Tuple[str, ...]:
    """
    Valida a sequência e devolve os ids declarados na ordem.

    Ids repetidos são aceitos (o mesmo Step pode ser reutilizado), com a
    consequência de que o relatório de falha passa a ser ambíguo.

    Raises:
        EngineConfigurationError: Step sem `id` válido ou sem `run` chamável.
    """
    ids: List[str] = []
    for index, s in enumerate(steps):
        sid = step_name(s)
        if sid is None:
            raise EngineConfigurationError(
                "step.id must be a non-empty string",
                details={"index": index, "received": type(s).__name__},
                hint="Declare um nome para o Step (ex.: as_step('user.validate_email', fn)).",
            )
        if not callable(getattr(s, "run", None)):
            raise EngineConfigurationError(
                f"Step '{sid}' não implementa run(ctx, state)",
                details={"index": index, "step_id": sid},
            )
        ids.append(sid)
    return tuple(ids)


def execute(ctx: RunContext, state: S, steps: Sequence[Step[S]]) -> ExecResult:
    """
    Executa `steps` em ordem sobre `state`, parando na primeira falha.

    Args:
        ctx (RunContext): Contexto de execução repassado a cada Step.
        state: State mutável da invocação (nunca None).
        steps (Sequence[Step]): Sequência ordenada, possivelmente vazia.

    Returns:
        ExecResult: `completed`, `total` e, em caso de falha, o erro original
        com o id e a posição do Step que falhou.

    Raises:
        EngineConfigurationError: Sequência estruturalmente inválida ou State None.
    """
    if state is None:
        raise EngineConfigurationError(
            "State must not be None",
            hint="Construa o State da invocação antes de executar o pipeline.",
        )

    step_list = list(steps)
    ids = validate_steps(step_list)

    completed = 0
    for index, s in enumerate(step_list):
        try:
            s.run(ctx, state)
        except Exception as exc:
            return ExecResult(
                completed=completed,
                total=len(step_list),
                error=exc,
                failed_step=ids[index],
                failed_index=index,
                step_ids=ids,
            )
        completed += 1

    return ExecResult(completed=completed, total=len(step_list), step_ids=ids)


class Pipeline(Generic[S]):
    """Sequência de Steps reutilizável. Imutável: `with_step` retorna um novo Pipeline."""

    def __init__(self, steps: Sequence[Step[S]] = ()):
        self.steps: Tuple[Step[S], ...] = tuple(steps)
        validate_steps(self.steps)

    def run(self, ctx: RunContext, state: S) -> ExecResult:
        return execute(ctx, state, self.steps)

    def with_step(self, step: Step[S]) -> "Pipeline[S]":
        return Pipeline(self.steps + (step,))

    @property
    def step_ids(self) -> Tuple[str, ...]:
        return tuple(step_name(s) or "" for s in self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        return f"Pipeline(steps={list(self.step_ids)})"


def pipe(*steps: Step[S]) -> Pipeline[S]:
    """Monta um Pipeline reutilizável a partir de Steps posicionais."""
    return Pipeline(steps)
