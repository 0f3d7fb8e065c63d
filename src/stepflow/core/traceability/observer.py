# src/stepflow/core/traceability/observer.py
"""
Observabilidade opcional sobre o executor sequencial.

`execute_observed` decora uma execução sem alterar o seu contrato:

    - cada Step é envolvido em um proxy de tempo com o MESMO id, que
      reapresenta qualquer exceção sem modificação
    - após `execute` retornar, o `ExecutionRecorder` registra um evento
      estruturado `pipeline.finished` no RunContext e, se houver Manifest,
      o estado de cada Step e o evento `run_finished`

Regras:
    - O registro nunca altera o fluxo de controle: uma falha do recorder
      vira warning no RunContext e o ExecResult é devolvido inalterado
    - A identidade dos Steps é sempre o id declarado

Limitações conhecidas:
    - Steps com ids repetidos tornam o relatório ambíguo
    - Chains aninhadas são registradas pelo id da chain; Steps internos
      não aparecem individualmente
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from stepflow.core.engine.executor import execute, validate_steps
from stepflow.core.errors import exception_to_error
from stepflow.core.pipeline.context import RunContext
from stepflow.core.pipeline.step import Step, step_name
from stepflow.core.pipeline.types import ExecResult, StepStatus

from .manifest import (
    PipelineManifest,
    run_finished,
    save_manifest,
    step_failed,
    step_finished,
    step_not_run,
    step_started,
)

Clock = Callable[[], datetime]

PIPELINE_EVENT_ID = "pipeline"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _outcome_status(result: ExecResult) -> str:
    if result.ok:
        return StepStatus.SUCCESS.value
    return StepStatus.STOPPED.value if result.stopped else StepStatus.FAILED.value


class _TimedStep:
    """Proxy que mede início e fim do Step envolvido."""

    def __init__(self, inner: Step, index: int, recorder: "ExecutionRecorder"):
        self.id = step_name(inner)
        self._inner = inner
        self._index = index
        self._recorder = recorder

    def run(self, ctx: RunContext, state: Any) -> None:
        self._recorder._timings[self._index] = (self._recorder.now(), None)
        try:
            self._inner.run(ctx, state)
        finally:
            started, _ = self._recorder._timings[self._index]
            self._recorder._timings[self._index] = (started, self._recorder.now())


class ExecutionRecorder:
    """
    Registra o desfecho de uma execução no RunContext e, opcionalmente,
    em um Manifest.

    Args:
        manifest: Manifest a ser preenchido (None = apenas log no contexto).
        manifest_path: Se definido, o Manifest é salvo em JSON após o registro.
        pipeline_id: `step_id` usado no evento `pipeline.finished`.
        clock: Fonte de timestamps UTC (injetável em testes).
    """

    def __init__(
        self,
        manifest: Optional[PipelineManifest] = None,
        *,
        manifest_path: Optional[Path] = None,
        pipeline_id: str = PIPELINE_EVENT_ID,
        clock: Optional[Clock] = None,
    ):
        self.manifest = manifest
        self.manifest_path = Path(manifest_path) if manifest_path is not None else None
        self.pipeline_id = pipeline_id
        self._clock = clock or _utcnow
        self._timings: Dict[int, Tuple[datetime, Optional[datetime]]] = {}

    def now(self) -> datetime:
        return self._clock()

    def wrap(self, steps: Sequence[Step]) -> List[_TimedStep]:
        self._timings = {}
        return [_TimedStep(s, i, self) for i, s in enumerate(steps)]

    def record(self, ctx: RunContext, result: ExecResult) -> None:
        status = _outcome_status(result)
        level = {"success": "info", "stopped": "warning"}.get(status, "error")
        ctx.log(
            step_id=self.pipeline_id,
            level=level,
            message="pipeline.finished",
            status=status,
            completed=result.completed,
            total=result.total,
            failed_step=result.failed_step,
            summary=result.summary(),
        )

        if self.manifest is None:
            return

        self._record_steps(ctx, result)
        run_finished(
            self.manifest,
            ts=self.now(),
            status=status,
            completed=result.completed,
            total=result.total,
            failed_step=result.failed_step,
        )
        if self.manifest_path is not None:
            save_manifest(self.manifest, self.manifest_path)

    def _record_steps(self, ctx: RunContext, result: ExecResult) -> None:
        m = self.manifest
        for index, sid in enumerate(result.step_ids):
            status = result.status_of(index)
            if status is StepStatus.NOT_RUN:
                step_not_run(m, step_id=sid, index=index)
                continue

            started, ended = self._timings.get(index, (None, None))
            started = started or self.now()
            ended = ended or started
            step_started(m, step_id=sid, index=index, ts=started)

            if status is StepStatus.SUCCESS:
                step_finished(m, step_id=sid, ts=ended, warnings=ctx.warnings.get(sid))
            else:
                payload = exception_to_error(result.error, step_id=sid)
                step_failed(m, step_id=sid, ts=ended, error=payload.to_dict(), status=status.value)


def execute_observed(
    ctx: RunContext,
    state: Any,
    steps: Sequence[Step],
    *,
    recorder: Optional[ExecutionRecorder] = None,
) -> ExecResult:
    """
    Executa como `execute`, registrando o desfecho via `recorder`.

    O ExecResult devolvido é o mesmo que `execute` produziria: mesmos
    `completed`, ids e o mesmo objeto de erro.
    """
    recorder = recorder or ExecutionRecorder()
    step_list = list(steps)
    validate_steps(step_list)

    result = execute(ctx, state, recorder.wrap(step_list))

    try:
        recorder.record(ctx, result)
    except Exception as exc:
        ctx.add_warning(
            step_id=recorder.pipeline_id,
            message=f"observability recording failed: {exc.__class__.__name__}: {exc}",
        )
    return result
