# src/stepflow/core/engine/usecase.py
"""
Usecase — fronteira de aplicação sobre o executor.

Um Usecase reúne uma sequência nomeada de Steps, o nome do slot de saída
no State e a configuração efetiva. A cada chamada ele:

    1. cria um RunContext (ou usa o fornecido)
    2. executa os Steps, com observabilidade quando habilitada
    3. levanta o erro em caso de falha real (o sinal de parada não é erro)
    4. devolve o valor do slot de saída (um `Result`) do State

Exemplo:

    register = Usecase(
        "user.register",
        [validate_email, validate_password, encrypt_password, create_user],
        output="user",
    )
    user = register(RegisterUserState(email="a@b.com", password="x"))

Limites explícitos:
    - Não constrói o State a partir do input (responsabilidade do chamador)
    - Não persiste nada além do Manifest opcional
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Generic, Optional, Sequence, Tuple, TypeVar

from stepflow import __version__
from stepflow.core.config.hashing import compute_config_hash
from stepflow.core.config.settings import EngineSettings
from stepflow.core.pipeline.context import RunContext, new_run_context
from stepflow.core.pipeline.result import Result
from stepflow.core.pipeline.step import Step
from stepflow.core.pipeline.types import ExecResult
from stepflow.core.traceability.manifest import create_manifest
from stepflow.core.traceability.observer import ExecutionRecorder, execute_observed

from .executor import execute, validate_steps

S = TypeVar("S")
T = TypeVar("T")


class Usecase(Generic[S, T]):
    def __init__(
        self,
        name: str,
        steps: Sequence[Step[S]],
        *,
        output: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        if not isinstance(name, str) or not name.strip():
            raise ValueError("usecase name must be a non-empty string")
        self.name = name
        self.steps: Tuple[Step[S], ...] = tuple(steps)
        self.output = output
        self.config: Dict[str, Any] = dict(config or {})
        validate_steps(self.steps)
        # valida a configuração na construção, não na primeira chamada
        EngineSettings.from_config(self.config)

    def new_context(self, **meta: Any) -> RunContext:
        return new_run_context(self.config, meta={"usecase": self.name, **meta})

    def execute(self, state: S, *, ctx: Optional[RunContext] = None) -> ExecResult:
        """Executa os Steps e devolve o desfecho bruto, sem levantar falhas de Step."""
        ctx = ctx or self.new_context()
        return self._run(ctx, state, EngineSettings.from_config(ctx.config))

    def _run(self, ctx: RunContext, state: S, settings: EngineSettings) -> ExecResult:
        if not settings.observability_enabled:
            return execute(ctx, state, self.steps)

        manifest = None
        if settings.manifest_path is not None:
            manifest = create_manifest(
                run_id=ctx.run_id,
                started_at=ctx.created_at,
                stepflow_version=__version__,
                config_hash=compute_config_hash(ctx.config),
            )
        recorder = ExecutionRecorder(
            manifest,
            manifest_path=Path(settings.manifest_path) if settings.manifest_path else None,
            pipeline_id=self.name,
        )
        return execute_observed(ctx, state, self.steps, recorder=recorder)

    def __call__(self, state: S, *, ctx: Optional[RunContext] = None) -> Optional[T]:
        """
        Executa e devolve o valor do slot de saída.

        Raises:
            Exception: O erro do Step que falhou (ou `StepFailedError`
                quando `observability.wrap_errors` está habilitado), ou o
                erro armazenado no slot de saída.
        """
        ctx = ctx or self.new_context()
        settings = EngineSettings.from_config(ctx.config)
        result = self._run(ctx, state, settings)
        result.raise_for_error(wrap=settings.wrap_errors)

        if self.output is None:
            return None
        slot = getattr(state, self.output)
        if not isinstance(slot, Result):
            raise TypeError(
                f"Slot de saída '{self.output}' deve ser Result, recebido: {type(slot).__name__}"
            )
        return slot.get()

    def __repr__(self) -> str:
        return f"Usecase(name={self.name!r}, steps={len(self.steps)})"
