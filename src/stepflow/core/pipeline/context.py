# src/stepflow/core/pipeline/context.py
"""
Contexto de execução de uma invocação de pipeline.

Este módulo define o `RunContext`, o contexto sensível a cancelamento
passado a todos os Steps junto com o State. Ele NÃO é o State: o State é
o registro mutável do usecase; o RunContext carrega apenas aquilo que é
transversal à execução.

O RunContext concentra:
    - identidade e metadados da execução (run_id, created_at, meta)
    - configuração resolvida
    - log estruturado de eventos e warnings por Step
    - sinal de cancelamento e deadline opcional

Princípios fundamentais:
    - Isolamento por execução (cada invocação possui seu próprio contexto)
    - Ausência de estado global compartilhado
    - Cancelamento é observado pelos Steps, nunca imposto pelo executor

Invariantes:
    - Logs sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id`
    - Um token cancelado nunca volta ao estado não cancelado

Limites explícitos:
    - Não executa Steps
    - Não persiste dados automaticamente
    - Não registra eventos no Manifest
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from stepflow.core.config.settings import EngineSettings
from stepflow.core.exceptions import PipelineCancelled


class CancelToken:
    """Sinal de cancelamento thread-safe compartilhável entre contextos."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


@dataclass
class RunContext:
    """
    Contexto de execução compartilhado por todos os Steps de uma invocação.

    Campos canônicos:
    - run_id: identificador único da execução
    - created_at: timestamp UTC de criação do contexto
    - config: configuração efetiva (defaults + local deep-merge)
    - meta: metadados livres (ex.: origem da chamada, usuário)
    - token: sinal de cancelamento
    - deadline: instante `time.monotonic()` após o qual o contexto é
      considerado expirado (None = sem deadline)
    - events: log estruturado de eventos
    - warnings: warnings por step_id
    """

    run_id: str
    created_at: datetime
    config: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)
    token: CancelToken = field(default_factory=CancelToken, repr=False)
    deadline: Optional[float] = None

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Cancelamento
    # -----------------------------
    def cancel(self, reason: str = "cancelled") -> None:
        self.token.cancel(reason)

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Segundos até o deadline (nunca negativo), ou None sem deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        """Levanta `PipelineCancelled` se o contexto foi cancelado ou expirou.

        Steps que fazem trabalho bloqueante devem chamar este método antes
        (e, quando possível, durante) o trabalho.
        """
        if self.token.cancelled:
            raise PipelineCancelled(
                f"Execução cancelada: {self.token.reason}",
                details={"run_id": self.run_id, "reason": self.token.reason},
            )
        if self.expired:
            raise PipelineCancelled(
                "Deadline da execução excedido",
                details={"run_id": self.run_id, "reason": "deadline_exceeded"},
                hint="Aumente `engine.timeout_seconds` ou reduza o trabalho por Step.",
            )

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)


def new_run_context(
    config: Optional[Dict[str, Any]] = None,
    *,
    run_id: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
    token: Optional[CancelToken] = None,
) -> RunContext:
    """Cria um RunContext a partir da configuração efetiva.

    O deadline é derivado de `engine.timeout_seconds` (quando definido),
    contado a partir da criação do contexto.
    """
    cfg = dict(config or {})
    settings = EngineSettings.from_config(cfg)

    deadline = None
    if settings.timeout_seconds is not None:
        deadline = time.monotonic() + settings.timeout_seconds

    return RunContext(
        run_id=run_id or uuid.uuid4().hex,
        created_at=datetime.now(timezone.utc),
        config=cfg,
        meta=dict(meta or {}),
        token=token or CancelToken(),
        deadline=deadline,
    )
