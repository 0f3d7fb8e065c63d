"""
stepflow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de payloads de erro do stepflow.
Payloads são a forma serializável de um erro, usada pela camada de
rastreabilidade (Manifest) e por relatórios externos. Devem ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

O executor nunca converte erros em payloads por conta própria: a conversão
acontece apenas na fronteira de observabilidade.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import (
    CommitFailedError,
    EngineConfigurationError,
    PipelineCancelled,
    RollbackFailedError,
    StepflowException,
    StopPipeline,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do stepflow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Steps
STEP_FAILED = "STEP_FAILED"
PIPELINE_STOPPED = "PIPELINE_STOPPED"
PIPELINE_CANCELLED = "PIPELINE_CANCELLED"

# Transação
TX_ROLLBACK_FAILED = "TX_ROLLBACK_FAILED"
TX_COMMIT_FAILED = "TX_COMMIT_FAILED"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


_TYPE_BY_EXCEPTION = (
    (StopPipeline, PIPELINE_STOPPED),
    (PipelineCancelled, PIPELINE_CANCELLED),
    (RollbackFailedError, TX_ROLLBACK_FAILED),
    (CommitFailedError, TX_COMMIT_FAILED),
    (EngineConfigurationError, ENGINE_CONFIGURATION_ERROR),
)


def exception_to_error(exc: BaseException, *, step_id: Optional[str] = None) -> ErrorPayload:
    """Converte uma exceção em ErrorPayload (serializável, acionável).

    Regras:
    - StepflowException conhecida: código estável do catálogo, details e hint preservados.
    - Demais StepflowException: STEP_FAILED com o nome da classe nos details.
    - Outras exceções (erros de domínio levantados por Steps): STEP_FAILED,
      sem stack trace, com a classe da exceção para diagnóstico.
    """
    if isinstance(exc, StepflowException):
        code = STEP_FAILED
        for cls, mapped in _TYPE_BY_EXCEPTION:
            if isinstance(exc, cls):
                code = mapped
                break
        details = dict(exc.details or {})
        details.setdefault("exception_class", exc.__class__.__name__)
        if step_id is not None:
            details.setdefault("step_id", step_id)
        return ErrorPayload(
            type=code,
            message=exc.message or "Erro de execução",
            details=details,
            hint=exc.hint,
        )

    return ErrorPayload(
        type=STEP_FAILED,
        message=str(exc) or "Falha inesperada durante execução do Step",
        details={
            "step_id": step_id,
            "exception_class": exc.__class__.__name__,
        },
        hint="Verifique os eventos do run e o Step indicado; nenhum retry é aplicado automaticamente.",
    )
