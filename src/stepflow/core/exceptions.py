
"""
stepflow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do stepflow.

Objetivo:
- Permitir que Steps, Executor e wrappers levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload
- Distinguir falhas de Step, sinal de parada, cancelamento e falhas transacionais

Regras:
- Não contém lógica de domínio de nenhum usecase concreto.
- Exceções carregam apenas dados estruturados em `details`.
- Exceções são mutáveis: `with`, `@contextmanager` e `raise ... from`
  precisam atribuir `__traceback__`, `__context__` e `__cause__`.
- Falhas de Step em si NÃO são encapsuladas: o executor propaga a exceção
  original. As classes abaixo existem para os casos em que o próprio core
  precisa sinalizar algo (parada, cancelamento, transação, configuração).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(eq=False)
class StepflowException(Exception):
    """Base class para exceções internas do stepflow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __post_init__(self) -> None:
        # args = (message,) para que copy/pickle reconstruam a instância
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Sinal de parada
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class StopPipeline(StepflowException):
    """Sinal sentinela: encerra o pipeline antecipadamente sem ser falha real.

    O executor interrompe a sequência exatamente como em uma falha; o
    chamador reconhece o sinal via `is_stop` e não o reapresenta como erro.
    """


def is_stop(error: Optional[BaseException]) -> bool:
    """Indica se `error` é o sinal sentinela de parada."""
    return isinstance(error, StopPipeline)


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class PipelineCancelled(StepflowException):
    """O contexto de execução foi cancelado ou excedeu o deadline."""


@dataclass(eq=False)
class StepFailedError(StepflowException):
    """Falha de Step com identidade anexada (opt-in na fronteira de observabilidade).

    `cause` mantém o erro original, que também fica em `__cause__`.
    """

    step_id: Optional[str] = None
    index: Optional[int] = None
    cause: Optional[BaseException] = None


@dataclass(eq=False)
class AllBranchesFailedError(StepflowException):
    """Nenhum ramo de um `first_success` terminou com sucesso."""

    errors: Tuple[BaseException, ...] = ()


# ---------------------------------------------------------------------------
# Transação
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class TransactionError(StepflowException):
    """Falha do mecanismo transacional (não do Step)."""


@dataclass(eq=False)
class RollbackFailedError(TransactionError):
    """O rollback falhou após uma falha de Step.

    `original` é o erro do Step que motivou o rollback; `__cause__` é a
    exceção levantada pelo próprio rollback.
    """

    original: Optional[BaseException] = None


@dataclass(eq=False)
class CommitFailedError(TransactionError):
    """Todos os Steps concluíram, mas o commit falhou."""


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class EngineConfigurationError(StepflowException):
    """Sequência de Steps estruturalmente inválida para execução."""
