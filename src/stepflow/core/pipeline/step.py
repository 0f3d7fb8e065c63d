# src/stepflow/core/pipeline/step.py
"""
Contrato canônico de Step do stepflow.

Um Step é a menor unidade executável de um pipeline: recebe o contexto
de execução (`RunContext`) e o State da invocação, pode ler e escrever
no State, e sinaliza falha levantando uma exceção.

Princípios fundamentais:
    - Steps não conhecem o executor nem controlam a ordem de execução
    - Colaboradores (repositórios, serviços) são ligados na construção,
      nunca passados por chamada
    - A identidade do Step é um nome declarado (`id`), nunca recuperado
      por introspecção
    - Conformidade é garantida por duck typing (@runtime_checkable)

Fontes de Steps suportadas:
    - classes com `id` e `run(ctx, state)`
    - funções, closures e métodos ligados via `as_step` / `@step`
    - objetos de capacidade ("flow") via `bind_steps`
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Protocol, TypeVar, runtime_checkable

from stepflow.core.exceptions import EngineConfigurationError

from .context import RunContext

S_contra = TypeVar("S_contra", contravariant=True)

StepFn = Callable[[RunContext, Any], Any]


@runtime_checkable
class Step(Protocol[S_contra]):
    """
    Contrato canônico de um Step.

    Atributos obrigatórios:
        - id: nome declarado, estável, usado para observabilidade

    Semântica de `run`:
        - retorno normal  → sucesso (o valor retornado é ignorado)
        - exceção         → falha; o executor interrompe a sequência
        - `StopPipeline`  → parada antecipada sem falha real

    Invariantes:
        - `run` é chamado no máximo uma vez por Step por execução
        - O Step observa `ctx.raise_if_cancelled()` em trabalho longo
    """
    id: str

    def run(self, ctx: RunContext, state: S_contra) -> None:
        """Executa a etapa sobre o State compartilhado."""
        ...


class FunctionStep:
    """Step que associa um callable `fn(ctx, state)` a um nome declarado."""

    def __init__(self, step_id: str, fn: StepFn):
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")
        if not callable(fn):
            raise TypeError(f"Step '{step_id}' requer um callable, recebido: {type(fn).__name__}")
        self.id = step_id
        self._fn = fn

    def run(self, ctx: RunContext, state: Any) -> None:
        self._fn(ctx, state)

    def __repr__(self) -> str:
        return f"FunctionStep(id={self.id!r})"


def as_step(step_id: str, fn: StepFn) -> FunctionStep:
    """Registra `fn` sob o nome `step_id`."""
    return FunctionStep(step_id, fn)


def step(step_id: str) -> Callable[[StepFn], FunctionStep]:
    """Decorator: transforma uma função `fn(ctx, state)` em Step nomeado.

    Exemplo:

        @step("user.validate_email")
        def validate_email(ctx, state):
            ...
    """

    def decorator(fn: StepFn) -> FunctionStep:
        return FunctionStep(step_id, fn)

    return decorator


def bind_steps(flow: Any, *operations: str, prefix: Optional[str] = None) -> List[FunctionStep]:
    """
    Adapta um objeto de capacidade ("flow") em uma lista ordenada de Steps.

    Cada nome em `operations` deve ser um método `op(ctx, state)` do objeto.
    O id do Step é o nome da operação, opcionalmente prefixado
    (`prefix="user"` → `"user.validate_email"`).

    Raises:
        EngineConfigurationError: Se o objeto não expõe alguma operação.
    """
    steps: List[FunctionStep] = []
    for op in operations:
        fn = getattr(flow, op, None)
        if not callable(fn):
            raise EngineConfigurationError(
                f"Flow {type(flow).__name__} não implementa a operação '{op}'",
                details={"flow": type(flow).__name__, "operation": op},
                hint="Implemente o método op(ctx, state) no objeto de capacidade.",
            )
        step_id = f"{prefix}.{op}" if prefix else op
        steps.append(FunctionStep(step_id, fn))
    return steps


def step_name(obj: Any) -> Optional[str]:
    """Retorna o nome declarado do Step, ou None se ausente/inválido."""
    sid = getattr(obj, "id", None)
    if isinstance(sid, str) and sid.strip():
        return sid
    return None
