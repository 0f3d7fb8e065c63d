# src/stepflow/core/pipeline/result.py
"""
Container de resultado (valor + erro) com desembrulho adiado.

Steps tardios do pipeline guardam no State um `Result` ainda não
interpretado; quem desembrulha é o ponto de saída do usecase
(`state.output.unwrap()`).

Invariante (responsabilidade de quem constrói):
    - exatamente um entre {valor significativo, erro não nulo} vale
    - se `error` não é None, `value` deve ser tratado como indefinido

A construção NÃO valida o invariante.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Par imutável (value, error)."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def empty(cls) -> "Result[T]":
        """Slot ainda não produzido por nenhum Step."""
        return cls()

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: BaseException) -> "Result[T]":
        return cls(error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def unwrap(self) -> Tuple[Optional[T], Optional[BaseException]]:
        """Devolve (value, error) sem interpretação."""
        return self.value, self.error

    def get(self) -> Optional[T]:
        """Devolve o valor ou levanta o erro armazenado."""
        if self.error is not None:
            raise self.error
        return self.value


def make_result(value: Optional[T], error: Optional[BaseException] = None) -> Result[T]:
    return Result(value=value, error=error)
