# src/stepflow/core/pipeline/registry.py
"""
Registro de Steps sob nomes declarados.

O `StepRegistry` é o ponto onde a identidade de cada Step é fixada antes
da execução: todo Step registrado possui um `id` não vazio e único.
Pipelines podem então ser montados por nome (`registry.sequence(...)`).

Decisões arquiteturais:
    - A validação ocorre no registro, antes de qualquer execução
    - A ordem de registro é preservada
    - Duplicidade é erro fatal; o executor, por sua vez, aceita ids
      repetidos (o relatório de observabilidade fica ambíguo nesse caso)

Limites explícitos:
    - Não executa Steps
    - Não interage com RunContext ou Manifest
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .step import Step, step_name


class DuplicateStepIdError(ValueError):
    """
    Exceção levantada ao registrar dois Steps com o mesmo `id`.

    Nenhum registro parcial é aceito após a detecção; o registry não
    tenta renomear Steps automaticamente.
    """


class UnknownStepError(KeyError):
    """Nome solicitado não corresponde a nenhum Step registrado."""


@dataclass
class StepRegistry:
    """
    Registro canônico de Steps nomeados.

    Invariantes:
        - Cada `step.id` é único no registry
        - `list()` reflete exatamente a ordem de registro
    """

    _steps: Dict[str, Step] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, step: Step) -> None:
        step_id = step_name(step)
        if step_id is None:
            raise ValueError("step.id must be a non-empty string")

        if step_id in self._steps:
            raise DuplicateStepIdError(f"Duplicate step id: {step_id}")

        self._steps[step_id] = step
        self._order.append(step_id)

    def extend(self, steps: Iterable[Step]) -> None:
        for s in steps:
            self.add(s)

    def get(self, step_id: str) -> Step:
        if step_id not in self._steps:
            raise UnknownStepError(step_id)
        return self._steps[step_id]

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    def __len__(self) -> int:
        return len(self._order)

    def list(self) -> List[Step]:
        return [self._steps[sid] for sid in self._order]

    def sequence(self, *step_ids: str) -> List[Step]:
        """Steps na ordem pedida (a mesma entrada pode aparecer mais de uma vez)."""
        return [self.get(sid) for sid in step_ids]
