# src/stepflow/core/engine/__init__.py
"""
Engine do stepflow.

Este pacote contém a execução de sequências de Steps e as composições
construídas sobre ela.

Componentes principais:
    - executor    → `execute`, `pipe`, `Pipeline` (sequencial, fail-fast)
    - chain       → sub-sequência exposta como um único Step
    - transaction → sub-sequência dentro de uma fronteira de UnitOfWork
    - race        → `first_success` (extensão concorrente, fora do executor)
    - usecase     → fronteira de aplicação com slot de saída e observabilidade

Princípios fundamentais:
    - Steps rodam estritamente na ordem declarada
    - A primeira falha interrompe a sequência e é devolvida sem encapsulamento
    - Nenhuma decisão silenciosa: sem retry, sem log implícito

Limites explícitos:
    - Não define Steps de domínio
    - Não acessa armazenamento (transações são delegadas ao UnitOfWork)
"""

from .executor import Pipeline, execute, pipe, validate_steps
from .chain import ChainStep, chain
from .transaction import BaseUnitOfWork, TxStep, UnitOfWork, transactional
from .race import FirstSuccessStep, first_success
from .usecase import Usecase

__all__ = [
    "Pipeline",
    "execute",
    "pipe",
    "validate_steps",
    "ChainStep",
    "chain",
    "BaseUnitOfWork",
    "TxStep",
    "UnitOfWork",
    "transactional",
    "FirstSuccessStep",
    "first_success",
    "Usecase",
]
