# src/stepflow/core/traceability/__init__.py
"""
Pacote de rastreabilidade do stepflow.

Responsabilidades principais:
    - Criar e manter o Manifest de execução
    - Registrar eventos explícitos em um Event Log ordenado
    - Decorar execuções com observabilidade (`execute_observed`)
    - Persistir e restaurar o Manifest de forma determinística

Invariantes:
    - O Manifest inicia com `steps` e `events` vazios
    - Eventos nunca são reordenados automaticamente
    - Registrar nunca altera o desfecho de uma execução
"""

from .manifest import (
    PipelineManifest,
    add_event,
    create_manifest,
    load_manifest,
    run_finished,
    save_manifest,
    step_failed,
    step_finished,
    step_not_run,
    step_started,
)
from .observer import ExecutionRecorder, execute_observed

__all__ = [
    "PipelineManifest",
    "add_event",
    "create_manifest",
    "load_manifest",
    "run_finished",
    "save_manifest",
    "step_failed",
    "step_finished",
    "step_not_run",
    "step_started",
    "ExecutionRecorder",
    "execute_observed",
]
