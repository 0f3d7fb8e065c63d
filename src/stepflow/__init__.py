# src/stepflow/__init__.py
"""
stepflow — executor sequencial de Steps para lógica de usecases.

Um usecase é descrito como uma sequência ordenada de Steps que compartilham
um State mutável. O executor roda os Steps em ordem, interrompe na primeira
falha e devolve quantos concluíram e o erro original.

Arquitetura em alto nível:
    - core.pipeline     → Step, RunContext, Result, ExecResult, StepRegistry
    - core.engine       → execute/pipe, chain, transactional, first_success, Usecase
    - core.traceability → Manifest e observabilidade opcional
    - core.config       → configuração YAML/JSON e EngineSettings

Limites explícitos:
    - Não implementa persistência, HTTP ou modelagem de domínio
    - Não possui camada de UI ou CLI
"""

__version__ = "0.1.0"

from .core.engine import (
    BaseUnitOfWork,
    Pipeline,
    UnitOfWork,
    Usecase,
    chain,
    execute,
    first_success,
    pipe,
    transactional,
)
from .core.exceptions import (
    AllBranchesFailedError,
    CommitFailedError,
    EngineConfigurationError,
    PipelineCancelled,
    RollbackFailedError,
    StepFailedError,
    StepflowException,
    StopPipeline,
    is_stop,
)
from .core.pipeline import (
    ExecResult,
    Result,
    RunContext,
    Step,
    StepRegistry,
    as_step,
    bind_steps,
    make_result,
    new_run_context,
    step,
)
from .core.traceability import ExecutionRecorder, execute_observed

__all__ = [
    "__version__",
    "BaseUnitOfWork",
    "Pipeline",
    "UnitOfWork",
    "Usecase",
    "chain",
    "execute",
    "first_success",
    "pipe",
    "transactional",
    "AllBranchesFailedError",
    "CommitFailedError",
    "EngineConfigurationError",
    "PipelineCancelled",
    "RollbackFailedError",
    "StepFailedError",
    "StepflowException",
    "StopPipeline",
    "is_stop",
    "ExecResult",
    "Result",
    "RunContext",
    "Step",
    "StepRegistry",
    "as_step",
    "bind_steps",
    "make_result",
    "new_run_context",
    "step",
    "ExecutionRecorder",
    "execute_observed",
]
