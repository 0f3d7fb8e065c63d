# src/stepflow/core/pipeline/__init__.py
"""
# Pipeline Core — stepflow

Este pacote define os **contratos canônicos** que compõem um pipeline:

- **context**: `RunContext`, `CancelToken`, `new_run_context`
- **step**: `Step` (Protocol), `FunctionStep`, `as_step`, `step`, `bind_steps`
- **result**: `Result`, `make_result`
- **types**: `StepStatus`, `ExecResult`
- **registry**: `StepRegistry`, `DuplicateStepIdError`

## Princípios Fundamentais

- Steps **não conhecem** o executor
- Comunicação entre Steps ocorre **apenas via State**
- Aspectos transversais (cancelamento, logs) ocorrem **via RunContext**
- Identidade de Step é sempre um **nome declarado**
"""

from .context import CancelToken, RunContext, new_run_context
from .registry import DuplicateStepIdError, StepRegistry, UnknownStepError
from .result import Result, make_result
from .step import FunctionStep, Step, as_step, bind_steps, step, step_name
from .types import ExecResult, StepStatus

__all__ = [
    "CancelToken",
    "RunContext",
    "new_run_context",
    "DuplicateStepIdError",
    "StepRegistry",
    "UnknownStepError",
    "Result",
    "make_result",
    "FunctionStep",
    "Step",
    "as_step",
    "bind_steps",
    "step",
    "step_name",
    "ExecResult",
    "StepStatus",
]
