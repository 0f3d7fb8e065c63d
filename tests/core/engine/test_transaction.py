# tests/core/engine/test_transaction.py
"""
Testes do wrapper transacional (`transactional` / `TxStep`).

Os testes asseguram que:
- sucesso de todos os Steps → commit
- falha de qualquer Step → rollback e o mesmo erro se propaga
- o sinal de parada também provoca rollback
- exceções do core atravessam um UnitOfWork baseado em `with` intactas
- falhas do próprio mecanismo (rollback/commit) são distinguíveis da
  falha do Step

Limites explícitos:
    - Não há armazenamento real; UnitOfWork é um stub que registra chamadas
"""

from contextlib import contextmanager

import pytest

try:
    from stepflow.core.engine.executor import execute
    from stepflow.core.engine.transaction import BaseUnitOfWork, TxStep, UnitOfWork, transactional
    from stepflow.core.exceptions import (
        CommitFailedError,
        PipelineCancelled,
        RollbackFailedError,
        StepFailedError,
        StopPipeline,
        TransactionError,
    )
    from stepflow.core.pipeline.step import as_step
except Exception as e:
    execute = None
    BaseUnitOfWork = object
    TxStep = None
    UnitOfWork = None
    transactional = None
    CommitFailedError = None
    PipelineCancelled = None
    StepFailedError = None
    as_step = None
    RollbackFailedError = None
    StopPipeline = None
    TransactionError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None

from tests.fixtures.steps.register_user import RecordingUnitOfWork


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing transaction wrapper. Import error: {_IMPORT_ERR}")


class ScriptedUnitOfWork(BaseUnitOfWork):
    """BaseUnitOfWork com falhas opcionais em rollback/commit."""

    def __init__(self, rollback_error=None, commit_error=None):
        self.calls = []
        self.rollback_error = rollback_error
        self.commit_error = commit_error

    def begin(self, ctx):
        self.calls.append("begin")

    def commit(self, ctx):
        self.calls.append("commit")
        if self.commit_error is not None:
            raise self.commit_error

    def rollback(self, ctx):
        self.calls.append("rollback")
        if self.rollback_error is not None:
            raise self.rollback_error


class SessionUnitOfWork:
    """UnitOfWork escrito com `@contextmanager`, como um session scope de ORM."""

    def __init__(self):
        self.calls = []

    @contextmanager
    def _session(self):
        self.calls.append("begin")
        try:
            yield
        except Exception:
            self.calls.append("rollback")
            raise
        self.calls.append("commit")

    def run_in_transaction(self, ctx, fn):
        with self._session():
            fn(ctx)


def test_all_steps_succeed_commits(dummy_ctx, DummyStep, call_log):
    _require_imports()
    uow = RecordingUnitOfWork()
    tx = transactional(uow, DummyStep("a"), DummyStep("b"), step_id="tx.ab")

    result = execute(dummy_ctx, {}, [tx])

    assert tuple(result) == (1, None)
    assert uow.calls == ["begin", "commit"]
    assert call_log == ["a", "b"]
    assert isinstance(tx, TxStep)
    assert isinstance(uow, UnitOfWork)


def test_step_failure_rolls_back_and_propagates_same_error(dummy_ctx, DummyStep, call_log):
    _require_imports()
    uow = RecordingUnitOfWork()
    err = RuntimeError("db down")
    tx = transactional(uow, DummyStep("a"), DummyStep("b", error=err), DummyStep("c"), step_id="tx")

    result = execute(dummy_ctx, {}, [tx, DummyStep("after")])

    assert result.error is err
    assert result.failed_step == "tx"
    assert uow.calls == ["begin", "rollback"]
    assert uow.observed_error is err
    assert call_log == ["a", "b"]


def test_stop_signal_inside_tx_still_rolls_back(dummy_ctx, DummyStep):
    _require_imports()
    uow = RecordingUnitOfWork()
    stop = StopPipeline("done early")

    result = execute(dummy_ctx, {}, [transactional(uow, DummyStep("a", error=stop))])

    assert result.stopped
    assert uow.calls == ["begin", "rollback"]


def test_base_unit_of_work_template_commit(dummy_ctx, DummyStep):
    _require_imports()
    uow = ScriptedUnitOfWork()

    result = execute(dummy_ctx, {}, [transactional(uow, DummyStep("a"))])

    assert result.ok
    assert uow.calls == ["begin", "commit"]


def test_base_unit_of_work_template_rollback(dummy_ctx, DummyStep):
    _require_imports()
    uow = ScriptedUnitOfWork()
    err = ValueError("bad")

    result = execute(dummy_ctx, {}, [transactional(uow, DummyStep("a", error=err))])

    assert result.error is err
    assert uow.calls == ["begin", "rollback"]


def test_rollback_failure_is_distinguishable(dummy_ctx, DummyStep):
    """
    Rollback que falha vira `RollbackFailedError`, com o erro do Step em
    `original` e a exceção do rollback em `__cause__`.
    """
    _require_imports()
    step_err = ValueError("bad")
    rollback_err = ConnectionError("lost connection")
    uow = ScriptedUnitOfWork(rollback_error=rollback_err)

    result = execute(dummy_ctx, {}, [transactional(uow, DummyStep("a", error=step_err))])

    assert isinstance(result.error, RollbackFailedError)
    assert isinstance(result.error, TransactionError)
    assert result.error.original is step_err
    assert result.error.__cause__ is rollback_err


def test_commit_failure_is_distinguishable(dummy_ctx, DummyStep):
    _require_imports()
    commit_err = ConnectionError("commit lost")
    uow = ScriptedUnitOfWork(commit_error=commit_err)

    result = execute(dummy_ctx, {}, [transactional(uow, DummyStep("a"))])

    assert isinstance(result.error, CommitFailedError)
    assert result.error.__cause__ is commit_err
    assert uow.calls == ["begin", "commit"]


def test_state_mutations_before_failure_are_not_undone(dummy_ctx, DummyStep):
    """O wrapper não desfaz o State: o chamador trata a mutação como não persistida."""
    _require_imports()
    state = {}
    uow = RecordingUnitOfWork()
    tx = transactional(uow, DummyStep("a", write=("a", 1)), DummyStep("b", error=RuntimeError("x")))

    execute(dummy_ctx, state, [tx])

    assert state == {"a": 1}
    assert "commit" not in uow.calls


def test_invalid_unit_of_work_is_rejected(DummyStep):
    _require_imports()
    with pytest.raises(TypeError):
        transactional(object(), DummyStep("a"))


def test_stop_signal_crosses_context_manager_unit_of_work(dummy_ctx, DummyStep):
    _require_imports()
    uow = SessionUnitOfWork()
    stop = StopPipeline("already registered")

    result = execute(dummy_ctx, {}, [transactional(uow, DummyStep("a", error=stop)), DummyStep("after")])

    assert result.error is stop
    assert result.stopped
    assert not result.failed
    assert uow.calls == ["begin", "rollback"]


def test_cancellation_crosses_context_manager_unit_of_work(dummy_ctx):
    _require_imports()
    uow = SessionUnitOfWork()
    raised = []

    def check(ctx, state):
        ctx.cancel("client went away")
        try:
            ctx.raise_if_cancelled()
        except PipelineCancelled as exc:
            raised.append(exc)
            raise

    result = execute(dummy_ctx, {}, [transactional(uow, as_step("user.check", check))])

    assert isinstance(result.error, PipelineCancelled)
    assert result.error is raised[0]
    assert result.failed
    assert uow.calls == ["begin", "rollback"]


def test_wrapped_step_failure_crosses_context_manager_unit_of_work(dummy_ctx, DummyStep):
    _require_imports()
    inner = execute(dummy_ctx, {}, [DummyStep("user.create", error=RuntimeError("db down"))])
    uow = SessionUnitOfWork()
    step_err = []

    def capture(ctx, state):
        try:
            inner.raise_for_error(wrap=True)
        except StepFailedError as exc:
            step_err.append(exc)
            raise

    result = execute(dummy_ctx, {}, [transactional(uow, as_step("user.persist", capture))])

    assert isinstance(result.error, StepFailedError)
    assert result.error is step_err[0]
    assert result.error.__cause__ is inner.error
    assert result.error.step_id == "user.create"
    assert uow.calls == ["begin", "rollback"]


def test_rollback_failure_chains_through_base_unit_of_work_with_core_error(dummy_ctx, DummyStep):
    _require_imports()
    rollback_err = ConnectionError("lost connection")
    uow = ScriptedUnitOfWork(rollback_error=rollback_err)
    stop = StopPipeline("stop")

    result = execute(dummy_ctx, {}, [transactional(uow, DummyStep("a", error=stop))])

    assert isinstance(result.error, RollbackFailedError)
    assert result.error.original is stop
    assert result.error.__cause__ is rollback_err
