# tests/e2e/test_register_user_e2e.py
"""
Cenários end-to-end do usecase de cadastro de usuário.

Cenários cobertos:
    1. [ValidateEmail, ValidatePassword, EncryptPassword] com input válido
       → `(3, None)` e senha transformada no State
    2. [ValidateEmail] com email vazio → `(0, erroDoEmail)`
    3. [ValidateAge (falha), ValidateName] → `(0, erroDaIdade)` e
       ValidateName nunca é invocado
    4. Tx[EncryptPassword, CreateUser] com CreateUser falhando → o
       UnitOfWork observa o erro de CreateUser e faz rollback; a mutação
       de EncryptPassword aconteceu mas não foi persistida

Além dos cenários, valida o fluxo completo via Usecase com config em
YAML e Manifest em disco.
"""

from pathlib import Path

import pytest

from stepflow.core.engine.executor import execute
from stepflow.core.engine.transaction import transactional
from stepflow.core.engine.usecase import Usecase
from stepflow.core.traceability.manifest import load_manifest

from tests.e2e._helpers import build_registry, make_ctx, resolve_config
from tests.fixtures.steps.register_user import (
    InMemoryUserRepository,
    InvalidEmailError,
    RecordingUnitOfWork,
    RegisterUserState,
    UnderageError,
    UserAlreadyExistsError,
)


def test_scenario_1_all_steps_succeed(tmp_path: Path):
    reg, _ = build_registry()
    ctx = make_ctx(tmp_path)
    state = RegisterUserState(email="a@b.com", password="x")

    completed, err = execute(
        ctx, state, reg.sequence("user.validate_email", "user.validate_password", "user.encrypt_password")
    )

    assert (completed, err) == (3, None)
    assert state.encrypted_password
    assert state.encrypted_password != "x"
    assert state.encrypted_password.startswith("sha256:")


def test_scenario_2_invalid_email(tmp_path: Path):
    reg, _ = build_registry()
    ctx = make_ctx(tmp_path)

    completed, err = execute(ctx, RegisterUserState(email=""), reg.sequence("user.validate_email"))

    assert completed == 0
    assert isinstance(err, InvalidEmailError)


def test_scenario_3_fail_fast_skips_remaining(tmp_path: Path):
    reg, _ = build_registry()
    ctx = make_ctx(tmp_path)
    validate_age = reg.get("user.validate_age")
    validate_name = reg.get("user.validate_name")

    completed, err = execute(ctx, RegisterUserState(name="Ana", age=10), [validate_age, validate_name])

    assert completed == 0
    assert isinstance(err, UnderageError)
    assert err is validate_age.last_error
    assert validate_age.calls == 1
    assert validate_name.calls == 0


def test_scenario_4_tx_rolls_back_on_create_failure(tmp_path: Path):
    failure = UserAlreadyExistsError("a@b.com")
    reg, repo = build_registry(InMemoryUserRepository(fail_with=failure))
    ctx = make_ctx(tmp_path)
    uow = RecordingUnitOfWork()
    state = RegisterUserState(email="a@b.com", password="x")

    tx = transactional(uow, reg.get("user.encrypt_password"), reg.get("user.create"), step_id="user.persist")
    completed, err = execute(ctx, state, [tx])

    assert completed == 0
    assert err is failure
    assert uow.observed_error is failure
    assert uow.calls == ["begin", "rollback"]
    # a mutação aconteceu, mas o chamador sabe que nada foi confirmado
    assert state.encrypted_password.startswith("sha256:")
    assert repo.saved == []
    assert state.user.unwrap() == (None, failure)


def test_usecase_with_yaml_config_and_manifest(tmp_path: Path):
    manifest_path = tmp_path / "out" / "manifest.json"
    config = resolve_config(tmp_path, {"observability": {"manifest_path": str(manifest_path)}})
    reg, repo = build_registry()
    register = Usecase(
        "user.register",
        reg.sequence("user.validate_email", "user.validate_password", "user.encrypt_password", "user.create"),
        output="user",
        config=config,
    )

    user = register(RegisterUserState(email="a@b.com", password="secret"))

    assert repo.saved == [user]
    m = load_manifest(manifest_path)
    assert m.run["stepflow_version"] == "0.1.0"
    assert len(m.inputs["config_hash"]) == 64
    assert m.run["status"] == "success"
    assert sum(1 for e in m.events if e["event_type"] == "step_finished") == 4


def test_usecase_failure_is_raised_and_recorded(tmp_path: Path):
    manifest_path = tmp_path / "manifest.json"
    config = resolve_config(tmp_path, {"observability": {"manifest_path": str(manifest_path)}})
    reg, repo = build_registry()
    register = Usecase(
        "user.register",
        reg.sequence("user.validate_email", "user.validate_password", "user.encrypt_password", "user.create"),
        output="user",
        config=config,
    )

    with pytest.raises(InvalidEmailError):
        register(RegisterUserState(email="nope", password="x"))

    m = load_manifest(manifest_path)
    assert m.run["status"] == "failed"
    assert m.steps["user.validate_email"]["status"] == "failed"
    assert m.steps["user.create"]["status"] == "not_run"
    assert repo.saved == []
