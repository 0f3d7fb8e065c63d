# tests/core/pipeline/test_result_container.py
"""
Testes do container `Result` (valor + erro, desembrulho adiado).
"""

import pytest

try:
    from stepflow.core.pipeline.result import Result, make_result
except Exception as e:
    Result = None
    make_result = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing Result container. Import error: {_IMPORT_ERR}")


def test_make_result_unwrap_returns_both_fields():
    _require_imports()
    err = ValueError("x")

    assert make_result(42).unwrap() == (42, None)
    value, error = make_result(None, err).unwrap()
    assert value is None and error is err


def test_construction_does_not_validate():
    """Ambos preenchidos é aceito; o invariante é do chamador."""
    _require_imports()
    err = RuntimeError("both")
    r = make_result("value", err)

    assert r.unwrap() == ("value", err)
    assert r.is_error


def test_get_raises_stored_error():
    _require_imports()
    err = LookupError("no user")

    with pytest.raises(LookupError) as info:
        Result.fail(err).get()
    assert info.value is err
    assert Result.ok("u").get() == "u"
    assert Result.empty().get() is None


def test_result_is_immutable():
    _require_imports()
    r = Result.ok(1)
    with pytest.raises(AttributeError):
        r.value = 2
