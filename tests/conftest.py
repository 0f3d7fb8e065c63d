# tests/conftest.py
"""
Fixtures compartilhados para testes do stepflow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contexto de execução controlado (RunContext)
- Steps dummy que registram suas invocações

O objetivo destas fixtures é permitir testes do core
(config, pipeline, engine e traceability) sem depender de:
- filesystem
- variáveis de ambiente
- implementações reais de Steps

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Steps dummy utilizam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Nenhuma fixture realiza I/O
"""

import pytest
from datetime import datetime, timezone


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real.

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """

    return """\
engine:
  timeout_seconds: null
observability:
  enabled: true
  wrap_errors: false
  manifest_path: null
app:
  users:
    min_password_length: 1
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    YAML de configuração local (override): apenas as chaves alteradas.

    Returns:
        str: Conteúdo YAML representando configuração local de override.
    """

    return """\
engine:
  timeout_seconds: 30
observability:
  wrap_errors: true
"""


# =====================================================
# Pipeline fixtures (Step + RunContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima e já resolvida para testes.

    Invariantes:
        - Sem deadline (`timeout_seconds: null`)
        - Observabilidade habilitada, sem Manifest em disco

    Returns:
        dict: Configuração mínima e válida para execução de testes.
    """
    return {
        "engine": {"timeout_seconds": None},
        "observability": {"enabled": True, "wrap_errors": False, "manifest_path": None},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    RunContext determinístico para testes.

    `run_id` e `created_at` são fixos para garantir reprodutibilidade;
    nenhum deadline é aplicado.

    Returns:
        RunContext: Contexto de execução isolado e previsível para testes.
    """
    from stepflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def call_log() -> list:
    """Lista compartilhada onde os Steps dummy registram seus ids ao rodar."""
    return []


@pytest.fixture
def DummyStep(call_log):
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de um Step.

    O Step retornado:
    - expõe o atributo obrigatório `id`
    - registra o próprio id em `call_log` a cada invocação
    - conta invocações em `calls`
    - levanta `error` (quando fornecido) após registrar a chamada

    Returns:
        type: Classe _DummyStep que pode ser instanciada pelos testes.
    """

    class _DummyStep:
        def __init__(self, step_id: str = "dummy.step", error: BaseException = None, write=None):
            self.id = step_id
            self.error = error
            self.write = write
            self.calls = 0

        def run(self, ctx, state):
            self.calls += 1
            call_log.append(self.id)
            if self.write is not None:
                key, value = self.write
                state[key] = value
            if self.error is not None:
                raise self.error

    return _DummyStep
