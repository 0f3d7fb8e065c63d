# src/stepflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do stepflow.

As exceções aqui definidas representam violações estruturais explícitas
da configuração, e não falhas de Step.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa falha de execução de Step
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração.

    Permite captura genérica de erros de configuração, separada das
    falhas de execução do pipeline.
    """


class DefaultsNotFoundError(ConfigError):
    """
    O arquivo de defaults não existe no caminho informado.

    O arquivo de defaults é obrigatório; o loader não tenta inferir ou
    criar defaults automaticamente.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo não suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz da configuração não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"observability": {"enabled": true}}
        - override: {"observability": "off"}

    Nenhum merge parcial é produzido e nenhuma coerção é tentada.
    """


class InvalidSettingError(ConfigError):
    """Uma chave conhecida da configuração possui valor inválido."""
