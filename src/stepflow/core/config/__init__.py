# src/stepflow/core/config/__init__.py

"""
Camada de configuração do stepflow.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução da configuração final via deep-merge determinístico
    - Hash canônico para rastreabilidade no Manifest
    - Leitura tipada das chaves consumidas pelo core (`EngineSettings`)

Limites explícitos:
    - Não executa pipeline
    - Não interage com Steps diretamente
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge
from .settings import DEFAULT_CONFIG, EngineSettings, default_config

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidSettingError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "load_config",
    "deep_merge",
    "DEFAULT_CONFIG",
    "EngineSettings",
    "default_config",
]
