# src/stepflow/core/config/settings.py
"""
Leitura tipada das chaves de configuração consumidas pelo core.

O loader devolve um dicionário puro; este módulo interpreta apenas as
seções que o core conhece (`engine`, `observability`) e ignora o resto,
que pertence à aplicação.

Chaves reconhecidas (v1):

    engine:
      timeout_seconds: null     # número > 0 ou null
    observability:
      enabled: true
      wrap_errors: false
      manifest_path: null       # caminho do Manifest salvo pelo Usecase, ou null
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import InvalidSettingError


DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {"timeout_seconds": None},
    "observability": {
        "enabled": True,
        "wrap_errors": False,
        "manifest_path": None,
    },
}


def default_config() -> Dict[str, Any]:
    """Cópia independente da configuração padrão embutida."""
    return deepcopy(DEFAULT_CONFIG)


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = (config or {}).get(name, {}) or {}
    if not isinstance(section, dict):
        raise InvalidSettingError(
            f"Seção '{name}' deve ser dict, recebido: {type(section).__name__}"
        )
    return section


def _flag(section: Dict[str, Any], key: str, default: bool, *, where: str) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise InvalidSettingError(f"'{where}.{key}' deve ser booleano, recebido: {value!r}")
    return value


@dataclass(frozen=True)
class EngineSettings:
    """Configurações efetivas do executor e da camada de observabilidade."""

    timeout_seconds: Optional[float] = None
    observability_enabled: bool = True
    wrap_errors: bool = False
    manifest_path: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "EngineSettings":
        engine = _section(config or {}, "engine")
        obs = _section(config or {}, "observability")

        timeout = engine.get("timeout_seconds")
        if timeout is not None:
            # bool é subclasse de int e não é um timeout válido
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                raise InvalidSettingError(
                    f"'engine.timeout_seconds' deve ser número > 0 ou null, recebido: {timeout!r}"
                )
            timeout = float(timeout)

        manifest_path = obs.get("manifest_path")
        if manifest_path is not None and not isinstance(manifest_path, str):
            raise InvalidSettingError(
                f"'observability.manifest_path' deve ser string ou null, recebido: {manifest_path!r}"
            )

        return cls(
            timeout_seconds=timeout,
            observability_enabled=_flag(obs, "enabled", True, where="observability"),
            wrap_errors=_flag(obs, "wrap_errors", False, where="observability"),
            manifest_path=manifest_path,
        )
