# src/stepflow/core/config/hashing.py
"""
Hashing canônico de configuração do stepflow.

O hash representa a identidade estrutural da configuração efetiva e é
registrado no Manifest (`inputs.config_hash`) para rastreabilidade.

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256 (64 caracteres hexadecimais)
"""


import json
import hashlib
from typing import Dict, Any


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva.

    Configurações estruturalmente equivalentes produzem o mesmo hash,
    independentemente da ordem original das chaves.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
