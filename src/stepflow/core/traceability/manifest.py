# src/stepflow/core/traceability/manifest.py
"""
Manifest — registro forense de execuções de pipeline do stepflow.

O Manifest consolida, de forma determinística:
    - metadados da execução (run)
    - hash semântico da configuração efetiva
    - estado final de cada Step (indexado pelo id declarado)
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem de chamada
    - O Manifest é serializável em JSON e reconstruível (round-trip)

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução
    - Dois Steps com o mesmo id compartilham a mesma entrada em `steps`
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza para UTC; timestamps naive são assumidos como UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos, truncada em zero."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class PipelineManifest:
    """
    Registro forense de uma execução de pipeline.

    Campos principais:
        - run: run_id, started_at, stepflow_version (e, ao final, status)
        - inputs: config_hash
        - steps: estado de cada Step, indexado pelo id declarado
        - events: Event Log ordenado

    Invariantes:
        - `steps` é sempre um dicionário indexado por step_id
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "steps": {k: dict(v) for k, v in self.steps.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineManifest":
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )

    def status_of(self, step_id: str) -> Optional[str]:
        return self.steps.get(step_id, {}).get("status")


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    stepflow_version: str,
    config_hash: str,
) -> PipelineManifest:
    """
    Cria o Manifest inicial de uma execução.

    ⚠️ Importante: esta função **não emite eventos implicitamente**.
    O Event Log inicia vazio e só é preenchido por chamadas explícitas.

    Args:
        run_id (str): Identificador único da execução.
        started_at (datetime): Timestamp de início da execução.
        stepflow_version (str): Versão do stepflow utilizada.
        config_hash (str): Hash semântico da configuração efetiva.

    Returns:
        PipelineManifest: Manifest com `steps` e `events` vazios.
    """
    return PipelineManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "stepflow_version": stepflow_version,
        },
        inputs={"config_hash": config_hash},
    )


def add_event(
    manifest: PipelineManifest,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona exatamente um evento ao Event Log.

    O evento pode estar associado a um Step ou ter escopo de execução
    (ex.: `run_finished`). Eventos nunca são reordenados ou deduplicados.
    """
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def step_started(manifest: PipelineManifest, *, step_id: str, index: int, ts: datetime) -> None:
    """Marca o Step como `running` e registra `step_started`."""
    s = manifest.steps.setdefault(step_id, {})
    s.update(
        {
            "step_id": step_id,
            "index": index,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(manifest, event_type="step_started", ts=ts, step_id=step_id, payload={"index": index})


def _duration_ms(s: Dict[str, Any], ts: datetime) -> int:
    started_iso = s.get("started_at")
    if not started_iso:
        return 0
    return _ms_between(datetime.fromisoformat(started_iso), ts)


def step_finished(
    manifest: PipelineManifest,
    *,
    step_id: str,
    ts: datetime,
    warnings: Optional[List[str]] = None,
) -> None:
    """
    Registra a conclusão bem-sucedida de um Step.

    A duração é calculada a partir de `started_at` quando disponível.
    """
    s = manifest.steps.setdefault(step_id, {"step_id": step_id})
    s.update(
        {
            "status": "success",
            "finished_at": _iso(ts),
            "duration_ms": _duration_ms(s, ts),
            "warnings": list(warnings or []),
        }
    )
    add_event(
        manifest,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": "success", "duration_ms": s["duration_ms"]},
    )


def step_failed(
    manifest: PipelineManifest,
    *,
    step_id: str,
    ts: datetime,
    error: Dict[str, Any],
    status: str = "failed",
) -> None:
    """
    Registra a interrupção de um Step.

    Args:
        error (Dict[str, Any]): ErrorPayload serializado (`ErrorPayload.to_dict()`).
        status (str): `"failed"` para falha real, `"stopped"` para o sinal de parada.
    """
    s = manifest.steps.setdefault(step_id, {"step_id": step_id})
    s.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _duration_ms(s, ts),
            "error": error,
        }
    )
    add_event(
        manifest,
        event_type="step_failed",
        ts=ts,
        step_id=step_id,
        payload={"status": status, "error": error},
    )


def step_not_run(manifest: PipelineManifest, *, step_id: str, index: int) -> None:
    """Marca um Step que não foi invocado por interrupção anterior. Não gera evento."""
    s = manifest.steps.setdefault(step_id, {"step_id": step_id, "index": index})
    s.setdefault("status", "not_run")


def run_finished(
    manifest: PipelineManifest,
    *,
    ts: datetime,
    status: str,
    completed: int,
    total: int,
    failed_step: Optional[str] = None,
) -> None:
    """Fecha a execução: atualiza `run` e registra `run_finished`."""
    started_iso = manifest.run.get("started_at")
    duration = _ms_between(datetime.fromisoformat(started_iso), ts) if started_iso else 0
    manifest.run.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": duration,
        }
    )
    add_event(
        manifest,
        event_type="run_finished",
        ts=ts,
        payload={
            "status": status,
            "completed": completed,
            "total": total,
            "failed_step": failed_step,
        },
    )


def save_manifest(manifest: Union[PipelineManifest, Dict[str, Any]], path: Path) -> None:
    """
    Persiste o Manifest em JSON determinístico (`sort_keys=True`).

    Diretórios intermediários são criados automaticamente.

    Raises:
        OSError: Falha ao criar diretórios ou escrever o arquivo.
        TypeError: Conteúdo não serializável em JSON.
    """
    data = manifest.to_dict() if isinstance(manifest, PipelineManifest) else manifest
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_manifest(path: Path) -> PipelineManifest:
    """
    Carrega um Manifest persistido.

    Raises:
        OSError: Falha de leitura do arquivo.
        json.JSONDecodeError: JSON inválido.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return PipelineManifest.from_dict(data)
