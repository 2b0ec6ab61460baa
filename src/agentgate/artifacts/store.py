"""Artifact handoff store: named task outputs kept under the session tree."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass
from pathlib import Path

from agentgate.config import Settings, get_settings
from agentgate.errors import ArtifactError

logger = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(r"^(?!\.{1,2}$)[A-Za-z0-9._-]+$")


@dataclass(frozen=True, slots=True)
class ArtifactRef:
    name: str
    path: str
    summary: str
    size_bytes: int

    def to_dict(self) -> dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> ArtifactRef:
        size = data.get("size_bytes", 0)
        return cls(
            name=str(data.get("name") or ""),
            path=str(data.get("path") or ""),
            summary=str(data.get("summary") or ""),
            size_bytes=size if isinstance(size, int) and not isinstance(size, bool) else 0,
        )


def _segment(value: str, label: str) -> str:
    clean = value.strip()
    if not _SEGMENT_RE.fullmatch(clean):
        raise ArtifactError(f"invalid artifact {label}: {value!r}")
    return clean


def artifact_dir(project: str, task_id: str, settings: Settings | None = None) -> Path:
    settings = settings or get_settings()
    return (
        Path(settings.sessions_dir)
        / _segment(project, "project")
        / "artifacts"
        / _segment(task_id, "task id")
    )


def ensure_artifact_dir(project: str, task_id: str, settings: Settings | None = None) -> Path:
    directory = artifact_dir(project, task_id, settings)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def store_artifact(
    project: str,
    task_id: str,
    name: str,
    content: str,
    summary: str = "",
    settings: Settings | None = None,
) -> ArtifactRef:
    """Write *content* and return a reference whose path is relative to the workspace root."""
    settings = settings or get_settings()
    directory = ensure_artifact_dir(project, task_id, settings)
    path = directory / _segment(name, "name")
    path.write_text(content, encoding="utf-8")
    try:
        relative = path.relative_to(settings.workspace_dir)
    except ValueError:
        relative = path
    ref = ArtifactRef(
        name=path.name,
        path=str(relative),
        summary=summary or path.name,
        size_bytes=path.stat().st_size,
    )
    logger.info("stored artifact %s (%d bytes)", ref.path, ref.size_bytes)
    return ref


def resolve_artifact_path(ref: ArtifactRef, settings: Settings | None = None) -> Path | None:
    settings = settings or get_settings()
    if not ref.path or ".." in Path(ref.path).parts:
        return None
    candidate = Path(ref.path)
    if not candidate.is_absolute():
        candidate = Path(settings.workspace_dir) / candidate
    return candidate


def read_artifact(ref: ArtifactRef, settings: Settings | None = None) -> str | None:
    """Return the referenced content, or None when the reference points nowhere."""
    path = resolve_artifact_path(ref, settings)
    if path is None or not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def _read_task_state(project: str, settings: Settings) -> dict[str, object]:
    path = settings.task_state_dir / f"{_segment(project, 'project')}.json"
    if not path.is_file():
        return {}
    try:
        decoded = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("ignoring unreadable task state %s: %s", path, exc)
        return {}
    return decoded if isinstance(decoded, dict) else {}


def upstream_artifacts(
    project: str, blocked_by: list[str], settings: Settings | None = None
) -> list[dict[str, object]]:
    """Collect artifacts recorded for each completed blocking task, in *blocked_by* order."""
    settings = settings or get_settings()
    task_artifacts = _read_task_state(project, settings).get("task_artifacts")
    if not isinstance(task_artifacts, dict):
        return []

    result: list[dict[str, object]] = []
    for task_id in blocked_by:
        artifacts = task_artifacts.get(task_id)
        if not artifacts:
            continue
        if isinstance(artifacts, dict) and isinstance(artifacts.get("artifact_refs"), list):
            expanded = dict(artifacts)
            refs: list[object] = []
            for raw in artifacts["artifact_refs"]:
                if not isinstance(raw, dict):
                    refs.append(raw)
                    continue
                path = resolve_artifact_path(ArtifactRef.from_dict(raw), settings)
                refs.append({**raw, "content_available": bool(path and path.is_file())})
            expanded["artifact_refs"] = refs
            artifacts = expanded
        result.append({"task_id": task_id, "artifacts": artifacts})
    return result
