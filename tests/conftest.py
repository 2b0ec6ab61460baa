import json
from pathlib import Path

import pytest

from agentgate.config import Settings, get_settings
from agentgate.logging import clear_context

_ENV_KEYS = (
    "APP_ENV",
    "SESSIONS_ROOT",
    "PLATFORM_DIR",
    "METRICS_DIR",
    "REGISTRY_FILE",
    "AGENT_ID",
    "LOG_JSON",
)


@pytest.fixture(autouse=True)
def test_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("WORKSPACE_ROOT", str(workspace))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    clear_context()


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def workspace(settings: Settings) -> Path:
    return Path(settings.workspace_dir)


@pytest.fixture
def write_json():
    def _write(path: Path, data: object) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def formation_registry() -> dict[str, object]:
    return {
        "formation": "feature-impl",
        "project": "alpha",
        "teammates": {
            "backend": {
                "agent_id": "agent-backend",
                "ownership": {
                    "files": ["/w/alpha/package.json"],
                    "directories": ["/w/alpha/src/api/"],
                    "patterns": ["*.sql"],
                },
            },
            "frontend": {
                "agent_id": "agent-frontend",
                "ownership": {"directories": ["/w/alpha/src"], "patterns": []},
                "tool_policies": {"deny": ["WebFetch"]},
            },
            "tester": {
                "agent_id": "agent-tester",
                "ownership": {"patterns": ["*.test.ts"]},
            },
        },
        "tool_policies": {
            "defaults": {"profile": "coding"},
            "per_role": {
                "tester": {"profile": "testing", "deny": ["Write"]},
                "frontend": {"allow": ["WebFetch"]},
            },
        },
    }
