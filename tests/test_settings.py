from pathlib import Path

import pytest

import liferhythm.settings as settings_module
from liferhythm.settings import DEFAULT_SHEET_ID, Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "LIFERHYTHM_SHEET_ID",
        "SHEET_ID",
        "MAX_TURNS",
        "PROVIDER",
        "MODEL",
        "MCP_SERVER_PATH",
        "MCP_SERVER_COMMAND",
        "MCP_SERVER_ARGS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings(_env_file=None)
    assert s.provider == "anthropic"
    assert s.max_turns == 10
    assert s.sheet_id == DEFAULT_SHEET_ID
    assert s.mcp_server_path == Path.home() / "liferhythm-mcp"
    assert s.mcp_server_command == "node"
    assert s.server_args() == ["index.js"]
    assert "LifeRhythm assistant" in s.agent_system_prompt
    assert "YYYY-MM-DD" in s.agent_system_prompt


def test_sheet_id_from_either_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIFERHYTHM_SHEET_ID", "from-liferhythm")
    assert Settings(_env_file=None).sheet_id == "from-liferhythm"

    monkeypatch.setenv("SHEET_ID", "from-sheet-id")
    assert Settings(_env_file=None).sheet_id == "from-sheet-id"


def test_sheet_id_env_var_overrides_liferhythm_sheet_id(monkeypatch: pytest.MonkeyPatch) -> None:
    """SHEET_ID beats LIFERHYTHM_SHEET_ID when both are set."""
    monkeypatch.setenv("SHEET_ID", "cli-sheet")
    monkeypatch.setenv("LIFERHYTHM_SHEET_ID", "agent-default")
    assert Settings(_env_file=None).sheet_id == "cli-sheet"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MAX_TURNS", "4")
    monkeypatch.setenv("PROVIDER", "openai")
    monkeypatch.setenv("MCP_SERVER_PATH", str(tmp_path))
    monkeypatch.setenv("MCP_SERVER_COMMAND", "python")
    monkeypatch.setenv("MCP_SERVER_ARGS", "server.py  --verbose")

    s = Settings(_env_file=None)
    assert s.max_turns == 4
    assert s.provider == "openai"
    assert s.mcp_server_path == tmp_path
    assert s.mcp_server_command == "python"
    assert s.server_args() == ["server.py", "--verbose"]


def test_env_file(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("MAX_TURNS=7\nLIFERHYTHM_SHEET_ID=dotenv-sheet\n", encoding="utf-8")
    s = Settings(_env_file=env_file)
    assert s.max_turns == 7
    assert s.sheet_id == "dotenv-sheet"


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delattr(settings_module, "_SETTINGS", raising=False)
    first = get_settings()
    assert get_settings() is first
