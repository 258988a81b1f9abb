from pathlib import Path
from typing import List, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SHEET_ID = "1XJ5oA-FjBx7P_bn-gM2qL_Y5rXYFbFhSsw74ejyph-E"


class Settings(BaseSettings):
    """Application configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_dir: Path = Path("logs")

    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = "claude-opus-4-6"
    max_tokens: int = 4096
    temperature: float = 0.0
    max_turns: int = 10

    anthropic_api_key: str | None = None
    openai_api_key: str | None = None
    openai_base_url: str | None = "https://api.openai.com/v1"

    mcp_server_path: Path = Path.home() / "liferhythm-mcp"
    mcp_server_command: str = "node"
    mcp_server_args: str = "index.js"

    sheet_id: str = Field(
        default=DEFAULT_SHEET_ID,
        validation_alias=AliasChoices("sheet_id", "liferhythm_sheet_id"),
    )

    agent_system_prompt: str = (
        "You are the LifeRhythm assistant, an AI that helps manage a person's "
        "life rhythm through natural conversation.\n\n"
        "You have access to tools that read and write a personal task/reminder "
        "database (Google Sheets).\n\n"
        "## Your job\n"
        "When the user gives you a conversational update, understand what they "
        "mean and take the right actions:\n"
        "- Log events, tasks, and things they've done\n"
        "- Set follow-up reminders with exact dates\n"
        "- Search and retrieve existing items when asked\n"
        "- Update statuses as things progress\n\n"
        "## Date handling\n"
        "Today's date will be provided in the user's message. Use it to resolve:\n"
        '- "Monday" -> the most recent Monday\n'
        '- "last week" -> 7 days ago\n'
        '- "in 7-10 days" -> today + 7 days (min) and today + 10 days (max)\n'
        "- Always produce ISO 8601 dates (YYYY-MM-DD) when calling tools\n\n"
        "## Reminders\n"
        'When the user says "remind me in X-Y days if [condition]":\n'
        "- Create a reminder with reminder_date = today + X days\n"
        "- Set reminder_max_date = today + Y days\n"
        "- Store the condition in the notes field\n\n"
        "## Response style\n"
        "After taking actions, give a brief, friendly confirmation. Tell the user:\n"
        "- What you logged\n"
        "- When any reminders are set for\n"
        "- What to expect next\n\n"
        "Keep responses concise. 2-4 sentences is ideal."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        extra="allow",
    )

    def server_args(self) -> List[str]:
        """Split MCP_SERVER_ARGS into the argv tail passed to the server command."""
        return self.mcp_server_args.split()


def get_settings() -> Settings:
    """Return the application settings singleton (loaded from env / .env)."""
    global _SETTINGS
    try:
        return _SETTINGS
    except NameError:
        _SETTINGS = Settings()
        return _SETTINGS
