from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    app_name: str = "MotionKit"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: str = "INFO"

    # OpenRouter (OpenAI-compatible chat completions with tool calling)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    default_model_id: str = "moonshotai/kimi-k2"
    chat_temperature: float = 0.7
    chat_max_tokens: int = 16384
    chat_timeout_s: float = 180.0
    # Upper bound on model round-trips within a single user turn
    chat_max_steps: int = 20
    chat_history_limit: int = 10

    # New project defaults
    default_project_name: str = "Untitled Project"
    default_width: int = 1920
    default_height: int = 1080
    default_duration_s: float = 10.0
    default_fps: int = 30
    default_background: str = "#000000"
    default_font_family: str = "Inter"

    # Limits enforced by configure_project / create_layer
    min_canvas_size: int = 100
    max_canvas_size: int = 8192
    max_duration_s: float = 300.0
    max_fps: int = 120
    max_layers: int = 200

    # Host application project API (stateless MCP path)
    project_api_url: str = "http://localhost:8000"
    project_api_key: str = ""
    project_api_token: str = "dev-token"
    project_api_timeout_s: float = 30.0

    # MCP server
    mcp_server_name: str = "MotionKit Animation Editor"


@lru_cache
def get_settings() -> Settings:
    return Settings()
