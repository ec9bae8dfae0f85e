"""Configuration module for funcall-server using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from funcall_server.dispatch.loop import DEFAULT_SYSTEM_PROMPT


class FuncallServerSettings(BaseSettings):
    """Main configuration settings for funcall-server.

    All settings can be overridden via environment variables with the FUNCALL_ prefix.
    For example, FUNCALL_MODEL_BACKEND=ollama selects the Ollama backend.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Model service
    model_backend: str = "openai"  # Options: openai, ollama
    model: str = "gpt-4o-mini"
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    ollama_host: str = "http://localhost:11434"
    model_timeout: float = 60.0
    check_model_on_startup: bool = True

    # Capability and schema sources (relative to data_dir)
    data_dir: str = "."
    functions_dir: str = "functions"
    tools_dir: str = "tools"

    # Conversation
    system_prompt: str = DEFAULT_SYSTEM_PROMPT

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="FUNCALL_", protected_namespaces=())

    # --- Resolved paths (computed from data_dir + relative dirs) ---

    @property
    def resolved_functions_dir(self) -> Path:
        """Get the full path to the capability units directory."""
        return Path(self.data_dir) / self.functions_dir

    @property
    def resolved_tools_dir(self) -> Path:
        """Get the full path to the tool schema units directory."""
        return Path(self.data_dir) / self.tools_dir
