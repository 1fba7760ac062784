"""Configuration settings and data models."""

import json
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator


class TournamentConfig(BaseModel):
    """Timing of the match presentation phases."""

    countdown_from: int = Field(
        default=5, ge=0, description="Countdown start value before each match"
    )
    countdown_tick_seconds: float = Field(
        default=1.0, ge=0, description="Seconds between countdown ticks"
    )
    resolve_delay_seconds: float = Field(
        default=0.5, ge=0, description="Pause between countdown end and resolution"
    )
    narration_panel_seconds: float = Field(
        default=4.0, ge=0, description="Dwell time of each result panel"
    )
    celebration_seconds: float = Field(
        default=4.0, ge=0, description="Dwell time of the winner celebration"
    )
    collaborator_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for narration/persistence/presentation calls",
    )


class NarrationConfig(BaseModel):
    """Narration provider configuration."""

    provider: str = Field(
        default="fallback", description="Narration provider (ollama, fallback)"
    )
    ollama_base_url: str = Field(
        default="http://localhost:11434", description="Ollama API URL"
    )
    model: str = Field(default="mistral", description="Model used for narration")
    max_tokens: int = Field(default=80, description="Maximum tokens per narration")
    temperature: float = Field(default=0.9, description="Model temperature")
    timeout: float = Field(default=10.0, description="API request timeout in seconds")

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        valid_providers = {"ollama", "fallback"}
        if v not in valid_providers:
            raise ValueError(f"Provider must be one of: {valid_providers}")
        return v


class SystemConfig(BaseModel):
    """System-wide configuration."""

    save_battles: bool = Field(
        default=True, description="Persist battles and tournament snapshots"
    )
    database_path: str = Field(
        default="tournament.db", description="SQLite database for battles"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class AppConfig(BaseModel):
    """Complete application configuration."""

    tournament: TournamentConfig = Field(default_factory=TournamentConfig)
    narration: NarrationConfig = Field(default_factory=NarrationConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from a JSON or YAML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")

        unknown_sections = set(data) - {"tournament", "narration", "system"}
        if unknown_sections:
            raise ValueError(f"Unknown config sections: {sorted(unknown_sections)}")

        return cls(**data)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_unset=True),
                f,
                default_flow_style=False,
                indent=2,
            )


def get_default_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from tournament_config.json, creating it if needed."""
    config_path = config_path or Path("tournament_config.json")
    if not config_path.exists():
        template_config = get_template_config()
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(template_config.model_dump(), f, indent=2)
    return AppConfig.load_from_file(config_path)


def get_template_config() -> AppConfig:
    """Get template configuration for config file generation."""
    return AppConfig(
        tournament=TournamentConfig(
            countdown_from=5,
            countdown_tick_seconds=1.0,
            resolve_delay_seconds=0.5,
            narration_panel_seconds=4.0,
            celebration_seconds=4.0,
            collaborator_timeout_seconds=5.0,
        ),
        narration=NarrationConfig(
            provider="fallback",  # Switch to "ollama" when a local server is running
            ollama_base_url="http://localhost:11434",
            model="mistral",
            max_tokens=80,
            temperature=0.9,
            timeout=10.0,
        ),
        system=SystemConfig(
            save_battles=True,
            database_path="tournament.db",
            log_level="INFO",
        ),
    )
