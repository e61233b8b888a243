"""Application configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from workflow_graph.layout.base import LayoutOptions


class Settings(BaseSettings):
    """Application settings."""

    # Layout
    layout_strategy: str = "leveling"  # leveling, layered, sections
    layout_direction: str = "LR"  # TB, BT, LR, RL
    node_width: float = 300
    node_height: float = 200
    rank_sep: float = 100
    node_sep: float = 50
    auto_layout: bool = True

    # Sessions
    session_idle_timeout: Optional[float] = 3600  # seconds; None keeps sessions until deleted

    # API
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Logging
    log_level: str = "INFO"
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )

    def layout_options(self) -> LayoutOptions:
        """Build default layout options from settings."""
        return LayoutOptions(
            direction=self.layout_direction,
            node_width=self.node_width,
            node_height=self.node_height,
            rank_sep=self.rank_sep,
            node_sep=self.node_sep,
        )


# Global settings instance
settings = Settings()
