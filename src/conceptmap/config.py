"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Vocabulary limits
    min_concepts: int = 2
    max_concepts: int = Field(
        default=35,
        description="Large graphs become unreadable and may fail to render"
    )

    # Corpus scan caps
    max_scan_nodes: int = 5000
    max_pair_edges: int = 1000
    max_walk_depth: int = Field(
        default=100,
        description="Hop cap for parent/child walks, on top of visited-set tracking"
    )

    # Related-node search
    related_max_results: int = 10

    # Static rendering (Graphviz)
    dot_engine: str = "neato"
    definition_dot_engine: str = "sfdp"
    label_max_length: int = 40
    render_width: int = 2000
    render_height: int = 2000
    render_dpi: int = 100
    render_font_size: int = 18

    # Deep links back into the note store
    deep_link_host: str = "https://workflowy.com"

    # Interactive canvas
    canvas_width: int = 900
    canvas_height: int = 900
    canvas_padding: float = 40.0
    major_radius: float = 280.0
    detail_jitter: float = 30.0

    # Physics defaults
    physics_repulsion: float = Field(
        default=8000.0,
        description="Coulomb-style repulsion constant between visible nodes"
    )
    physics_link_distance: float = 160.0
    physics_gravity: float = 0.01
    physics_damping: float = 0.85
    physics_overlap_strength: float = 2.0
    physics_iterations: int = 300
    physics_cooling: float = 0.985

    # Map store
    store_max_maps: int = 32

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False


def get_test_settings() -> Settings:
    """Get test environment settings."""
    return Settings(
        render_width=400,
        render_height=400,
        physics_iterations=120,
        store_max_maps=4,
    )


# Global settings instance
settings = Settings()
