"""
Configuration management for relaygraph
"""

from typing import Literal

from pydantic_settings import BaseSettings

ClientMutationIdMode = Literal["omit", "optional", "required"]


class RelaySettings(BaseSettings):
    """Relay layer settings loaded from environment variables."""

    # Mutations
    client_mutation_id: ClientMutationIdMode = "required"

    # Node loading
    brand_loaded_objects: bool = False

    # Connections
    nodes_on_connection: bool = False
    edges_list_nullable: bool = False
    edge_nullable: bool = True
    node_nullable: bool = False

    # Environment
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "RELAY_"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = RelaySettings()
