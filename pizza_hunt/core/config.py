"""
Configuration module for Pizza Hunt.

Manages environment variables for the document store (Upstash Redis),
the server, and the client-side offline queue. All sensitive credentials
should be loaded from environment variables in production deployments.
"""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class UpstashConfig:
    """
    Immutable configuration for Upstash Redis connection.

    Attributes:
        rest_url: The Upstash Redis REST API endpoint
        rest_token: Authentication token for Upstash Redis
    """
    rest_url: str
    rest_token: str

    @property
    def headers(self) -> dict[str, str]:
        """Returns the authorization headers for Upstash REST API."""
        return {
            "Authorization": f"Bearer {self.rest_token}",
            "Content-Type": "application/json"
        }


@dataclass(frozen=True)
class StoreConfig:
    """
    Key layout for pizza and comment documents.

    Attributes:
        pizza_prefix: Prefix for pizza document keys
        comment_prefix: Prefix for comment document keys
        pizza_index_key: Redis list holding pizza ids in creation order
        timeout: HTTP timeout for document store calls (seconds)
    """
    pizza_prefix: str = "pizza:"
    comment_prefix: str = "comment:"
    pizza_index_key: str = "pizzas:index"
    timeout: float = 10.0


@dataclass(frozen=True)
class OfflineConfig:
    """
    Configuration for the client-side offline queue and its sync engine.

    Attributes:
        data_dir: Directory holding the local queue database
        db_name: Fixed name of the local storage container
        store_name: Name of the record store inside the container
        schema_version: Structural version of the container
        api_base_url: Base URL of the Pizza Hunt API
        create_path: Path of the batch-create endpoint
        timeout: HTTP timeout for submissions, None for transport default
    """
    data_dir: str = "./data"
    db_name: str = "pizza_hunt"
    store_name: str = "new_pizza"
    schema_version: int = 1
    api_base_url: str = "http://localhost:3001"
    create_path: str = "/api/pizzas"
    timeout: float | None = None

    @property
    def db_path(self) -> Path:
        """Location of the SQLite file backing the queue."""
        return Path(self.data_dir) / f"{self.db_name}.db"

    @property
    def create_url(self) -> str:
        """Absolute URL of the batch-create endpoint."""
        return f"{self.api_base_url.rstrip('/')}{self.create_path}"


def _optional_float(value: str | None) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


class Settings:
    """
    Central settings manager that aggregates all configuration.

    Loads configuration from environment variables with fallbacks
    to default values for development/demo purposes.
    """

    def __init__(self):
        # In production, these MUST come from environment variables
        self.upstash = UpstashConfig(
            rest_url=os.getenv(
                "UPSTASH_REDIS_REST_URL",
                "http://localhost:8079"
            ),
            rest_token=os.getenv(
                "UPSTASH_REDIS_REST_TOKEN",
                "example_token"
            )
        )

        self.store = StoreConfig(
            pizza_prefix=os.getenv("STORE_PIZZA_PREFIX", "pizza:"),
            comment_prefix=os.getenv("STORE_COMMENT_PREFIX", "comment:"),
            pizza_index_key=os.getenv("STORE_PIZZA_INDEX_KEY", "pizzas:index"),
            timeout=float(os.getenv("STORE_TIMEOUT", "10.0"))
        )

        self.offline = OfflineConfig(
            data_dir=os.getenv("OFFLINE_DATA_DIR", "./data"),
            db_name=os.getenv("OFFLINE_DB_NAME", "pizza_hunt"),
            store_name=os.getenv("OFFLINE_STORE_NAME", "new_pizza"),
            schema_version=int(os.getenv("OFFLINE_SCHEMA_VERSION", "1")),
            api_base_url=os.getenv("PIZZA_HUNT_API_URL", "http://localhost:3001"),
            create_path=os.getenv("PIZZA_HUNT_CREATE_PATH", "/api/pizzas"),
            timeout=_optional_float(os.getenv("OFFLINE_SUBMIT_TIMEOUT"))
        )

    @property
    def server_port(self) -> int:
        """Server port from environment variable."""
        return int(os.getenv("PORT", "3001"))

    @property
    def api_title(self) -> str:
        """API title for OpenAPI documentation."""
        return "Pizza Hunt API"

    @property
    def api_version(self) -> str:
        """API version string."""
        return "1.0.0"

    @property
    def api_description(self) -> str:
        """API description for OpenAPI documentation."""
        return (
            "Create pizzas, discuss them in comments and replies. Clients "
            "that lose connectivity queue creates locally and resubmit them "
            "in one batch when they are back online."
        )


# Global settings instance - imported throughout the application
settings = Settings()
