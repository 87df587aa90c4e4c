"""Configuration management for the CLI tool."""

from pydantic import BaseModel, Field


class CLIConfig(BaseModel):
    """CLI configuration settings."""

    host: str = Field(
        default="localhost",
        description="Server host",
    )
    port: int = Field(
        default=8080,
        description="Server port",
    )
    api_path: str = Field(
        default="/api/v1",
        description="API prefix for the session endpoints",
    )
    user_id: str | None = Field(
        default="cli-user",
        description="Caller id sent with every message (enables the policy gate)",
    )

    @property
    def base_url(self) -> str:
        """Get the base URL for the API."""
        return f"http://{self.host}:{self.port}"

    @property
    def sessions_url(self) -> str:
        """Get the full URL for the sessions collection."""
        return f"{self.base_url}{self.api_path}/sessions"
