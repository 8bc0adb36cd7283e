from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from digitransit_mcp.data.networks import FINLAND


class DigitransitConfig(BaseSettings):
    """Configuration for Digitransit API access.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    api_key: str | None = Field(default=None, alias="DIGITRANSIT_API_KEY")
    base_url: str = Field(default=FINLAND.base_url, alias="DIGITRANSIT_BASE_URL")
    graphql_path: str = "/index/graphql"
    request_timeout_seconds: float = Field(default=30.0, alias="DIGITRANSIT_TIMEOUT")

    @property
    def graphql_url(self) -> str:
        """Full URL of the GraphQL endpoint."""
        return f"{self.base_url.rstrip('/')}{self.graphql_path}"


@lru_cache
def get_digitransit_config() -> DigitransitConfig:
    """Get Digitransit configuration (cached singleton).

    Returns:
        DigitransitConfig with values from .env file or environment variables.
    """
    return DigitransitConfig()
