from functools import lru_cache
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the ComfyUI generation API client."""

    #----------------------------------------------------------
    # Endpoint settings
    #----------------------------------------------------------
    base_url: str = Field(
        ...,
        description="ComfyUI generation API base URL. Usually ends with /api.",
    )

    api_token: SecretStr = Field(
        default="",
        description="Optional API token sent as a Bearer token. Leave empty to disable the Authorization header.",
    )

    model_config = SettingsConfigDict(
        env_prefix="COMFYUI_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
