from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Centralized application settings leveraging environment overrides.
    """

    app_name: str = "textsmith"
    environment: str = Field("local", validation_alias="ENVIRONMENT")
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    max_payload_bytes: int = Field(1024 * 1024, ge=1024)  # 1 MB soft limit
    max_text_chars: int = Field(20000, ge=1)
    request_timeout_ms: int = Field(1000, ge=1)

    cache_enabled: bool = True
    cache_capacity: int = Field(100, ge=1)
    history_depth: int = Field(10, ge=1)

    default_max_keywords: int = Field(10, ge=1)
    default_summary_length: int = Field(2, ge=1)

    profiles_dir: Optional[str] = Field(
        None, description="Directory of rewrite profile YAML files"
    )
    capability_grants: Dict[str, List[str]] = Field(
        default_factory=lambda: {"*": ["rewrite", "analyze"]},
        description="Capabilities enabled per scope key; '*' applies to any scope",
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
