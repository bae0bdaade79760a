from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from matchprep.hashing import Encoding


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="matchprep", alias="APP_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    kek_uri: str | None = Field(default=None, alias="KEK_URI")
    # Service account JSON; Application Default Credentials when unset.
    gcp_credentials_path: str | None = Field(default=None, alias="GCP_CREDENTIALS_PATH")
    local_kek_key: str | None = Field(default=None, alias="LOCAL_KEK_KEY")
    wip_provider: str | None = Field(default=None, alias="WIP_PROVIDER")
    default_encoding: Encoding = Field(default=Encoding.HEX, alias="DEFAULT_ENCODING")
    max_members_per_request: int = Field(default=10_000, alias="MAX_MEMBERS_PER_REQUEST", gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
