"""Configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from dbstruct.schemas.value_types import ValueType

NameMapper = Callable[[str], str]
Tagger = Callable[[str, str], Dict[str, Any]]
TypeMapper = Callable[[str, str, str], ValueType]


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Read data source
    DATABASE_DRIVER: str = "mysql+pymysql"
    DATABASE_DSN: str = ""

    # Data source allowed to run CREATE TABLE / DROP TABLE
    MATERIALIZE_DSN: Optional[str] = None
    TEMP_TABLE_PREFIX: str = "temp_"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class Options(BaseModel):
    """
    Constructor-time configuration of a DBStruct instance.

    Policies:
        name_mapper: raw column name -> mapped record member name
        tagger: (table name, raw column name) -> per-field metadata
        type_mapper: (table name, raw column name, raw type) -> value type,
            used instead of the default mapping
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    driver: str = "mysql+pymysql"
    dsn: str = ""
    materialize_dsn: Optional[str] = None
    temp_table_prefix: str = "temp_"

    name_mapper: Optional[NameMapper] = None
    tagger: Optional[Tagger] = None
    type_mapper: Optional[TypeMapper] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **policies: Any) -> "Options":
        """Build options from settings plus optional policy callables."""
        settings = settings or get_settings()
        return cls(
            driver=settings.DATABASE_DRIVER,
            dsn=settings.DATABASE_DSN,
            materialize_dsn=settings.MATERIALIZE_DSN or None,
            temp_table_prefix=settings.TEMP_TABLE_PREFIX,
            **policies,
        )
