from typing import Optional, Tuple

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from ntier_scaffold.generators.ntier_gen.types import ALL_LAYERS, GenerationOptions, Layer

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    db_driver: str = "mssql+pyodbc"
    db_host: str = "localhost"
    db_port: Optional[int] = None
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    db_name: str = "master"
    db_odbc_driver: str = "ODBC Driver 17 for SQL Server"
    db_trusted_connection: bool = False
    database_url: Optional[str] = None

    project_name: str = "NTier"
    output_dir: str = "."
    # Comma-separated layer names, or "all"
    enabled_layers: str = "all"
    include_async_queries: bool = True
    include_paginate_endpoint: bool = True
    register_dependencies: bool = True
    required_message_template: str = "{column} is required."

    log_level: str = "INFO"

    @field_validator("project_name")
    @classmethod
    def _project_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("project_name must not be blank")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("required_message_template")
    @classmethod
    def _renderable_message(cls, v: str) -> str:
        # Lands inside a C# string literal
        if '"' in v or "\\" in v:
            raise ValueError("required_message_template must not contain quotes or backslashes")
        try:
            v.format(column="Name", table="Widget")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(
                f"required_message_template may only use {{column}} and {{table}}: {e!r}"
            ) from e
        return v

    @field_validator("enabled_layers")
    @classmethod
    def _known_layers(cls, v: str) -> str:
        parse_layers(v)
        return v

    def layers(self) -> Tuple[Layer, ...]:
        layers = parse_layers(self.enabled_layers)
        if not self.register_dependencies:
            layers = tuple(l for l in layers if l != Layer.COMPOSITION)
        return layers

    def options(self) -> GenerationOptions:
        return GenerationOptions(
            project_name=self.project_name,
            include_async_queries=self.include_async_queries,
            include_paginate_endpoint=self.include_paginate_endpoint,
            required_message_template=self.required_message_template,
        )

    def sqlalchemy_url(self) -> URL:
        if self.database_url:
            return make_url(self.database_url)

        query = {}
        if "pyodbc" in self.db_driver:
            query["driver"] = self.db_odbc_driver
            if self.db_trusted_connection:
                query["Trusted_Connection"] = "yes"
        return URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            query=query,
        )


def parse_layers(value: str) -> Tuple[Layer, ...]:
    """Parse ``"entity,manager"`` style lists; ``"all"`` enables every layer."""
    names = [part.strip().lower() for part in value.split(",") if part.strip()]
    if not names or names == ["all"]:
        return ALL_LAYERS

    by_value = {layer.value: layer for layer in ALL_LAYERS}
    unknown = [n for n in names if n not in by_value]
    if unknown:
        raise ValueError(
            f"Unknown layer(s): {', '.join(unknown)}. "
            f"Expected any of: {', '.join(by_value)}"
        )
    # Keep pipeline order regardless of how the user listed them
    return tuple(layer for layer in ALL_LAYERS if layer.value in names)


def load_settings(**overrides) -> Settings:
    """Read settings once from the environment and .env, applying overrides."""
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return Settings(**overrides)
