"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class ImportConfig(BaseSettings):
    """Import engine tuning knobs."""

    model_config = {"env_prefix": "CSVBRIDGE_IMPORT_"}

    write_delay_seconds: float = 0.1  # pause between record writes
    year_probe_rows: int = 3
    min_year: int = 1900  # exclusive
    max_year: int = 2100  # exclusive
    list_delimiter: str = "|"
    allowed_extensions: list[str] = Field(default_factory=lambda: [".csv"])
    spreadsheet_extensions: list[str] = Field(default_factory=lambda: [".xlsx", ".xls"])
    max_upload_bytes: int = 10 * 1024 * 1024
    mapping_conflict_policy: Literal["last_wins", "first_wins"] = "last_wins"


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "CSVBRIDGE_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    listings_table: str = "csvbridge-listings"
    financials_table: str = "csvbridge-listing-financials"


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "CSVBRIDGE_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    decode_responses: bool = True
    key_prefix: str = "csvbridge:"
    progress_ttl_seconds: int = 4 * 60 * 60


class S3Config(BaseSettings):
    """S3 upload storage configuration."""

    model_config = {"env_prefix": "CSVBRIDGE_S3_"}

    bucket: str = "csvbridge-uploads"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    upload_prefix: str = "uploads/"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "CSVBRIDGE_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    imports: ImportConfig = ImportConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
