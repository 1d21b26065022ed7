from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

AuthorityConflictPolicy = Literal["fail", "skip-link", "lookup-existing"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Warehouse DB (read-write)
    warehouse_db_host: str = "localhost"
    warehouse_db_port: int = 5432
    warehouse_db_name: str = "civic"
    warehouse_db_schema: str = "dwh"
    warehouse_db_user: str = "warehouse_user"
    warehouse_db_password: SecretStr = SecretStr("changeme")

    # Upstream report service
    report_source_url: str = "http://host.docker.internal:5001/api"
    report_source_timeout_seconds: float = 30.0

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_log_level: str = "info"

    # ETL
    etl_log_level: str = "info"
    authority_conflict_policy: AuthorityConflictPolicy = "lookup-existing"
    replay_safe_events: bool = True
    batch_fail_fast: bool = False

    # Analytics
    sla_hours: float = 72.0
    escalation_query_months: int = 12
    escalation_trend_months: int = 8

    @property
    def warehouse_db_url_sync(self) -> str:
        pwd = self.warehouse_db_password.get_secret_value()
        return (
            f"postgresql+psycopg2://{self.warehouse_db_user}:{pwd}"
            f"@{self.warehouse_db_host}:{self.warehouse_db_port}"
            f"/{self.warehouse_db_name}"
        )


settings = Settings()
