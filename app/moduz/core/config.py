from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "MODUZ-CORE"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite+pysqlite:///./moduz.db"
    TENANT_HEADER: str = "X-Tenant-ID"
    DEFAULT_TENANT_NAME: str = "Default Tenant"
    BOOTSTRAP_ADMIN_PRINCIPAL_ID: str = "bootstrap-admin"
    BOOTSTRAP_ADMIN_EMAIL: str = "admin@example.com"
    AUDIT_LIST_DEFAULT_LIMIT: int = 50
    AUDIT_LIST_MAX_LIMIT: int = 200
    DEFAULT_TIMEZONE: str = "Europe/Lisbon"
    DEFAULT_LOCALE: str = "pt-PT"
    DEFAULT_CURRENCY: str = "EUR"
    METRICS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"


settings = Settings()
