from pydantic_settings import BaseSettings, SettingsConfigDict
class Settings(BaseSettings):
    APP_ENV: str = "dev"
    DB_URL: str = "sqlite:///./tablepos.db"
    STORE_BACKEND: str = "sql"          # sql | memory
    SEED_DEFAULTS: bool = True
    MISC_RATE_PER_MINUTE: float = 2.5   # time-based service charge, currency units per minute
    STORE_PROBE_TIMEOUT_SEC: float = 3.0
    LOG_LEVEL: str = "INFO"
    REPORT_TZ: str = "UTC"            # local day boundaries for sales reports
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
settings = Settings()
