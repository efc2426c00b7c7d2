from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "ai-rundown-api"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "ai_rundown"

    GITHUB_TOKEN: str | None = None
    GITHUB_BASE_URL: str = "https://api.github.com"

    GEMINI_API_KEY: str | None = None
    GEMINI_CHAT_MODEL: str = "gemini-2.0-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"

    CATALOG_BASE_URL: str = "http://localhost:7007/api/catalog"
    CATALOG_TOKEN: str | None = None

    SONARCLOUD_TOKEN: str | None = None
    SONARCLOUD_BASE_URL: str = "https://sonarcloud.io"

    HTTP_TIMEOUT_SECONDS: float = 30.0
    FACT_CONCURRENCY: int = 5
    COMMIT_WINDOW_DAYS: int = 7
    PR_PAGE_SIZE: int = 5

    # traffic light thresholds for the sonarcloud checks
    SONAR_MAX_BUGS: int = 0
    SONAR_MAX_CODE_SMELLS: int = 10
    SONAR_MAX_VULNERABILITIES: int = 0
    SONAR_MIN_COVERAGE: float = 80.0

settings = Settings()
