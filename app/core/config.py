from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    SUPER_ADMIN_EMAIL: str | None = None
    SUPER_ADMIN_PASSWORD: str | None = None
    SUPER_ADMIN_NAME: str | None = "Super Admin"
    ENV: str = "dev"  # "dev" or "prod"

    # --- HR FEDERATION ---
    HR_LOGIN_URL: str = "https://checkin-ten-gamma.vercel.app/api/login"
    HR_ROSTER_URL: str = "https://checkin-ten-gamma.vercel.app/api/employees"
    HR_TIMEOUT_SECONDS: float = 5.0
    ROSTER_SYNC_CONCURRENCY: int = 1

    # --- SESSION / RATE LIMIT STORAGE ---
    # Without REDIS_URL sessions and rate limits live in process memory
    REDIS_URL: str | None = None
    SESSION_KEY_PREFIX: str = "currentUser"
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "10/minute"

    FRONTEND_URL: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
