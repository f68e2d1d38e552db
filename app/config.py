from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Logging settings
    LOG_LEVEL: str = "INFO"

    # Database settings
    DATABASE_URL: str = "sqlite:///./file_store.db"

    # JWT settings
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60

    # Storage settings
    STORAGE_BACKEND: str = "local"  # local only
    STORAGE_BASE_PATH: str = "app/storage/data"
    MAX_UPLOAD_SIZE_MB: int = 10
    ALLOWED_FILE_EXTENSIONS: list[str] = [
        ".pdf",
        ".doc",
        ".docx",
        ".txt",
        ".jpg",
        ".jpeg",
        ".png",
    ]
    GENERATE_UNIQUE_NAMES: bool = True

    # Authorization settings
    ELEVATED_ROLES: list[str] = ["Admin"]

    # 啟動時建立預設管理員帳號（兩個值都有設定時才會建立）
    DEFAULT_ADMIN_EMAIL: str | None = None
    DEFAULT_ADMIN_PASSWORD: str | None = None

    # Pydantic Settings的配置設定，用來控制類別如何讀取環境變數
    # "env_file": ".env"：告訴 Pydantic 要從.env檔案讀取環境變數
    # "extra": "ignore"：環境變數裡有、但Settings類別沒定義的欄位直接忽略
    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024


settings = Settings()
