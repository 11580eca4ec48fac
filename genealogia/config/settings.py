from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field

class Settings(BaseSettings):
    # Civil registry API
    REGISTRY_BASE_URL: str = Field(default="https://api.registro-civil.example/v1")
    REGISTRY_FAMILY_ENDPOINT: str = Field(default="familia")
    REGISTRY_API_TOKEN: str = Field(default="")
    REGISTRY_TIMEOUT: float = Field(default=30.0)
    REGISTRY_MAX_ATTEMPTS: int = Field(default=1)  # 1 = no retries on 429

    # Telegram
    TELEGRAM_BOT_TOKEN: str = Field(default="")
    TELEGRAM_ADMIN_IDS: str = Field(default="")  # comma-separated user IDs

    # Tree image
    TREE_CANVAS_WIDTH: int = Field(default=900)

    # Statistics (upper-inclusive breakpoints)
    AGE_BRACKETS: str = Field(default="17,60")           # 0-17 / 18-60 / 61+
    AREA_AGE_BRACKETS: str = Field(default="10,20,40,60")  # finer scheme for the area chart

    # PDF reports
    REPORT_PAGE_Y_LIMIT: float = Field(default=270.0)  # mm, rows below this start a new page
    REPORT_BRAND: str = Field(default="Registro Familiar")

    # Logging
    LOG_DIR: str = Field(default=str(Path(__file__).parent.parent.parent / "logs"))

    @property
    def age_breakpoints(self) -> List[int]:
        return _int_list(self.AGE_BRACKETS)

    @property
    def area_age_breakpoints(self) -> List[int]:
        return _int_list(self.AREA_AGE_BRACKETS)

    @property
    def family_url(self) -> str:
        return f"{self.REGISTRY_BASE_URL.rstrip('/')}/{self.REGISTRY_FAMILY_ENDPOINT.strip('/')}"

    @property
    def admin_ids(self) -> List[int]:
        if not self.TELEGRAM_ADMIN_IDS:
            return []
        return [int(x.strip()) for x in self.TELEGRAM_ADMIN_IDS.split(",") if x.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def _int_list(raw: str) -> List[int]:
    return sorted(int(x.strip()) for x in raw.split(",") if x.strip())


settings = Settings()
