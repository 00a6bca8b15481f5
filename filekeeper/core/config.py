
import os
from dataclasses import dataclass
from typing import List
from dotenv import load_dotenv

load_dotenv(override=True)

@dataclass
class Settings:
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))
    APP_ENV: str = os.getenv("APP_ENV", os.getenv("NODE_ENV", "development"))
    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "uploads")
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
