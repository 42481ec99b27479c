"""
Talent Trust - Configuration

All settings load from environment variables with safe defaults for development.
In production, set TRUST_ENV=production to enforce required values.
"""
import os
import secrets
import warnings
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


class Settings:
    def __init__(self):
        self.ENVIRONMENT = os.getenv("TRUST_ENV", "development")

        # === Database ===
        self.NEO4J_URI = os.getenv("NEO4J_URI", "bolt://localhost:7687")
        self.NEO4J_USER = os.getenv("NEO4J_USER", "neo4j")
        self.NEO4J_PASSWORD = os.getenv("NEO4J_PASSWORD", "trust_dev_password")
        self.REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

        # === Auth ===
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        secret = os.getenv("JWT_SECRET", "")
        if secret:
            self.JWT_SECRET = secret
        else:
            if self.ENVIRONMENT == "production":
                raise RuntimeError("JWT_SECRET must be set in production. Add it to .env")
            self.JWT_SECRET = secrets.token_hex(32)
            warnings.warn("JWT_SECRET not set - using random key. Tokens will not survive restarts.")

        # === Application ===
        self.TRUST_HOST = os.getenv("TRUST_HOST", "0.0.0.0")
        self.TRUST_PORT = int(os.getenv("TRUST_PORT", "3001"))
        self.CORS_ORIGINS = [
            o.strip()
            for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
            if o.strip()
        ]
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "json")

        # === Batch recalculation ===
        # Identity recorded in the audit log for scheduled runs.
        self.TRUST_SYSTEM_ADMIN_ID = os.getenv("TRUST_SYSTEM_ADMIN_ID", "system")
        cron_hour = os.getenv("TRUST_RECALC_CRON_HOUR", "")
        self.TRUST_RECALC_CRON_HOUR: Optional[int] = int(cron_hour) if cron_hour else None

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def cors_origins(self) -> List[str]:
        return self.CORS_ORIGINS


@lru_cache()
def get_settings() -> Settings:
    return Settings()
