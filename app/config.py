# app/config.py
import os
from functools import lru_cache

FREEIMAGE_DEFAULT_URL = "https://freeimage.host/api/1/upload"


class Config:
    def __init__(self):
        self._validate_critical_configs()

    def _validate_critical_configs(self):
        """Validate critical configuration parameters"""
        critical_configs = [
            'SUPABASE_URL',
            'SUPABASE_ANON_KEY',
            'SUPABASE_SERVICE_KEY',
        ]

        for config in critical_configs:
            if not os.getenv(config):
                raise ValueError(f"Critical configuration {config} is not set in environment")

    @property
    def SUPABASE_URL(self) -> str:
        """Supabase Project URL"""
        url = os.getenv("SUPABASE_URL")
        if not url:
            raise ValueError("SUPABASE_URL is not set in environment")
        return url.rstrip("/")

    @property
    def SUPABASE_ANON_KEY(self) -> str:
        """Supabase anonymous key, used for the auth endpoints"""
        key = os.getenv("SUPABASE_ANON_KEY")
        if not key:
            raise ValueError("SUPABASE_ANON_KEY is not set in environment")
        return key

    @property
    def SUPABASE_SERVICE_KEY(self) -> str:
        """Supabase service role key, used for table access"""
        key = os.getenv("SUPABASE_SERVICE_KEY")
        if not key:
            raise ValueError("SUPABASE_SERVICE_KEY is not set in environment")
        return key

    @property
    def SUPABASE_JWT_ALG(self) -> str:
        return os.getenv("SUPABASE_JWT_ALG", "ES256")

    @property
    def APP_URL(self) -> str:
        """Application URL, decides cookie security"""
        return os.getenv("APP_URL", "http://localhost:8000")

    @property
    def FREEIMAGE_API_KEY(self) -> str:
        """API key for the image host. Empty means uploads are disabled."""
        return os.getenv("FREEIMAGE_API_KEY", "")

    @property
    def FREEIMAGE_UPLOAD_URL(self) -> str:
        return os.getenv("FREEIMAGE_UPLOAD_URL", FREEIMAGE_DEFAULT_URL)

    @property
    def MAX_IMAGE_BYTES(self) -> int:
        return int(os.getenv("MAX_IMAGE_BYTES", 5 * 1024 * 1024))

    @property
    def IMAGE_UPLOAD_TIMEOUT(self) -> int:
        return int(os.getenv("IMAGE_UPLOAD_TIMEOUT", 60))

    @property
    def LIST_CACHE_TTL(self) -> int:
        """Seconds a tenant list read stays cached between mutations"""
        return int(os.getenv("LIST_CACHE_TTL", 30))

    @property
    def LOG_LEVEL(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO").upper()

    def validate(self) -> bool:
        """
        Comprehensive configuration validation
        Useful for pre-deployment checks
        """
        try:
            _ = [
                self.SUPABASE_URL,
                self.SUPABASE_ANON_KEY,
                self.SUPABASE_SERVICE_KEY,
                self.MAX_IMAGE_BYTES,
                self.IMAGE_UPLOAD_TIMEOUT,
                self.LIST_CACHE_TTL,
            ]
            return True
        except ValueError:
            return False


@lru_cache(maxsize=1)
def load_config() -> Config:
    """
    Cached configuration loader
    Ensures only one instance of Config is created
    """
    config = Config()
    if not config.validate():
        raise RuntimeError("Configuration validation failed")
    return config
