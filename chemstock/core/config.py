"""
Core Configuration Module

Centralizes environment configuration for the ChemStock authorization service.
Provides a singleton Settings object; every property is read from the
environment on access so tests can monkeypatch os.environ.

Usage:
    from chemstock.core.config import settings

    print(settings.APP_ENV)
    print(settings.SUPABASE_URL)
"""

import os
from typing import List, Optional


class Settings:
    """
    Application settings loaded from environment variables.
    """

    # ==================== Application Settings ====================

    @property
    def APP_ENV(self) -> str:
        """Application environment: dev, staging, production"""
        return os.getenv("APP_ENV", "dev")

    @property
    def LOG_LEVEL(self) -> str:
        """Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"""
        return os.getenv("LOG_LEVEL", "INFO")

    # ==================== Relational Store ====================

    @property
    def SUPABASE_URL(self) -> str:
        """Base URL of the Supabase project (REST and auth endpoints)"""
        return os.getenv("SUPABASE_URL", "http://localhost:54321").rstrip("/")

    @property
    def SUPABASE_ANON_KEY(self) -> Optional[str]:
        """Public API key sent as the `apikey` header"""
        return os.getenv("SUPABASE_ANON_KEY")

    @property
    def USER_ROLES_TABLE(self) -> str:
        return os.getenv("USER_ROLES_TABLE", "user_roles")

    @property
    def USER_PERMISSIONS_TABLE(self) -> str:
        return os.getenv("USER_PERMISSIONS_TABLE", "user_permissions")

    # ==================== HTTP Client Settings ====================

    @property
    def STORE_CLIENT_TIMEOUT(self) -> float:
        """Store/identity HTTP timeout in seconds (the only resolution timeout)"""
        return float(os.getenv("STORE_CLIENT_TIMEOUT", "10.0"))

    @property
    def STORE_CLIENT_MAX_CONNECTIONS(self) -> int:
        return int(os.getenv("STORE_CLIENT_MAX_CONNECTIONS", "50"))

    @property
    def STORE_CLIENT_MAX_KEEPALIVE(self) -> int:
        return int(os.getenv("STORE_CLIENT_MAX_KEEPALIVE", "10"))

    # ==================== CORS Settings ====================

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Allowed CORS origins"""
        origins_str = os.getenv("CORS_ORIGINS", "*")
        if origins_str == "*":
            return ["*"]
        return [origin.strip() for origin in origins_str.split(",")]

    @property
    def CORS_ALLOW_CREDENTIALS(self) -> bool:
        return os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"

    # ==================== Feature Flags ====================

    @property
    def ENABLE_ADMIN_API(self) -> bool:
        """Expose role/permission administration endpoints"""
        return os.getenv("ENABLE_ADMIN_API", "true").lower() == "true"


# ==================== Singleton Instance ====================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the singleton Settings instance.

    Example:
        >>> from chemstock.core.config import get_settings
        >>> get_settings().USER_ROLES_TABLE
        'user_roles'
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


settings = get_settings()
