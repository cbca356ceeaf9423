"""
grocer/config.py - Application configuration and Firebase initialization.

This module defines a Pydantic BaseSettings class to load configuration from environment
(and a `.env` file). Everything else reads settings through `get_settings()`, which is also
usable as a FastAPI dependency. `get_firebase_app()` initializes the Firebase Admin SDK
(ID token verification, user management) on first use.
"""
from functools import lru_cache
from typing import Optional

import firebase_admin
from firebase_admin import credentials
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    database_url: str = Field('sqlite:///./grocer.db', alias='DATABASE_URL')
    db_echo: bool = Field(False, alias='DB_ECHO')

    # Firebase Auth: ID tokens are verified against this project
    firebase_project_id: str = Field('', alias='FIREBASE_PROJECT_ID')
    # Service account key for the Admin SDK; application default credentials when unset
    google_application_credentials: Optional[str] = Field(None, alias='GOOGLE_APPLICATION_CREDENTIALS')
    # Used by /auth/login and /auth/register (password sign-in proxy)
    firebase_web_api_key: str = Field('', alias='FIREBASE_WEB_API_KEY')
    identity_toolkit_url: str = Field('https://identitytoolkit.googleapis.com/v1', alias='IDENTITY_TOOLKIT_URL')

    debug: bool = Field(False, alias='DEBUG')
    log_level: str = Field('INFO', alias='LOG_LEVEL')
    allowed_origins: str = Field('*', alias='ALLOWED_ORIGINS')  # Comma-separated list or '*' for all

    # Storefront policy
    currency: str = Field('ZMW', alias='CURRENCY')
    max_line_quantity: int = Field(99, ge=1, alias='MAX_LINE_QUANTITY')
    # Scheduled delivery slots are entered in campus local time
    timezone: str = Field('Africa/Lusaka', alias='TIMEZONE')

    # OpenStreetMap Nominatim (reverse geocoding + place search)
    nominatim_base_url: str = Field('https://nominatim.openstreetmap.org', alias='NOMINATIM_BASE_URL')
    nominatim_user_agent: str = Field('grocer-storefront/1.0', alias='NOMINATIM_USER_AGENT')
    nominatim_timeout: float = Field(10.0, alias='NOMINATIM_TIMEOUT')
    geocode_locality: str = Field('Lusaka, Zambia', alias='GEOCODE_LOCALITY')
    # left,top,right,bottom; keeps search results inside the delivery area
    geocode_viewbox: str = Field('28.1,-15.6,28.5,-15.2', alias='GEOCODE_VIEWBOX')


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_firebase_app(settings: Optional[Settings] = None) -> firebase_admin.App:
    """Default Firebase Admin app; initialized with the service account on first call."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        # not initialized yet
        settings = settings or get_settings()
        if settings.google_application_credentials:
            cred = credentials.Certificate(settings.google_application_credentials)
        else:
            cred = credentials.ApplicationDefault()
        options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
        return firebase_admin.initialize_app(cred, options)
