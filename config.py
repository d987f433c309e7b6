"""Runtime settings read from the environment (and a local .env file)."""

import os

from dotenv import load_dotenv

load_dotenv()


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def database_url() -> str:
    url = os.getenv('DATABASE_URL', 'sqlite:///bookit.db')
    # Heroku-style URLs use a scheme SQLAlchemy no longer accepts
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


class Config:
    DATABASE_URL = database_url()
    DB_POOL_SIZE = int(os.getenv('DB_POOL_SIZE', 20))
    DB_MAX_OVERFLOW = int(os.getenv('DB_MAX_OVERFLOW', 40))
    DB_POOL_RECYCLE = int(os.getenv('DB_POOL_RECYCLE', 3600))

    SEED_DEMO_DATA = env_flag('SEED_DEMO_DATA', True)
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    PORT = int(os.getenv('PORT', 5000))
