import json
import os
from datetime import timedelta
from dotenv import load_dotenv
load_dotenv()


def _bool_env(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _list_env(key: str, default: list[str]) -> list[str]:
    raw = os.getenv(key)
    if not raw:
        return default
    try:
        parsed = json.loads(raw)
        if isinstance(parsed, list):
            return [str(item) for item in parsed]
    except (json.JSONDecodeError, TypeError):
        pass
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'changeme')
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'SQLALCHEMY_DATABASE_URI',
        'sqlite:///' + os.path.join(os.getcwd(), 'instance', 'blogdesk.db'))
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'False').lower() == 'true'
    PERMANENT_SESSION_LIFETIME = timedelta(minutes=45)
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    LOG_TO_FILE = _bool_env('LOG_TO_FILE', True)

    LANGUAGES = ['en']
    BABEL_DEFAULT_LOCALE = os.getenv('DEFAULT_LANGUAGE', 'en')
    BABEL_TRANSLATION_DIRECTORIES = os.path.join(
        os.path.dirname(__file__), 'translations')

    # Shared secret presented by the identity-provider bridge when it hands
    # over a verified profile. Sign-in is refused while this is unset.
    IDENTITY_BRIDGE_SECRET = os.getenv('IDENTITY_BRIDGE_SECRET')
    DEFAULT_ADMIN_IDS = _list_env('DEFAULT_ADMIN_IDS', [])
    SEED_RETRY_ATTEMPTS = int(os.getenv('SEED_RETRY_ATTEMPTS', 5))
    SEED_RETRY_DELAY = float(os.getenv('SEED_RETRY_DELAY', 2))


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ECHO = False
    WTF_CSRF_ENABLED = False
    LOG_TO_FILE = False
    IDENTITY_BRIDGE_SECRET = 'test-bridge-secret'
    DEFAULT_ADMIN_IDS = []
    SEED_RETRY_ATTEMPTS = 1
    SEED_RETRY_DELAY = 0
