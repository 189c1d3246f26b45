import os
import shutil
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[2]


def load_environment() -> None:
    """Load variables from the project's .env file without overriding the real environment."""
    load_dotenv(BASE_DIR / '.env', override=False)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


def find_soffice() -> str | None:
    return os.environ.get('SOFFICE_PATH') or shutil.which('soffice') or shutil.which('libreoffice')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev')
    PORT = int(os.environ.get('PORT', 3000))

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', f"sqlite:///{BASE_DIR / 'conversions.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Filesystem
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', str(BASE_DIR / 'uploads'))
    PDF_STORAGE_DIR = os.environ.get('PDF_STORAGE_DIR', str(BASE_DIR / 'pdf-storage'))
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 100 * 1024 * 1024))

    # History
    HISTORY_RETENTION = int(os.environ.get('HISTORY_RETENTION', 5))

    # LibreOffice engine
    SOFFICE_PATH = find_soffice()
    OFFICE_ENGINE_HOST = os.environ.get('OFFICE_ENGINE_HOST', '127.0.0.1')
    OFFICE_ENGINE_PORT = int(os.environ.get('OFFICE_ENGINE_PORT', 2002))
    OFFICE_PROFILE_DIR = os.environ.get('OFFICE_PROFILE_DIR', str(BASE_DIR / '.office-profile'))
    OFFICE_START_TIMEOUT = float(os.environ.get('OFFICE_START_TIMEOUT', 30))
    OFFICE_CONVERT_TIMEOUT = float(os.environ.get('OFFICE_CONVERT_TIMEOUT', 120))
    OFFICE_ENGINE_AUTOSTART = _env_bool('OFFICE_ENGINE_AUTOSTART', True)

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', str(BASE_DIR / 'logs'))
    LOG_FORMAT = os.environ.get('LOG_FORMAT')
    LOG_BACKUP_COUNT = int(os.environ.get('LOG_BACKUP_COUNT', 3))
