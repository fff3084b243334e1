"""Flask configuration."""

import os
from pathlib import Path

from civicsim.storage.config import get_progress_path, get_simulations_path, get_storage_backend


class Config:
    """Base configuration."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-in-prod")

    # Database - instance folder is at project root
    PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
    INSTANCE_PATH = PROJECT_ROOT / "instance"
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{INSTANCE_PATH}/civicsim.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Simulation and progress storage
    STORAGE_BACKEND = get_storage_backend().value  # 'file' or 'sqlite'
    SIMULATIONS_PATH = get_simulations_path()
    PROGRESS_PATH = get_progress_path()
    STORAGE_DATABASE_URI = str(INSTANCE_PATH / "civicsim-storage.db")

    # Leaderboard
    LEADERBOARD_LIMIT = 10
    LEADERBOARD_MAX_LIMIT = 100

    # WhatsApp notifications
    WHATSAPP_ACCESS_TOKEN = os.environ.get("WHATSAPP_ACCESS_TOKEN")
    WHATSAPP_PHONE_NUMBER_ID = os.environ.get("WHATSAPP_PHONE_NUMBER_ID")
    WHATSAPP_VERIFY_TOKEN = os.environ.get("WHATSAPP_VERIFY_TOKEN")
    WHATSAPP_API_URL = os.environ.get("WHATSAPP_API_URL", "https://graph.facebook.com/v18.0")
    NOTIFICATION_TIMEOUT = 10  # seconds per WhatsApp API call
    NOTIFICATION_WORKERS = 2  # 0 sends inline

    # LLM generation
    GENERATION_ENABLED = os.environ.get("CIVICSIM_GENERATION_ENABLED", "1") != "0"


class TestConfig(Config):
    """Testing configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    STORAGE_BACKEND = "file"
    NOTIFICATION_WORKERS = 0
    GENERATION_ENABLED = False
    WHATSAPP_ACCESS_TOKEN = None
    WHATSAPP_PHONE_NUMBER_ID = None
    WHATSAPP_VERIFY_TOKEN = "test-verify-token"
