from .base import *  # noqa

# --- Charger .env (Backend/.env) et ÉCRASER les variables OS si besoin -----
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PATH = Path(__file__).resolve().parents[3] / ".env"  # -> dossier Backend/ (depuis src/config/settings/local.py)
# ⚠️ override=True pour écraser une variable déjà définie dans la session
if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=True)
    logger.info(f"[settings] .env chargé depuis {ENV_PATH}")

# --- Dev local ---
DEBUG = True
ALLOWED_HOSTS = ["127.0.0.1", "localhost", "host.docker.internal"]

# Front Next.js en dev
CSRF_TRUSTED_ORIGINS = [
    "http://127.0.0.1:3000",
    "http://localhost:3000",
]

# ⚠️ Ne pas ré-ajouter corsheaders ici (il est déjà dans base.py)
# -> pas de INSTALLED_APPS ni de MIDDLEWARE supplémentaires dans local.py

# CORS en dev
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

# Sans broker Redis en local, les tâches Celery tournent en ligne
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "1") == "1"

# Expose les valeurs lues (utilisées par le code applicatif)
OBJECT_STORAGE = {
    **OBJECT_STORAGE,
    "BACKEND": os.getenv("OBJECT_STORAGE_BACKEND", "local"),
    "SUPABASE_URL": os.getenv("SUPABASE_URL", ""),
    "SUPABASE_SERVICE_KEY": os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
}
