from .base import *

# Tests
DEBUG = True

# DB sqlite en mémoire par défaut pour rapidité
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "uesgm-tests"}
}

# Auth plus légère en test
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Email capturé en mémoire
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Celery exécuté en ligne, sans broker
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"

# Upload vers le default_storage local
OBJECT_STORAGE = {**OBJECT_STORAGE, "BACKEND": "local"}

# SSE: heartbeat court pour ne pas bloquer les tests
SSE_HEARTBEAT_SECONDS = 0.05

# DRF: on garde les vraies permissions (les rôles sont testés)
REST_FRAMEWORK = {**REST_FRAMEWORK}
