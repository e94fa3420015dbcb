import os

from celery import Celery
from dotenv import load_dotenv

# Charger .env si present
load_dotenv()

# Definir le settings module Django par defaut
os.environ.setdefault(
    "DJANGO_SETTINGS_MODULE",
    os.getenv("DJANGO_SETTINGS_MODULE", "config.settings.local"),
)

app = Celery("uesgm")

# Charger la config depuis Django (prefixe CELERY_ dans settings)
# -> CELERY_BEAT_SCHEDULE publie les evenements programmes toutes les 5 minutes
app.config_from_object("django.conf:settings", namespace="CELERY")

# Autodiscovery des tasks.py dans les apps installees (events, engagement)
app.autodiscover_tasks()
