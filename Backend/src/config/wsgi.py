"""
Point d'entrée WSGI de l'API UESGM (gunicorn config.wsgi:application).

Le flux SSE garde une connexion ouverte par abonné : lancer gunicorn avec
des workers threadés (ex: --worker-class gthread --threads 8).
"""
import os

from dotenv import load_dotenv

# Charger les variables d'environnement depuis .env (si present)
load_dotenv()

from django.core.wsgi import get_wsgi_application  # noqa: E402

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.prod")

application = get_wsgi_application()
