"""Point d'entrée ASGI (uvicorn config.asgi:application)."""
import os

from dotenv import load_dotenv

load_dotenv()

from django.core.asgi import get_asgi_application  # noqa: E402

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.prod")

application = get_asgi_application()
