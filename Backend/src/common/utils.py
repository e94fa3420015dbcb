import os
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Type

from django.db import models
from django.utils.text import slugify


def env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


def query_bool(value: Optional[str]) -> Optional[bool]:
    """Lit un parametre de query string (?active=true) ; None si absent ou illisible."""
    if value is None:
        return None
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return None


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def dict_without_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def envelope(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """Corps de reponse standard de l'API: {"success": true, "data": ..., "message": ...}."""
    return dict_without_none({"success": True, "data": data, "message": message, **extra})


def unique_slug(model: Type[models.Model], value: str, instance: Optional[models.Model] = None,
                field: str = "slug") -> str:
    """
    Slug derive du titre, suffixe -2, -3... tant qu'il est deja pris.
    L'instance courante est exclue (mise a jour).
    """
    max_length = model._meta.get_field(field).max_length or 50
    base = slugify(value)[: max_length - 8].strip("-") or model._meta.model_name
    qs = model._default_manager.all()
    if instance is not None and instance.pk:
        qs = qs.exclude(pk=instance.pk)

    slug, counter = base, 2
    while qs.filter(**{field: slug}).exists():
        slug = f"{base}-{counter}"
        counter += 1
    return slug
