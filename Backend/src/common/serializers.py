"""
Conversion snake_case <-> camelCase entre l'ORM et le JSON de l'API.

Le front envoie et recoit ``isActive``, ``publishedAt``, ``startDate``... ;
les modeles Django gardent ``is_active``, ``published_at``, ``start_date``.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from rest_framework import serializers

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def camelize(data: Any) -> Any:
    """Renomme recursivement les cles d'un dict/list (erreurs de validation, payloads)."""
    if isinstance(data, Mapping):
        return {to_camel(str(k)): camelize(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [camelize(v) for v in data]
    return data


class CamelCaseSerializerMixin:
    """
    A placer avant ``serializers.ModelSerializer`` : les champs restent declares en
    snake_case, seules les cles du JSON entrant/sortant sont converties.
    """

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            data = {to_snake(k): v for k, v in data.items()}
        return super().to_internal_value(data)

    def to_representation(self, instance):
        # conversion superficielle: les JSONField gardent leurs cles
        data = super().to_representation(instance)
        return {to_camel(k): v for k, v in data.items()}


class CamelModelSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    pass


class CamelSerializer(CamelCaseSerializerMixin, serializers.Serializer):
    pass
