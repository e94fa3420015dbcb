"""
Statistiques du site: compteurs publics et ventilations detaillees (admin).

Les series mensuelles sont calculees avec pandas a partir des dates brutes
renvoyees par l'ORM (une ligne par objet), puis completees par des zeros
pour les mois sans activite.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Iterable, List

import pandas as pd
from django.conf import settings
from django.db.models import Count
from django.utils import timezone

from documents.models import Document
from engagement.models import ContactMessage, NewsletterSubscriber
from events.models import Event
from organization.models import Antenne, ExecutiveMember, Partner
from projects.models import Project


def safe_div(a: float, b: float, default: float = 0.0) -> float:
    return a / b if b else default


def growth_rate(curr: float, prev: float) -> float:
    """Taux de croissance ( (curr - prev) / abs(prev) ), 0 si pas de reference."""
    if not prev:
        return 0.0
    return (curr - prev) / abs(prev)


def _month_labels(months: int) -> List[str]:
    now = timezone.localtime().replace(tzinfo=None)
    return [d.strftime("%Y-%m") for d in pd.date_range(end=pd.Timestamp(now), periods=months, freq="MS")]


def monthly_series(dates: Iterable, months: int = 12) -> List[Dict[str, Any]]:
    """
    Nombre d'occurrences par mois (fuseau du site) sur les ``months`` derniers mois,
    du plus ancien au plus recent: [{"month": "2025-01", "count": 3}, ...].
    """
    labels = _month_labels(months)
    values = [d for d in dates if d is not None]
    if values:
        stamps = pd.to_datetime(pd.Series(values), utc=True).dt.tz_convert(settings.TIME_ZONE)
        counts = stamps.dt.strftime("%Y-%m").value_counts()
    else:
        counts = pd.Series(dtype="int64")
    series = counts.reindex(labels, fill_value=0).astype(int)
    return [{"month": month, "count": int(count)} for month, count in series.items()]


def with_growth(series: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Ajoute le total et la croissance du dernier mois par rapport au precedent."""
    counts = [point["count"] for point in series]
    current = counts[-1] if counts else 0
    previous = counts[-2] if len(counts) > 1 else 0
    return {
        "series": series,
        "total": int(sum(counts)),
        "average": round(safe_div(sum(counts), len(counts)), 2),
        "growth": round(growth_rate(current, previous), 4),
    }


def _breakdown(queryset, field: str) -> List[Dict[str, Any]]:
    rows = queryset.values(field).annotate(count=Count("id")).order_by(field)
    return [{"key": row[field], "count": row["count"]} for row in rows]


def overview() -> Dict[str, Any]:
    now = timezone.now()
    published_events = Event.objects.filter(status=Event.Status.PUBLISHED)
    return {
        "overview": {
            "totalEvents": Event.objects.count(),
            "publishedEvents": published_events.count(),
            "upcomingEvents": published_events.filter(start_date__gte=now).count(),
            "totalProjects": Project.objects.count(),
            "publishedProjects": Project.objects.filter(is_published=True).count(),
            "totalDocuments": Document.objects.count(),
            "publishedDocuments": Document.objects.filter(is_published=True).count(),
            "totalPartners": Partner.objects.count(),
            "totalAntennes": Antenne.objects.count(),
            "executiveMembers": ExecutiveMember.objects.filter(is_active=True).count(),
        },
        "engagement": {
            "totalNewsletterSubscribers": NewsletterSubscriber.objects.count(),
            "activeNewsletterSubscribers": NewsletterSubscriber.objects.filter(is_active=True).count(),
            "totalContactMessages": ContactMessage.objects.count(),
            "unreadContactMessages": ContactMessage.objects.filter(
                status=ContactMessage.Status.PENDING
            ).count(),
        },
        "lastUpdated": now,
    }


def detailed() -> Dict[str, Any]:
    published_events = Event.objects.filter(status=Event.Status.PUBLISHED)
    recent = ContactMessage.objects.filter(
        created_at__gte=timezone.now() - timedelta(days=30)
    ).values("id", "name", "email", "subject", "status", "created_at")[:10]

    return {
        "breakdowns": {
            "eventsByCategory": _breakdown(published_events, "category"),
            "projectsByStatus": _breakdown(Project.objects.filter(is_published=True), "status"),
            "documentsByCategory": _breakdown(Document.objects.filter(is_published=True), "category"),
            "partnersByType": _breakdown(Partner.objects.all(), "type"),
            "eventsByAntenne": _breakdown(published_events.exclude(antenne=None), "antenne__city"),
        },
        "monthly": {
            "events": with_growth(monthly_series(published_events.values_list("start_date", flat=True))),
            "contactMessages": with_growth(
                monthly_series(ContactMessage.objects.values_list("created_at", flat=True), months=6)
            ),
            "newsletterSubscribers": with_growth(
                monthly_series(NewsletterSubscriber.objects.values_list("created_at", flat=True), months=6)
            ),
        },
        "activity": {
            "recent": [
                {
                    "id": row["id"],
                    "name": row["name"],
                    "email": row["email"],
                    "subject": row["subject"],
                    "status": row["status"],
                    "createdAt": row["created_at"],
                }
                for row in recent
            ],
        },
    }
