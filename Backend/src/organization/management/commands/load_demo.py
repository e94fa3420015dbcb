import random
from datetime import timedelta

import pandas as pd
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from common.utils import unique_slug
from documents.models import Document
from engagement.models import NewsletterSubscriber
from events.models import Event
from organization.models import Antenne, ExecutiveMember, Partner
from projects.models import Project

CITIES = ["Rabat", "Casablanca", "Fès", "Marrakech", "Tanger", "Agadir", "Oujda", "Meknès"]

PARTNERS = [
    ("Ambassade du Gabon au Maroc", Partner.Type.INSTITUTIONAL),
    ("AMCI", Partner.Type.INSTITUTIONAL),
    ("Campus Connect", Partner.Type.PRIVATE),
    ("Banque Atlantique", Partner.Type.PRIVATE),
]

BUREAU = [
    ("Président", "Mba Obiang"), ("Vice-présidente", "Nzé Ondo"), ("Secrétaire général", "Moussavou"),
    ("Trésorière", "Ella Mintsa"), ("Chargé de communication", "Koumba"),
]

EVENT_TITLES = {
    Event.Category.INTEGRATION: "Journée d'accueil des nouveaux étudiants",
    Event.Category.ACADEMIC: "Atelier orientation et stages",
    Event.Category.SOCIAL: "Collecte solidaire",
    Event.Category.CULTURAL: "Soirée culturelle gabonaise",
}


class Command(BaseCommand):
    help = "Charge des donnees de demonstration (antennes, partenaires, bureau, evenements, projets, documents)."

    def add_arguments(self, parser):
        parser.add_argument("--events", type=int, default=12, help="Nombre d'evenements a generer")
        parser.add_argument("--days", type=int, default=180, help="Fenetre (jours) autour d'aujourd'hui")
        parser.add_argument("--seed", type=int, default=42, help="Graine aleatoire")
        parser.add_argument("--reset", action="store_true", help="Vide les tables de contenu avant chargement")

    @transaction.atomic
    def handle(self, *args, **opts):
        rng = random.Random(opts["seed"])
        n_events = int(opts["events"])
        days = int(opts["days"])

        if opts["reset"]:
            for model in (Event, Project, Document, ExecutiveMember, Partner, Antenne, NewsletterSubscriber):
                model.objects.all().delete()
            self.stdout.write(self.style.WARNING("Tables de contenu videes"))

        self.stdout.write(self.style.NOTICE(f"Generation de {n_events} evenements sur +/- {days} jours"))

        # 1) Antennes, partenaires, bureau
        antennes = []
        for city in CITIES:
            antenne, _ = Antenne.objects.get_or_create(
                city=city,
                defaults={
                    "name": f"Antenne de {city}",
                    "responsable": f"Responsable {city}",
                    "email": f"{slugify(city)}@uesgm.ma",
                },
            )
            antennes.append(antenne)

        for order, (name, kind) in enumerate(PARTNERS):
            Partner.objects.get_or_create(name=name, defaults={"type": kind, "order": order})

        for order, (position, name) in enumerate(BUREAU):
            ExecutiveMember.objects.get_or_create(name=name, position=position, defaults={"order": order})

        # 2) Evenements repartis autour d'aujourd'hui (passes et a venir)
        now = timezone.now()
        dates = pd.date_range(start=now - timedelta(days=days), end=now + timedelta(days=days),
                              periods=n_events).floor("s")
        categories = list(EVENT_TITLES)
        for i, date in enumerate(dates):
            category = rng.choice(categories)
            antenne = rng.choice(antennes)
            title = f"{EVENT_TITLES[category]} - {antenne.city} #{i + 1}"
            is_future = date.to_pydatetime() > now
            Event.objects.create(
                title=title,
                slug=unique_slug(Event, title),
                description=f"{EVENT_TITLES[category]} organisée par l'antenne de {antenne.city}.",
                location=antenne.city,
                category=category,
                status=Event.Status.PUBLISHED if is_future or rng.random() < 0.8 else Event.Status.DRAFT,
                start_date=date.to_pydatetime(),
                max_attendees=rng.choice([None, 50, 100, 200]),
                published_at=now,
                antenne=antenne,
            )

        # 3) Projets et documents
        for category in Project.Category:
            title = f"Projet {category.label.lower()} UESGM"
            if Project.objects.filter(title=title).exists():
                continue
            Project.objects.create(
                title=title,
                slug=unique_slug(Project, title),
                description=f"Programme {category.label.lower()} porté par les antennes de l'association.",
                category=category,
                status=rng.choice(list(Project.Status)),
                progress=rng.randint(0, 100),
                city=rng.choice(CITIES),
                is_featured=rng.random() < 0.3,
                is_published=True,
                published_at=now,
            )

        for title, category in (("Statuts de l'UESGM", Document.Category.STATUTS),
                                ("Guide de l'étudiant gabonais au Maroc", Document.Category.GUIDE),
                                ("Rapport d'activités annuel", Document.Category.RAPPORT)):
            if not Document.objects.filter(title=title).exists():
                Document.objects.create(
                    title=title,
                    slug=unique_slug(Document, title),
                    file_url=f"https://example.org/documents/{unique_slug(Document, title)}.pdf",
                    file_name=f"{unique_slug(Document, title)}.pdf",
                    mime_type="application/pdf",
                    category=category,
                    is_published=True,
                    published_at=now,
                )

        self.stdout.write(self.style.SUCCESS(
            f"OK: {Antenne.objects.count()} antennes, {Event.objects.count()} evenements, "
            f"{Project.objects.count()} projets, {Document.objects.count()} documents"
        ))
