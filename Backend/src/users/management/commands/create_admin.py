from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from users.models import Role


class Command(BaseCommand):
    help = "Crée (ou promeut) un compte d'administration du back-office."

    def add_arguments(self, parser):
        parser.add_argument("--username", required=True)
        parser.add_argument("--email", required=True)
        parser.add_argument("--password", required=True)
        parser.add_argument("--role", choices=[Role.ADMIN, Role.SUPER_ADMIN], default=Role.ADMIN)

    def handle(self, *args, **opts):
        User = get_user_model()
        user = User.objects.filter(username=opts["username"]).first()
        created = user is None
        if created:
            user = User(username=opts["username"], email=opts["email"])

        try:
            validate_password(opts["password"], user)
        except ValidationError as e:
            raise CommandError(" ".join(e.messages))

        user.email = opts["email"]
        user.role = opts["role"]
        user.set_password(opts["password"])
        user.save()

        verb = "créé" if created else "mis à jour"
        self.stdout.write(self.style.SUCCESS(f"Compte {user.username} ({user.role}) {verb}"))
