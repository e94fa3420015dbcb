import re

from django.core.exceptions import ValidationError


class StrongPasswordValidator:
    """
    Politique de mot de passe du back-office: longueur minimale, au moins une
    minuscule, une majuscule, un chiffre et un caractere special.
    """

    def __init__(self, min_length: int = 12):
        self.min_length = min_length

    def validate(self, password, user=None):
        errors = []
        if len(password) < self.min_length:
            errors.append(f"Le mot de passe doit contenir au moins {self.min_length} caractères.")
        if not re.search(r"[a-z]", password):
            errors.append("Le mot de passe doit contenir au moins une minuscule.")
        if not re.search(r"[A-Z]", password):
            errors.append("Le mot de passe doit contenir au moins une majuscule.")
        if not re.search(r"\d", password):
            errors.append("Le mot de passe doit contenir au moins un chiffre.")
        if not re.search(r"[^A-Za-z0-9]", password):
            errors.append("Le mot de passe doit contenir au moins un caractère spécial.")
        if errors:
            raise ValidationError(errors, code="password_too_weak")

    def get_help_text(self):
        return (
            f"Au moins {self.min_length} caractères, avec minuscule, majuscule, "
            "chiffre et caractère spécial."
        )
