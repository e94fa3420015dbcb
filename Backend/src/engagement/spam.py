"""
Score de spam heuristique d'un message de contact (0..100).
Au-dessus de SPAM_THRESHOLD le message est conserve avec le statut SPAM
et aucune notification n'est envoyee.
"""
import re

SPAM_THRESHOLD = 30

SPAM_KEYWORDS = (
    "viagra", "cialis", "lottery", "winner", "congratulations",
    "free money", "click here", "limited offer", "act now",
    "guaranteed", "risk free", "special promotion", "urgent",
)

_LINK_RE = re.compile(r"https?://")
_REPEATED_RE = re.compile(r"(.)\1{4,}")
_DIGITS_RE = re.compile(r"\d{3,}")


def spam_score(email: str, subject: str, message: str) -> int:
    text = f"{subject or ''} {message}".lower()
    score = sum(10 for keyword in SPAM_KEYWORDS if keyword in text)

    score += min(len(_LINK_RE.findall(text)) * 5, 20)

    letters = sum(1 for c in message if c.isupper())
    if message and letters / len(message) > 0.5:
        score += 15

    if _REPEATED_RE.search(message):
        score += 10

    if "+" in email or _DIGITS_RE.search(email):
        score += 5

    return min(score, 100)


def is_spam(score: int) -> bool:
    return score > SPAM_THRESHOLD
