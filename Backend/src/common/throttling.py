"""
Limiteur de debit consultatif, par (IP client, categorie de route).

Fenetre fixe: compteur + horodatage de remise a zero stockes dans le cache
Django (LocMem = local au process, Redis si configure). Ce n'est pas une
frontiere de securite: le compteur est perdu au redemarrage en LocMem.

Taux dans REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"], format "5/15m", "20/day".
"""
import re

from rest_framework.throttling import SimpleRateThrottle

_PERIODS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_PERIOD_RE = re.compile(r"^(\d*)\s*([smhd])")


class FixedWindowRateThrottle(SimpleRateThrottle):
    """Une fenetre demarre a la premiere requete et dure ``duration`` secondes."""

    cache_format = "ratelimit:%(scope)s:%(ident)s"

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        num, period = rate.split("/")
        match = _PERIOD_RE.match(period.strip().lower())
        if match is None:
            raise ValueError(f"Periode de limitation invalide: {rate!r}")
        multiplier = int(match.group(1) or 1)
        return int(num), multiplier * _PERIODS[match.group(2)]

    def get_cache_key(self, request, view):
        return self.cache_format % {"scope": self.scope, "ident": self.get_ident(request)}

    def allow_request(self, request, view):
        if self.rate is None:
            return True

        self.key = self.get_cache_key(request, view)
        if self.key is None:
            return True

        self.now = self.timer()
        window = self.cache.get(self.key)
        if window is None or window["reset_at"] <= self.now:
            window = {"count": 0, "reset_at": self.now + self.duration}
        window["count"] += 1
        self.cache.set(self.key, window, self.duration)
        self.window = window
        return window["count"] <= self.num_requests

    def wait(self):
        return max(0.0, self.window["reset_at"] - self.now)

    def remaining(self) -> int:
        return max(0, self.num_requests - self.window["count"])


class ContactRateThrottle(FixedWindowRateThrottle):
    scope = "contact"


class ContactDailyRateThrottle(FixedWindowRateThrottle):
    scope = "contact_daily"


class NewsletterRateThrottle(FixedWindowRateThrottle):
    scope = "newsletter"


class LoginRateThrottle(FixedWindowRateThrottle):
    scope = "login"


class RegistrationRateThrottle(FixedWindowRateThrottle):
    scope = "registration"


class AdminReadRateThrottle(FixedWindowRateThrottle):
    """Lectures du back-office (GET/HEAD/OPTIONS)."""
    scope = "admin_read"

    def allow_request(self, request, view):
        if request.method not in ("GET", "HEAD", "OPTIONS"):
            return True
        return super().allow_request(request, view)


class AdminWriteRateThrottle(FixedWindowRateThrottle):
    """Ecritures du back-office (POST/PUT/PATCH/DELETE)."""
    scope = "admin_write"

    def allow_request(self, request, view):
        if request.method in ("GET", "HEAD", "OPTIONS"):
            return True
        return super().allow_request(request, view)


ADMIN_THROTTLES = [AdminReadRateThrottle, AdminWriteRateThrottle]


class RateLimitHeadersMixin:
    """
    Ajoute X-RateLimit-Limit / Remaining / Reset d'apres le premier limiteur
    de la vue (celui de la fenetre courte).
    """

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        throttles = getattr(self, "_active_throttles", None) or []
        for throttle in throttles:
            if getattr(throttle, "window", None) is None:
                continue
            response["X-RateLimit-Limit"] = str(throttle.num_requests)
            response["X-RateLimit-Remaining"] = str(throttle.remaining())
            response["X-RateLimit-Reset"] = str(int(throttle.window["reset_at"]))
            break
        return response

    def get_throttles(self):
        self._active_throttles = super().get_throttles()
        return self._active_throttles
