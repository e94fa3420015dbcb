import pytest
from django.core import mail
from django.urls import reverse
from kombu.exceptions import OperationalError

from common.throttling import FixedWindowRateThrottle
from engagement.models import ContactMessage, NewsletterSubscriber
from engagement.spam import is_spam, spam_score

CONTACT = {
    "name": "Jean-Pierre Mba",
    "email": "jp.mba@example.com",
    "subject": "Demande d'information",
    "message": "Bonjour, je souhaiterais rejoindre l'antenne de Rabat.",
}


# ----- Newsletter -----

@pytest.mark.django_db
def test_newsletter_subscribe_duplicate_and_reactivate(api_client):
    url = reverse("newsletter")

    r = api_client.post(url, {"email": "a@b.com"}, format="json")
    assert r.status_code == 201, r.content
    assert r.json()["data"]["isActive"] is True

    r = api_client.post(url, {"email": "a@b.com"}, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Cet email est déjà abonné à la newsletter"}

    r = api_client.delete(f"{url}?email=a@b.com")
    assert r.status_code == 200
    assert NewsletterSubscriber.objects.get(email="a@b.com").is_active is False

    r = api_client.post(url, {"email": "A@B.com"}, format="json")
    assert r.status_code == 200
    assert r.json()["message"] == "Abonnement réactivé avec succès"
    assert NewsletterSubscriber.objects.count() == 1
    assert NewsletterSubscriber.objects.get().is_active is True


@pytest.mark.django_db
def test_newsletter_unsubscribe_errors(api_client):
    url = reverse("newsletter")
    assert api_client.delete(url).status_code == 400
    assert api_client.delete(f"{url}?email=inconnu@b.com").status_code == 404
    assert api_client.post(url, {"email": "pas-un-email"}, format="json").status_code == 400


@pytest.mark.django_db
def test_newsletter_admin_list_and_update(api_client, admin_client):
    NewsletterSubscriber.objects.create(email="actif@b.com")
    NewsletterSubscriber.objects.create(email="parti@b.com", is_active=False)
    url = reverse("newsletter")

    assert api_client.get(url).status_code == 401

    r = admin_client.get(url, {"active": "true"})
    assert r.status_code == 200
    assert [s["email"] for s in r.json()["data"]] == ["actif@b.com"]
    assert r.json()["pagination"]["total"] == 1

    r = admin_client.put(url, {"email": "parti@b.com", "isActive": True}, format="json")
    assert r.status_code == 200, r.content
    assert NewsletterSubscriber.objects.get(email="parti@b.com").is_active is True

    r = admin_client.put(url, {"email": "absent@b.com", "isActive": True}, format="json")
    assert r.status_code == 404


# ----- Contact -----

@pytest.mark.django_db
def test_contact_stores_message_and_notifies(api_client):
    r = api_client.post(reverse("contact"), CONTACT, format="json")
    assert r.status_code == 201, r.content
    assert r.json()["message"] == "Message reçu avec succès"
    assert r["X-RateLimit-Limit"] == "5"
    assert r["X-RateLimit-Remaining"] == "4"

    contact = ContactMessage.objects.get()
    assert contact.status == ContactMessage.Status.SENT
    assert contact.ip_address == "127.0.0.1"

    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["contact@uesgm.ma"]
    assert mail.outbox[0].reply_to == ["jp.mba@example.com"]


@pytest.mark.django_db
def test_contact_validation(api_client):
    r = api_client.post(reverse("contact"), {**CONTACT, "name": "R2D2", "message": "court"}, format="json")
    assert r.status_code == 400
    assert {"name", "message"} <= set(r.json()["details"])
    assert ContactMessage.objects.count() == 0

    # le script est retire avant la verification de longueur
    r = api_client.post(reverse("contact"), {**CONTACT, "message": "<script>alert(1)</script>Salut"},
                        format="json")
    assert r.status_code == 400


@pytest.mark.django_db
def test_contact_get_is_not_allowed(api_client):
    r = api_client.get(reverse("contact"))
    assert r.status_code == 405
    assert r.json() == {"error": "Méthode non autorisée"}


@pytest.mark.django_db
def test_contact_honeypot_is_silently_dropped(api_client):
    r = api_client.post(reverse("contact"), {**CONTACT, "company": "Spam Corp"}, format="json")
    assert r.status_code == 201
    assert ContactMessage.objects.count() == 0
    assert len(mail.outbox) == 0


@pytest.mark.django_db
def test_contact_spam_is_kept_without_notification(api_client):
    spammy = {
        **CONTACT,
        "email": "winner+1234@example.com",
        "message": "CONGRATULATIONS WINNER!!!!! Click here http://a.io http://b.io http://c.io free money",
    }
    r = api_client.post(reverse("contact"), spammy, format="json")
    assert r.status_code == 201
    contact = ContactMessage.objects.get()
    assert contact.status == ContactMessage.Status.SPAM
    assert contact.spam_score > 30
    assert len(mail.outbox) == 0


@pytest.mark.django_db
def test_contact_rate_limit_and_window_reset(api_client, monkeypatch):
    clock = {"now": 1_000_000.0}
    monkeypatch.setattr(FixedWindowRateThrottle, "timer", staticmethod(lambda: clock["now"]))
    url = reverse("contact")

    for _ in range(5):
        assert api_client.post(url, CONTACT, format="json").status_code == 201

    r = api_client.post(url, CONTACT, format="json")
    assert r.status_code == 429
    assert int(r["Retry-After"]) == 900
    assert r.json()["retryAfter"] == 900
    assert ContactMessage.objects.count() == 5

    clock["now"] += 15 * 60 + 1
    assert api_client.post(url, CONTACT, format="json").status_code == 201


def test_spam_score_rules():
    assert spam_score("jp@example.com", "", "Bonjour, une question sur l'adhésion.") == 0
    assert spam_score("jp+news@example.com", "", "Bonjour tout le monde") == 5
    assert spam_score("jp@example.com", "urgent", "Répondez vite svp !") == 10
    assert spam_score("jp@example.com", "", "http://a http://b http://c http://d http://e") == 20
    assert not is_spam(30)
    assert is_spam(31)


@pytest.mark.django_db
def test_admin_contact_messages(admin_client, member_client):
    message = ContactMessage.objects.create(name="Ada", email="ada@example.com", message="Bonjour à tous")
    ContactMessage.objects.create(name="Bot", email="bot@example.com", message="spam",
                                  status=ContactMessage.Status.SPAM)

    assert member_client.get(reverse("admin_contact_messages_list")).status_code == 403

    r = admin_client.get(reverse("admin_contact_messages_list"), {"status": "spam"})
    assert [m["name"] for m in r.json()["data"]] == ["Bot"]

    r = admin_client.patch(reverse("admin_contact_messages_detail", args=[message.pk]), {"status": "SENT"},
                           format="json")
    assert r.status_code == 200, r.content
    assert r.json()["data"]["status"] == "SENT"

    r = admin_client.patch(reverse("admin_contact_messages_detail", args=[message.pk]), {"name": "Autre"},
                           format="json")
    message.refresh_from_db()
    assert message.name == "Ada"


@pytest.mark.django_db
def test_contact_is_saved_when_task_queue_is_down(api_client, monkeypatch):
    class BrokenQueue:
        @staticmethod
        def delay(*args, **kwargs):
            raise OperationalError("Error 111 connecting to localhost:6379. Connection refused.")

    monkeypatch.setattr("engagement.views.send_contact_notification", BrokenQueue)

    r = api_client.post(reverse("contact"), CONTACT, format="json")
    assert r.status_code == 201, r.content
    assert r.json()["message"] == "Message reçu avec succès"

    contact = ContactMessage.objects.get()
    assert contact.status == ContactMessage.Status.PENDING
    assert mail.outbox == []


@pytest.mark.django_db
def test_public_writes_refresh_statistics(api_client):
    def engagement():
        r = api_client.get(reverse("statistics"))
        assert r.status_code == 200
        return r.json()["data"]["engagement"]

    assert engagement()["activeNewsletterSubscribers"] == 0

    api_client.post(reverse("newsletter"), {"email": "lecteur@example.com"}, format="json")
    assert engagement()["activeNewsletterSubscribers"] == 1

    api_client.delete(reverse("newsletter") + "?email=lecteur@example.com")
    assert engagement()["activeNewsletterSubscribers"] == 0

    api_client.post(reverse("contact"), CONTACT, format="json")
    assert engagement()["totalContactMessages"] == 1
