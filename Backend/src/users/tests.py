import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.urls import reverse
from rest_framework.test import APIClient

from conftest import PASSWORD
from users.models import Role
from users.permissions import has_required_role

User = get_user_model()


@pytest.mark.django_db
def test_register_and_login_and_me():
    client = APIClient()

    # 1) Register
    r = client.post(
        reverse("register"),
        {
            "username": "alice",
            "email": "Alice@Example.com",
            "password": "StrongPassw0rd!",
            "firstName": "Alice",
            "lastName": "Doe",
        },
        format="json",
    )
    assert r.status_code == 201, r.content
    assert r.data["role"] == Role.MEMBER
    assert User.objects.get(username="alice").email == "alice@example.com"

    # 2) Login (JWT)
    r = client.post(
        reverse("token_obtain_pair"),
        {"username": "alice", "password": "StrongPassw0rd!"},
        format="json",
    )
    assert r.status_code == 200, r.content
    assert "access" in r.data
    assert r.data["role"] == Role.MEMBER
    token = r.data["access"]

    # 3) /me
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    r = client.get(reverse("me"))
    assert r.status_code == 200
    assert r.data["username"] == "alice"
    assert r.data["firstName"] == "Alice"

    # 4) Change password
    r = client.post(
        reverse("change_password"),
        {"oldPassword": "StrongPassw0rd!", "newPassword": "An0therStrongPass!"},
        format="json",
    )
    assert r.status_code == 200, r.content
    assert User.objects.get(username="alice").check_password("An0therStrongPass!")


@pytest.mark.django_db
def test_register_rejects_weak_password():
    r = APIClient().post(
        reverse("register"),
        {"username": "bob", "email": "bob@example.com", "password": "faible"},
        format="json",
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Données invalides"
    assert not User.objects.filter(username="bob").exists()


@pytest.mark.django_db
def test_register_cannot_choose_role():
    r = APIClient().post(
        reverse("register"),
        {"username": "eve", "email": "eve@example.com", "password": "StrongPassw0rd!", "role": "SUPER_ADMIN"},
        format="json",
    )
    assert r.status_code == 201, r.content
    assert User.objects.get(username="eve").role == Role.MEMBER


@pytest.mark.django_db
def test_session_login_accepts_email(admin_account):
    client = APIClient()
    r = client.post(reverse("login"), {"username": "admin@uesgm.ma", "password": PASSWORD}, format="json")
    assert r.status_code == 200, r.content
    assert r.json()["data"]["role"] == Role.ADMIN

    r = client.get(reverse("admin_events_list"))
    assert r.status_code == 200


@pytest.mark.django_db
def test_invalid_credentials_are_generic(member):
    r = APIClient().post(reverse("token_obtain_pair"), {"username": "membre", "password": "mauvais"},
                         format="json")
    assert r.status_code == 401
    assert r.json() == {"error": "Identifiants invalides"}

    r = APIClient().post(reverse("token_obtain_pair"), {"username": "inconnu", "password": "mauvais"},
                         format="json")
    assert r.status_code == 401
    assert r.json() == {"error": "Identifiants invalides"}


@pytest.mark.django_db
def test_account_locked_after_repeated_failures(member, settings):
    settings.AUTH_MAX_FAILED_ATTEMPTS = 3
    client = APIClient()
    url = reverse("token_obtain_pair")

    for _ in range(2):
        r = client.post(url, {"username": "membre", "password": "mauvais"}, format="json")
        assert r.status_code == 401

    r = client.post(url, {"username": "membre", "password": "mauvais"}, format="json")
    assert r.status_code == 403
    member.refresh_from_db()
    assert member.is_locked

    # meme le bon mot de passe est refuse pendant le verrouillage
    r = client.post(url, {"username": "membre", "password": PASSWORD}, format="json")
    assert r.status_code == 403


@pytest.mark.django_db
def test_successful_login_resets_failure_counter(member):
    client = APIClient()
    url = reverse("token_obtain_pair")
    client.post(url, {"username": "membre", "password": "mauvais"}, format="json")
    member.refresh_from_db()
    assert member.failed_login_attempts == 1

    r = client.post(url, {"username": "membre", "password": PASSWORD}, format="json")
    assert r.status_code == 200
    member.refresh_from_db()
    assert member.failed_login_attempts == 0


@pytest.mark.django_db
def test_login_is_rate_limited(member):
    client = APIClient()
    url = reverse("token_obtain_pair")
    for _ in range(5):
        assert client.post(url, {"username": "x", "password": "y"}, format="json").status_code == 401

    r = client.post(url, {"username": "x", "password": "y"}, format="json")
    assert r.status_code == 429
    assert "Retry-After" in r

    cache.clear()
    assert client.post(url, {"username": "membre", "password": PASSWORD}, format="json").status_code == 200


def test_role_hierarchy():
    assert has_required_role(Role.SUPER_ADMIN, Role.ADMIN)
    assert has_required_role(Role.ADMIN, Role.ADMIN)
    assert not has_required_role(Role.MEMBER, Role.ADMIN)
    assert not has_required_role(None, Role.MEMBER)
    assert not has_required_role("GUEST", Role.MEMBER)


@pytest.mark.django_db
def test_superuser_is_super_admin():
    user = User.objects.create_superuser("root", "root@uesgm.ma", PASSWORD)
    assert user.role == Role.SUPER_ADMIN
    assert user.is_staff


@pytest.mark.django_db
def test_role_update_by_super_admin(super_admin_client, super_admin, member):
    r = super_admin_client.patch(reverse("users_role", args=[member.pk]), {"role": "ADMIN"}, format="json")
    assert r.status_code == 200, r.content
    member.refresh_from_db()
    assert member.role == Role.ADMIN
    assert member.is_staff

    # pas d'auto-modification
    r = super_admin_client.patch(reverse("users_role", args=[super_admin.pk]), {"role": "MEMBER"}, format="json")
    assert r.status_code == 400

    r = super_admin_client.patch(reverse("users_role", args=[member.pk]), {"role": "ROOT"}, format="json")
    assert r.status_code == 400


@pytest.mark.django_db
def test_user_admin_requires_super_admin(admin_client, super_admin_client, member):
    assert admin_client.get(reverse("users_list")).status_code == 403
    assert admin_client.patch(reverse("users_role", args=[member.pk]), {"role": "ADMIN"},
                              format="json").status_code == 403

    r = super_admin_client.get(reverse("users_list"), {"role": "MEMBER"})
    assert r.status_code == 200
    assert [u["username"] for u in r.json()["data"]] == ["membre"]


@pytest.mark.django_db
def test_create_admin_command():
    from django.core.management import call_command

    call_command("create_admin", username="chef", email="chef@uesgm.ma", password=PASSWORD, role="SUPER_ADMIN")
    user = User.objects.get(username="chef")
    assert user.role == Role.SUPER_ADMIN
    assert user.check_password(PASSWORD)
