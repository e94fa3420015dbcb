import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from common.realtime import broker
from users.models import Role

PASSWORD = "Sup3r-Secret-Pass!"


@pytest.fixture(autouse=True)
def _isolation():
    # compteurs de limitation, pages en cache et abonnes SSE ne fuient pas d'un test a l'autre
    cache.clear()
    broker.reset()
    yield
    cache.clear()
    broker.reset()


def make_user(username: str, role: str = Role.MEMBER, **extra):
    User = get_user_model()
    user = User(username=username, email=extra.pop("email", f"{username}@uesgm.ma"), role=role, **extra)
    user.set_password(PASSWORD)
    user.save()
    return user


@pytest.fixture
def member(db):
    return make_user("membre", Role.MEMBER)


@pytest.fixture
def admin_account(db):
    return make_user("admin", Role.ADMIN)


@pytest.fixture
def super_admin(db):
    return make_user("superadmin", Role.SUPER_ADMIN)


@pytest.fixture
def api_client():
    return APIClient()


def _client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def member_client(member):
    return _client_for(member)


@pytest.fixture
def admin_client(admin_account):
    return _client_for(admin_account)


@pytest.fixture
def super_admin_client(super_admin):
    return _client_for(super_admin)
