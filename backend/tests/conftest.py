"""
Shared fixtures for the test suite.
"""

import pytest
from rest_framework.test import APIClient

from apps.authentication.models import User
from apps.authentication.services import auth_service


@pytest.fixture
def make_user(db):
    """Factory for persisted users; the password is always ``password123``"""
    counter = {'n': 0}

    def _make_user(name=None, email=None):
        counter['n'] += 1
        user = User(
            name=name or f'User {counter["n"]}',
            email=email or f'user{counter["n"]}@example.com',
        )
        user.set_password('password123')
        user.save()
        return user

    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user('Alice', 'alice@example.com')


@pytest.fixture
def bob(make_user):
    return make_user('Bob', 'bob@example.com')


@pytest.fixture
def carol(make_user):
    return make_user('Carol', 'carol@example.com')


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client():
    """Build an APIClient carrying a bearer token for the given user"""

    def _auth_client(user):
        tokens = auth_service.generate_tokens(user.id, user.email)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens["accessToken"]}')
        return client

    return _auth_client


@pytest.fixture
def sent_events(monkeypatch):
    """
    Record websocket events instead of handing them to the channel layer

    Yields a list of (user_id, event_type, data) tuples.
    """
    from apps.websocket.services import websocket_service

    events = []

    def _record(user_id, event_type, data):
        events.append((str(user_id), event_type, data))
        return True

    monkeypatch.setattr(websocket_service, '_send', _record)
    return events
