from unittest import mock

import pytest
import requests
from django.core.cache import cache

from contracts.clients import (
    SERVICE_TOKEN_CACHE_KEY,
    UpstreamAuthError,
    UpstreamError,
    WinleadPlusClient,
    fetch_service_token,
    keycloak_configured,
)


def _response(status_code=200, payload=None, text=""):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def keycloak_settings(settings):
    settings.KEYCLOAK_BASE_URL = "https://auth.example.com/"
    settings.KEYCLOAK_REALM = "winleadplus"
    settings.KEYCLOAK_CLIENT_ID = "prowin"
    settings.KEYCLOAK_CLIENT_SECRET = "secret"
    cache.delete(SERVICE_TOKEN_CACHE_KEY)
    yield settings
    cache.delete(SERVICE_TOKEN_CACHE_KEY)


def test_keycloak_configured_requires_all_three_settings(keycloak_settings):
    assert keycloak_configured() is True
    keycloak_settings.KEYCLOAK_CLIENT_SECRET = ""
    assert keycloak_configured() is False


class TestServiceToken:
    def test_client_credentials_exchange_is_cached(self, keycloak_settings):
        with mock.patch(
            "contracts.clients.requests.post",
            return_value=_response(payload={"access_token": "abc", "expires_in": 300}),
        ) as post:
            assert fetch_service_token() == "abc"
            assert fetch_service_token() == "abc"

        post.assert_called_once()
        url = post.call_args.args[0]
        assert url == "https://auth.example.com/realms/winleadplus/protocol/openid-connect/token"
        assert post.call_args.kwargs["data"]["grant_type"] == "client_credentials"

    def test_rejected_credentials(self, keycloak_settings):
        with mock.patch("contracts.clients.requests.post", return_value=_response(401)):
            with pytest.raises(UpstreamAuthError):
                fetch_service_token()

    def test_missing_access_token(self, keycloak_settings):
        with mock.patch("contracts.clients.requests.post", return_value=_response(payload={})):
            with pytest.raises(UpstreamError):
                fetch_service_token()

    def test_network_failure(self, keycloak_settings):
        with mock.patch(
            "contracts.clients.requests.post",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            with pytest.raises(UpstreamError):
                fetch_service_token()


class TestWinleadPlusClient:
    def _client(self, response):
        session = mock.Mock()
        session.headers = {}
        session.get.return_value = response
        return WinleadPlusClient("tok", base_url="https://feed.example.com/api/", timeout=5, session=session)

    def test_bearer_header_and_url(self):
        client = self._client(_response(payload=[]))

        assert client.get_prospects() == []
        assert client.session.headers["Authorization"] == "Bearer tok"
        client.session.get.assert_called_once_with(
            "https://feed.example.com/api/prospects", params=None, timeout=5
        )

    def test_paginated_payloads_are_unwrapped(self):
        client = self._client(_response(payload={"items": [{"id": 1}], "total": 1}))

        assert client.get_offers() == [{"id": 1}]

    def test_get_users_keeps_active_sales_roles(self):
        client = self._client(
            _response(
                payload=[
                    {"id": 1, "nom": " Martin ", "prenom": "Lucas", "role": "COMMERCIAL", "isActive": True},
                    {"id": 2, "nom": "Durand", "prenom": "Sophie", "role": "MANAGER", "isActive": True},
                    {"id": 3, "nom": "Admin", "prenom": "", "role": "ADMIN", "isActive": True},
                    {"id": 4, "nom": "Ancien", "prenom": "", "role": "COMMERCIAL", "isActive": False},
                ]
            )
        )

        users = client.get_users()

        assert [user["id"] for user in users] == [1, 2]
        assert users[0]["nom"] == "Martin"

    def test_server_error(self):
        client = self._client(_response(500, text="boom"))

        with pytest.raises(UpstreamError):
            client.get_prospects()

    def test_invalid_json(self):
        client = self._client(_response(payload=ValueError("no json")))

        with pytest.raises(UpstreamError):
            client.get_prospects()

    def test_expired_token(self):
        client = self._client(_response(403))

        with pytest.raises(UpstreamAuthError):
            client.get_offers()

    def test_timeout_is_wrapped(self):
        client = self._client(None)
        client.session.get.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(UpstreamError):
            client.get_prospects()
