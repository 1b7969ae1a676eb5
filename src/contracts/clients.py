"""
HTTP access to the contract feed and to the identity provider.

Both endpoints are read with ``requests``. Any transport problem, non-2xx
answer or undecodable body is turned into ``UpstreamError`` so that callers
only have one exception family to catch at the stage boundary.
"""
import logging

import requests
from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

SERVICE_TOKEN_CACHE_KEY = "contracts:service_token"
# Drop the cached token a little before the identity provider does.
TOKEN_EXPIRY_MARGIN = 30


class UpstreamError(Exception):
    """The contract feed or the identity provider could not be read."""


class UpstreamAuthError(UpstreamError):
    """The upstream rejected our credentials (HTTP 401 / 403)."""


def _raise_for_response(response, context):
    if response.status_code in (401, 403):
        raise UpstreamAuthError(f"{context}: token invalide ou expire (HTTP {response.status_code})")
    if not response.ok:
        raise UpstreamError(f"{context}: HTTP {response.status_code} {response.text[:200]}")


def _json(response, context):
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"{context}: reponse JSON invalide") from exc


def keycloak_configured() -> bool:
    return bool(
        settings.KEYCLOAK_BASE_URL
        and settings.KEYCLOAK_CLIENT_ID
        and settings.KEYCLOAK_CLIENT_SECRET
    )


def fetch_service_token(use_cache=True) -> str:
    """Client-credentials exchange against the identity provider.

    The access token is cached until shortly before it expires.
    """
    if use_cache:
        token = cache.get(SERVICE_TOKEN_CACHE_KEY)
        if token:
            return token

    url = (
        f"{settings.KEYCLOAK_BASE_URL.rstrip('/')}/realms/{settings.KEYCLOAK_REALM}"
        "/protocol/openid-connect/token"
    )
    context = "Keycloak token"
    try:
        response = requests.post(
            url,
            data={
                "client_id": settings.KEYCLOAK_CLIENT_ID,
                "client_secret": settings.KEYCLOAK_CLIENT_SECRET,
                "grant_type": "client_credentials",
            },
            timeout=settings.WINLEADPLUS_TIMEOUT,
        )
    except requests.exceptions.RequestException as exc:
        raise UpstreamError(f"{context}: {exc}") from exc

    _raise_for_response(response, context)
    payload = _json(response, context)
    token = payload.get("access_token")
    if not token:
        raise UpstreamError(f"{context}: access_token absent de la reponse")

    expires_in = int(payload.get("expires_in") or 0) - TOKEN_EXPIRY_MARGIN
    if use_cache and expires_in > 0:
        cache.set(SERVICE_TOKEN_CACHE_KEY, token, expires_in)
    return token


class WinleadPlusClient:
    """Read-only client for the sales-tracking API."""

    def __init__(self, token, base_url=None, timeout=None, session=None):
        self.base_url = (base_url or settings.WINLEADPLUS_API_BASE).rstrip("/")
        self.timeout = timeout or settings.WINLEADPLUS_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _get(self, path, params=None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        context = f"GET {path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            logger.error("Contract feed unreachable (%s): %s", context, exc)
            raise UpstreamError(f"{context}: {exc}") from exc
        _raise_for_response(response, context)
        return _json(response, context)

    @staticmethod
    def _items(payload):
        # Some endpoints answer a bare list, others a paginated {"items": [...]}.
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict):
            return payload.get("items") or []
        return []

    def get_users(self):
        """Active COMMERCIAL and MANAGER users of the feed."""
        items = self._items(self._get("users", params={"page": 1, "limit": 1000}))
        return [
            {
                "id": user.get("id"),
                "nom": (user.get("nom") or "").strip(),
                "prenom": (user.get("prenom") or "").strip(),
                "email": user.get("email"),
                "role": user.get("role"),
            }
            for user in items
            if user.get("role") in ("COMMERCIAL", "MANAGER") and user.get("isActive") is True
        ]

    def get_offers(self):
        return self._items(self._get("offres"))

    def get_prospects(self):
        """Prospects with their nested subscriptions and contracts."""
        return self._items(self._get("prospects"))
