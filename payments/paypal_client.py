"""
PayPal REST client.

Thin adapter over the three PayPal calls the relay needs: order creation,
order capture and webhook signature verification. Every failure talking to
PayPal surfaces as ProviderError.
"""

import json
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Mapping, Optional

import requests
import structlog
import tenacity

from core.settings import Settings

log = structlog.get_logger(__name__)

# Inbound webhook header -> field name expected by verify-webhook-signature
SIGNATURE_HEADERS = {
    "paypal-auth-algo": "auth_algo",
    "paypal-cert-url": "cert_url",
    "paypal-transmission-id": "transmission_id",
    "paypal-transmission-sig": "transmission_sig",
    "paypal-transmission-time": "transmission_time",
}

# Refresh this long before PayPal says the token expires
TOKEN_EXPIRY_MARGIN = timedelta(seconds=60)


class ProviderError(Exception):
    pass


class LinkNotFound(ProviderError):
    pass


class VerificationStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


@dataclass
class OrderLink:
    order_id: str
    approval_url: str
    order: dict[str, Any]


def find_approval_link(order: Mapping[str, Any]) -> str:
    """Return the href of the link whose rel is "approve"."""
    links = order.get("links")
    for link in links if isinstance(links, list) else []:
        if not isinstance(link, dict) or link.get("rel") != "approve":
            continue
        if link.get("href"):
            return link["href"]
    raise LinkNotFound(f"no approve link in PayPal order {order.get('id')}")


def signature_fields(headers: Mapping[str, str]) -> dict[str, Optional[str]]:
    """Pick the transmission headers out of an inbound request.

    Missing headers come back as None; PayPal decides whether that is fatal.
    """
    return {field: headers.get(header) for header, field in SIGNATURE_HEADERS.items()}


def is_transient(exc: BaseException) -> bool:
    """Connection drops, timeouts and 5xx answers are worth another try."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    response = getattr(exc, "response", None)
    return (
        isinstance(exc, requests.HTTPError)
        and response is not None
        and response.status_code >= 500
    )


class PayPalClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base: str,
        timeout: Optional[float] = None,
    ):
        self.base = base.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._token_cache: tuple[str, datetime] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "PayPalClient":
        return cls(
            client_id=settings.PAYPAL_CLIENT_ID,
            client_secret=settings.PAYPAL_CLIENT_SECRET,
            base=settings.PAYPAL_BASE,
            timeout=settings.PAYPAL_HTTP_TIMEOUT,
        )

    @tenacity.retry(
        stop=tenacity.stop_after_attempt(3),
        wait=tenacity.wait_exponential(multiplier=0.5, max=4),
        retry=tenacity.retry_if_exception(is_transient),
        reraise=True,
    )
    def _fetch_token(self) -> tuple[str, int]:
        r = requests.post(
            f"{self.base}/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
            timeout=self.timeout,
        )
        r.raise_for_status()
        body = r.json()
        return body["access_token"], int(body.get("expires_in", 300))

    def _token(self) -> str:
        if self._token_cache and self._token_cache[1] > datetime.now(UTC):
            return self._token_cache[0]

        try:
            token, expires_in = self._fetch_token()
        except (requests.RequestException, KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"PayPal authentication failed: {e}") from e

        expires_at = datetime.now(UTC) + timedelta(seconds=expires_in)
        self._token_cache = (token, expires_at - TOKEN_EXPIRY_MARGIN)
        return token

    def _post(
        self,
        path: str,
        json_body: Any = None,
        data: Optional[bytes] = None,
        extra_headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._token()}",
            "Content-Type": "application/json",
        }
        if extra_headers:
            headers.update(extra_headers)

        try:
            r = requests.post(
                f"{self.base}{path}",
                json=json_body,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(f"PayPal request to {path} failed: {e}") from e

        if r.status_code not in (200, 201):
            log.error(
                "paypal.http_error",
                path=path,
                status_code=r.status_code,
                body=r.text[:500],
            )
            raise ProviderError(f"PayPal returned {r.status_code} for {path}")

        try:
            body = r.json()
        except ValueError as e:
            raise ProviderError(f"PayPal returned a non-JSON body for {path}") from e
        if not isinstance(body, dict):
            raise ProviderError(f"PayPal returned a non-object body for {path}")
        return body

    def create_order(
        self, amount: str, currency: str, return_url: str, cancel_url: str
    ) -> OrderLink:
        """Create a CAPTURE-intent order and return its approval link."""
        order = self._post(
            "/v2/checkout/orders",
            json_body={
                "intent": "CAPTURE",
                "purchase_units": [
                    {"amount": {"currency_code": currency, "value": amount}}
                ],
                "application_context": {
                    "return_url": return_url,
                    "cancel_url": cancel_url,
                },
            },
            extra_headers={"Prefer": "return=representation"},
        )
        return OrderLink(
            order_id=order.get("id"),
            approval_url=find_approval_link(order),
            order=order,
        )

    def capture_order(self, order_id: str) -> dict[str, Any]:
        return self._post(f"/v2/checkout/orders/{order_id}/capture", json_body={})

    def verify_webhook(
        self, headers: Mapping[str, str], raw_body: bytes, webhook_id: str
    ) -> VerificationStatus:
        """Ask PayPal whether a webhook delivery carries a valid signature.

        The event is forwarded byte-for-byte; re-serialising it would change
        the payload PayPal computed the signature over.
        """
        envelope = json.dumps({**signature_fields(headers), "webhook_id": webhook_id})
        payload = envelope[:-1].encode() + b', "webhook_event": ' + raw_body + b"}"

        result = self._post("/v1/notifications/verify-webhook-signature", data=payload)
        status = result.get("verification_status")
        if status == VerificationStatus.SUCCESS.value:
            return VerificationStatus.SUCCESS
        return VerificationStatus.FAILURE
