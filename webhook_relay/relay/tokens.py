"""Signed webhook URL tokens.

A token is the unpadded base64url HMAC-SHA256 of the endpoint id keyed
by the shared secret. Tokens carry no expiry; rotating the secret
invalidates every issued URL.
"""

import base64
import hashlib
import hmac


def issue(endpoint_id: str, secret: str) -> str:
    """Derive the token for an endpoint.

    Args:
        endpoint_id: Endpoint name as it appears in the URL path
        secret: Shared secret (the configured API token)

    Returns:
        Unpadded base64url token string
    """
    digest = hmac.new(secret.encode(), endpoint_id.encode(), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def verify(endpoint_id: str, token: str, secret: str) -> bool:
    """Check a presented token against the expected one in constant time."""
    expected = issue(endpoint_id, secret)
    return hmac.compare_digest(expected.encode(), token.encode())


def build_url(base_url: str, endpoint_id: str, secret: str) -> str:
    """Full signed receive URL for an endpoint under base_url."""
    return f"{base_url.rstrip('/')}/w/{endpoint_id}/{issue(endpoint_id, secret)}"
