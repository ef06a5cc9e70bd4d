"""RPC-style HTTP client for the ROS API.

Every call is a signed, form-encoded ``POST`` of a named action against
the configured endpoint and API version.  Successful calls return the
parsed JSON body; failures raise ``ApiError`` with the server's error
code so callers can classify them (not found, throttled, ...).

Signing follows the RPC signature scheme, version 1.0:

    StringToSign = "POST&%2F&" + pct(canonicalized_query)
    Signature    = base64(HMAC-SHA1(secret + "&", StringToSign))

where ``canonicalized_query`` is the ``key=value`` list of every
parameter sorted by key, each side percent-encoded.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import quote

import httpx

from ros_state.core.exceptions import ApiError
from ros_state.utils.wire import format_value

if TYPE_CHECKING:
    from ros_state.core.config import RosConfig

logger = logging.getLogger(__name__)

_SIGNATURE_METHOD = "HMAC-SHA1"
_SIGNATURE_VERSION = "1.0"


class RpcCaller(Protocol):
    """Anything that can issue one named RPC action and return its body."""

    def call(self, action: str, request: Mapping[str, Any]) -> dict[str, Any]:
        """Issue *action* with *request* parameters.

        Raises:
            ApiError: On any remote or network failure.
        """
        ...


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------


def percent_encode(value: str) -> str:
    """RFC 3986 percent-encoding (only ``A-Za-z0-9-_.~`` left as-is)."""
    return quote(value, safe="~")


def sign_parameters(params: Mapping[str, str], secret: str, method: str = "POST") -> str:
    """Return the base64 HMAC-SHA1 signature of *params*."""
    canonical = "&".join(
        f"{percent_encode(k)}={percent_encode(v)}" for k, v in sorted(params.items())
    )
    string_to_sign = f"{method}&{percent_encode('/')}&{percent_encode(canonical)}"
    digest = hmac.new(
        f"{secret}&".encode(),
        string_to_sign.encode(),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode()


def _utc_timestamp() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def _nonce() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class RpcClient:
    """Synchronous ROS RPC client backed by ``httpx``.

    The client is read-only after construction and may be shared by
    independent poll loops.

    Example usage::

        with RpcClient(RosConfig.from_env()) as client:
            body = client.call("GetStack", {"RegionId": "cn-hangzhou", "StackId": sid})
    """

    def __init__(
        self,
        config: RosConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        timestamp: Callable[[], str] = _utc_timestamp,
        nonce: Callable[[], str] = _nonce,
    ) -> None:
        self._config = config
        self._timestamp = timestamp
        self._nonce = nonce
        self._http = httpx.Client(timeout=config.http_timeout_s, transport=transport)

    @property
    def config(self) -> RosConfig:
        """Return the client configuration (read-only)."""
        return self._config

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def __enter__(self) -> RpcClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def build_parameters(self, action: str, request: Mapping[str, Any]) -> dict[str, str]:
        """Return the full signed form for *action*."""
        params = {k: format_value(v) for k, v in request.items() if v is not None}
        params.update(
            {
                "Action": action,
                "Version": self._config.api_version,
                "Format": "JSON",
                "AccessKeyId": self._config.access_key_id,
                "SignatureMethod": _SIGNATURE_METHOD,
                "SignatureVersion": _SIGNATURE_VERSION,
                "SignatureNonce": self._nonce(),
                "Timestamp": self._timestamp(),
            }
        )
        params["Signature"] = sign_parameters(params, self._config.access_key_secret)
        return params

    def call(self, action: str, request: Mapping[str, Any]) -> dict[str, Any]:
        """Issue *action* and return the parsed JSON body.

        Raises:
            ApiError: On an error response, an unparseable or undecodable
                body (``InvalidResponse``), or a network failure
                (``RequestTimeout`` / ``NetworkError``).
        """
        params = self.build_parameters(action, request)
        try:
            response = self._http.post(self._config.base_url, data=params)
        except httpx.TimeoutException as exc:
            raise ApiError("RequestTimeout", f"{action} timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise ApiError("NetworkError", f"{action} transport failure: {exc}") from exc
        except httpx.HTTPError as exc:
            # Decoding failures and redirect loops are not transport errors.
            raise ApiError("InvalidResponse", f"{action} request failed: {exc}") from exc

        logger.debug("RPC response | action=%s | status=%d", action, response.status_code)
        try:
            body = response.json()
        except ValueError as exc:
            msg = f"{action} returned a non-JSON body ({len(response.content)} bytes)"
            raise ApiError("InvalidResponse", msg, http_status=response.status_code) from exc

        if response.is_error or not isinstance(body, dict):
            error_body = body if isinstance(body, dict) else {}
            raise ApiError(
                str(error_body.get("Code") or f"HTTP{response.status_code}"),
                str(error_body.get("Message", "")),
                http_status=response.status_code,
                request_id=str(error_body.get("RequestId", "")),
            )

        return body
