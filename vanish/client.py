"""HTTP client for the Vanish temporary-email API."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, TypeVar

import requests
from requests import Response
from requests.structures import CaseInsensitiveDict

from .cancel import CANCELLED, CancelToken
from .config import DEFAULT_TIMEOUT, Settings
from .errors import APIError, CancelledError, DecodeError, MarshalError, TransportError
from .models import (
    EmailDetail,
    EmailSummary,
    GenerateEmailOptions,
    ListEmailsOptions,
    PaginatedEmailList,
    read_field,
    read_list,
    require_object,
)
from .poller import Poller
from .utils import path_segment, status_text

logger = logging.getLogger(__name__)

T = TypeVar("T")


class VanishClient:
    """Thin wrapper that turns API operations into single HTTP round-trips."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or None
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> VanishClient:
        kwargs.setdefault("api_key", settings.api_key)
        kwargs.setdefault("timeout", settings.timeout)
        return cls(settings.base_url_str, **kwargs)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> VanishClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Operations

    def get_domains(self, token: CancelToken | None = None) -> list[str]:
        """Return the domains new mailboxes can be created on."""
        payload = self._request_json("GET", "/domains", token=token)
        return self._decode(
            payload, lambda raw: read_list(require_object(raw, "domains"), "domains", str) or []
        )

    def generate_email(
        self,
        options: GenerateEmailOptions | None = None,
        token: CancelToken | None = None,
    ) -> str:
        """Create a new unique mailbox and return its address."""
        body = (options or GenerateEmailOptions()).to_dict()
        payload = self._request_json("POST", "/mailbox", body=body, token=token)
        return self._decode(
            payload, lambda raw: read_field(require_object(raw, "mailbox"), "email", str, "")
        )

    def list_emails(
        self,
        address: str,
        options: ListEmailsOptions | None = None,
        token: CancelToken | None = None,
    ) -> PaginatedEmailList:
        """Return one page of the mailbox, most recent first."""
        params = options.to_params() if options else {}
        path = f"/mailbox/{path_segment(address)}"
        payload = self._request_json("GET", path, params=params, token=token)
        return self._decode(payload, PaginatedEmailList.from_dict)

    def get_email(self, email_id: str, token: CancelToken | None = None) -> EmailDetail:
        payload = self._request_json("GET", f"/email/{email_id}", token=token)
        return self._decode(payload, EmailDetail.from_dict)

    def get_attachment(
        self,
        email_id: str,
        attachment_id: str,
        token: CancelToken | None = None,
    ) -> tuple[bytes, CaseInsensitiveDict]:
        """Download attachment bytes together with the response headers."""
        path = f"/email/{email_id}/attachments/{attachment_id}"
        return self._request_bytes("GET", path, token=token)

    def delete_email(self, email_id: str, token: CancelToken | None = None) -> None:
        payload = self._request_json("DELETE", f"/email/{email_id}", token=token)
        self._decode(payload, lambda raw: read_field(require_object(raw, "delete"), "success", bool))

    def delete_mailbox(self, address: str, token: CancelToken | None = None) -> int:
        """Remove every email of the mailbox and return how many were deleted."""
        path = f"/mailbox/{path_segment(address)}"
        payload = self._request_json("DELETE", path, token=token)
        return self._decode(
            payload, lambda raw: read_field(require_object(raw, "delete"), "deleted", int, 0)
        )

    def poll_for_emails(
        self,
        address: str,
        timeout: float,
        interval: float,
        initial_count: int = 0,
        token: CancelToken | None = None,
    ) -> EmailSummary | None:
        """Wait for a new email; None when ``timeout`` elapses first.

        See :class:`vanish.poller.Poller` for the timing rules.
        """
        return Poller(self).poll(
            address,
            timeout=timeout,
            interval=interval,
            initial_count=initial_count,
            token=token,
        )

    # Request pipeline

    def _send(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: dict[str, str] | None = None,
        token: CancelToken | None = None,
    ) -> Response:
        data = None
        if body is not None:
            try:
                data = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise MarshalError(f"vanish: marshal body: {exc}") from exc

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        timeout = self.timeout
        if token is not None:
            token.raise_if_cancelled()
            remaining = token.remaining()
            if remaining is not None:
                timeout = min(timeout, remaining)

        logger.debug("Sending %s %s", method, path)
        request = {
            "method": method,
            "url": f"{self.base_url}{path}",
            "params": params,
            "data": data,
            "headers": headers,
            "timeout": timeout,
        }
        try:
            if token is None:
                response = self.session.request(**request)
            else:
                response = self._send_cancellable(request, token)
        except requests.RequestException as exc:
            if token is not None and token.cancelled:
                raise CancelledError(token.reason) from exc
            raise TransportError(f"vanish: {method} {path}: {exc}") from exc

        if token is not None and token.cancelled:
            response.close()
            raise CancelledError(token.reason)
        logger.debug("%s %s -> %s", method, path, response.status_code)
        return response

    def _send_cancellable(self, request: dict[str, Any], token: CancelToken) -> Response:
        """Send on a worker thread and stop waiting as soon as ``token`` is done.

        An abandoned request runs on until its own timeout; whatever response
        it gets is closed unread.
        """
        done = threading.Event()
        lock = threading.Lock()
        outcome: dict[str, Any] = {}

        def run() -> None:
            response, error = None, None
            try:
                response = self.session.request(**request)
            except Exception as exc:
                error = exc
            with lock:
                if outcome.get("abandoned"):
                    if response is not None:
                        response.close()
                    return
                outcome["result"] = (response, error)
            done.set()

        unregister = token.add_callback(done.set)
        threading.Thread(target=run, name="vanish-request", daemon=True).start()
        try:
            while not done.is_set() and not token.cancelled:
                done.wait(token.remaining())
        finally:
            unregister()

        with lock:
            if "result" not in outcome:
                outcome["abandoned"] = True
                raise CancelledError(token.reason or CANCELLED)
            response, error = outcome["result"]
        if error is not None:
            raise error
        return response

    def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        with self._send(method, path, **kwargs) as response:
            self._raise_for_status(response)
            try:
                return response.json()
            except ValueError as exc:
                raise DecodeError(f"vanish: decode response: {exc}") from exc

    def _request_bytes(
        self, method: str, path: str, **kwargs: Any
    ) -> tuple[bytes, CaseInsensitiveDict]:
        with self._send(method, path, **kwargs) as response:
            self._raise_for_status(response)
            return response.content, response.headers

    @staticmethod
    def _raise_for_status(response: Response) -> None:
        status = response.status_code
        if status < 400:
            return
        try:
            payload = response.json()
        except ValueError:
            raise APIError(status_text(status), status) from None
        # A JSON null body leaves the message empty, like an object without "error".
        if payload is None:
            raise APIError("", status)
        if isinstance(payload, dict):
            message = payload.get("error")
            if message is None or isinstance(message, str):
                raise APIError(message or "", status)
        raise APIError(status_text(status), status)

    @staticmethod
    def _decode(payload: Any, build: Callable[[Any], T]) -> T:
        try:
            return build(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise DecodeError(f"vanish: decode response: {exc}") from exc
