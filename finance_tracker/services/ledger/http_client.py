"""
HTTP Ledger Client

Binds LedgerClientInterface to the transactions REST API:

    GET    /api/transactions        -> {success, count, data: [...]}
    POST   /api/transactions        -> {success, data: {...}}
    PUT    /api/transactions/{id}   -> {success, data: {...}}
    DELETE /api/transactions/{id}   -> {success, data: {id}}

Failures expose {success: false, message} and a non-2xx status.

TRADEOFFS:
- A fresh httpx.AsyncClient per call. Slightly more connection setup,
  but the client is never bound to a dead event loop (Streamlit runs
  each action on a new loop).
- Retry is off by default (LEDGER_API_LIST_RETRY_ATTEMPTS=1). When a
  deployment opts in, only the full ledger read is retried. Create/update/delete
  are sent exactly once - retrying a create that timed out could duplicate it.
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.config import LedgerApiSettings, get_settings
from finance_tracker.models.transaction import (
    DeleteConfirmation,
    TransactionDraft,
    TransactionRecord,
)
from finance_tracker.services.ledger.interface import (
    LedgerClientInterface,
    NotFoundError,
    RemoteLedgerError,
)


API_PATH = "/api/transactions"

# Shown when neither the server nor the transport gave us anything better
LOAD_FAILED = "Failed to load transactions"
CREATE_FAILED = "Failed to create transaction"
UPDATE_FAILED = "Failed to update transaction"
DELETE_FAILED = "Failed to delete transaction"


class HttpLedgerClient(LedgerClientInterface):
    """
    REST implementation of the remote ledger.

    Error messages prefer the server's own `message` field, then the
    transport error text, then a generic per-operation message.
    """

    def __init__(
        self,
        settings: Optional[LedgerApiSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_wait: Any = None,
    ):
        """
        Initialize the client.

        Args:
            settings: API settings. Defaults to the environment configuration.
            transport: Custom httpx transport (tests pass httpx.MockTransport).
            retry_wait: tenacity wait strategy for the ledger read.
        """
        self._settings = settings or get_settings().ledger_api
        self._transport = transport
        self._retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=4)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
        )

    async def _send(
        self,
        method: str,
        path: str,
        payload: Optional[dict] = None,
    ) -> httpx.Response:
        async with self._client() as client:
            return await client.request(method, path, json=payload)

    async def _send_once(
        self,
        method: str,
        path: str,
        fallback: str,
        payload: Optional[dict] = None,
    ) -> Any:
        """Send a mutation exactly once and unwrap its `data` field."""
        try:
            response = await self._send(method, path, payload)
        except httpx.HTTPError as e:
            raise RemoteLedgerError(_transport_message(e, fallback)) from e
        return _unwrap(response, fallback)

    async def list_all(self) -> list[TransactionRecord]:
        """Fetch the full ledger. Transport errors are retried only when configured."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.list_retry_attempts),
                wait=self._retry_wait,
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await self._send("GET", API_PATH)
        except httpx.HTTPError as e:
            raise RemoteLedgerError(_transport_message(e, LOAD_FAILED)) from e

        data = _unwrap(response, LOAD_FAILED)
        if not isinstance(data, list):
            raise RemoteLedgerError(f"{LOAD_FAILED}: malformed response")
        return [_parse_record(item, LOAD_FAILED) for item in data]

    async def create(self, draft: TransactionDraft) -> TransactionRecord:
        data = await self._send_once("POST", API_PATH, CREATE_FAILED, draft.to_payload())
        return _parse_record(data, CREATE_FAILED)

    async def update(self, transaction_id: str, draft: TransactionDraft) -> TransactionRecord:
        data = await self._send_once(
            "PUT",
            _item_path(transaction_id),
            UPDATE_FAILED,
            draft.to_payload(),
        )
        return _parse_record(data, UPDATE_FAILED)

    async def delete(self, transaction_id: str) -> DeleteConfirmation:
        data = await self._send_once("DELETE", _item_path(transaction_id), DELETE_FAILED)
        try:
            return DeleteConfirmation.model_validate(data)
        except ValidationError as e:
            raise RemoteLedgerError(f"{DELETE_FAILED}: malformed response") from e


def _item_path(transaction_id: str) -> str:
    return f"{API_PATH}/{quote(transaction_id, safe='')}"


def _transport_message(error: httpx.HTTPError, fallback: str) -> str:
    return str(error) or fallback


def _unwrap(response: httpx.Response, fallback: str) -> Any:
    """
    Return the `data` field of an API envelope.

    Raises:
        NotFoundError: On HTTP 404
        RemoteLedgerError: On any other error status or a malformed envelope
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if response.is_error:
        message = body.get("message") if isinstance(body, dict) else None
        if not message:
            message = f"Request failed with status code {response.status_code}"
        error_cls = NotFoundError if response.status_code == 404 else RemoteLedgerError
        raise error_cls(message, status_code=response.status_code)

    if not isinstance(body, dict) or "data" not in body:
        raise RemoteLedgerError(f"{fallback}: malformed response", status_code=response.status_code)
    if body.get("success") is False:
        raise RemoteLedgerError(body.get("message") or fallback, status_code=response.status_code)
    return body["data"]


def _parse_record(data: Any, fallback: str) -> TransactionRecord:
    try:
        return TransactionRecord.model_validate(data)
    except ValidationError as e:
        raise RemoteLedgerError(
            f"{fallback}: malformed transaction ({e.error_count()} invalid field(s))"
        ) from e
