"""Bill record store that talks to the rentbill HTTP API."""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from rentbill.schemas.bills import BillWithDetails, SaveBillRequest, SaveBillResult
from rentbill.schemas.renters import RenterData
from rentbill.services.bill_store import BillRecordStore
from rentbill.services.config import BillingConfig
from rentbill.services.errors import (
    BillReadError,
    BillStoreError,
    BillWriteError,
    RenterNotFoundError,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _error_details(response: httpx.Response) -> tuple[str, str | None]:
    """Message and code of an API error envelope; the message falls back to the status."""
    fallback = f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback, None

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or fallback, error.get("code")
    if isinstance(error, str) and error:
        return error, None
    return fallback, None


def _parse(model: type[ModelT], data: Any, error_cls: type[BillStoreError]) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise error_cls(f"Unexpected response shape for {model.__name__}") from e


class HttpBillRecordStore(BillRecordStore):
    """BillRecordStore over HTTP/JSON.

    Transport failures and non-2xx responses become BillReadError or BillWriteError
    carrying the server's error message.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_config(cls, config: BillingConfig) -> "HttpBillRecordStore":
        """Create a store with its own client for the configured API."""
        client = httpx.AsyncClient(
            base_url=config.api_base_url,
            timeout=config.http_timeout_seconds,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def read_period(self, renter_id: int, month: int, year: int) -> BillWithDetails:
        data = await self._request(
            "GET",
            "/api/bills",
            BillReadError,
            params={"renter_id": renter_id, "month": month, "year": year},
        )
        return _parse(BillWithDetails, data, BillReadError)

    async def read_all_periods(self, renter_id: int) -> list[BillWithDetails]:
        data = await self._request("GET", f"/api/renters/{renter_id}/bills", BillReadError)
        if not isinstance(data, list):
            raise BillReadError("Expected a list of bills")
        return [_parse(BillWithDetails, item, BillReadError) for item in data]

    async def save_period(self, request: SaveBillRequest) -> SaveBillResult:
        data = await self._request(
            "POST",
            "/api/bills",
            BillWriteError,
            json=request.model_dump(mode="json"),
        )
        result = _parse(SaveBillResult, data, BillWriteError)
        if not result.success:
            raise BillWriteError("Server reported an unsuccessful save")
        return result

    async def read_renter(self, renter_id: int) -> RenterData:
        """Fetch a renter record (source of the default base amount)."""
        data = await self._request("GET", f"/api/renters/{renter_id}", BillReadError)
        return _parse(RenterData, data, BillReadError)

    async def _request(
        self,
        method: str,
        url: str,
        error_cls: type[BillStoreError],
        **kwargs: Any,
    ) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise error_cls(f"Request failed: {e}") from e

        if response.is_error:
            message, code = _error_details(response)
            logger.warning("%s %s returned %d: %s", method, url, response.status_code, message)
            if error_cls is BillWriteError and code == "renter_not_found":
                renter_id = kwargs.get("json", {}).get("bill", {}).get("renter_id", 0)
                raise RenterNotFoundError(renter_id)
            raise error_cls(message)

        try:
            return response.json()
        except ValueError as e:
            raise error_cls(f"Invalid JSON from {url}") from e


__all__ = ["HttpBillRecordStore"]
