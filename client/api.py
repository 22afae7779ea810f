"""
Thin async wrapper over the public HTTP endpoints.

Translates HTTP outcomes back into the domain errors so the wizard and the
poller never deal with status codes.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from config import settings
from errors import NotFound, StoreUnavailable, ValidationError
from schemas.application import ApplicationReceipt, ApplicationStatusView, StatusQuery

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)
    return str(body)


class LoanApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ):
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(base_url=base_url or settings.api_base_url, timeout=timeout_s)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "LoanApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        try:
            return await self.http.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.warning("POST %s failed: %s", path, e)
            raise StoreUnavailable(str(e)) from e

    async def create_application(self, *, full_name: str, cpf: str, email: str, loan_type: str) -> ApplicationReceipt:
        response = await self._post(
            "/api/applications",
            {"full_name": full_name, "cpf": cpf, "email": email, "loan_type": loan_type},
        )
        if response.status_code == 201:
            return ApplicationReceipt.model_validate(response.json())
        if response.status_code in (400, 422):
            raise ValidationError(_error_message(response))
        raise StoreUnavailable(_error_message(response))

    async def check_status(self, application_id: str, client_token: str) -> ApplicationStatusView:
        query = StatusQuery(application_id=application_id, client_token=client_token)
        response = await self._post("/api/check-application-status", query.model_dump())
        if response.status_code == 200:
            return ApplicationStatusView.model_validate(response.json()["data"])
        if response.status_code == 400:
            raise ValidationError(_error_message(response))
        if response.status_code == 404:
            raise NotFound(_error_message(response))
        raise StoreUnavailable(_error_message(response))
