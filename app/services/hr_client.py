# app/services/hr_client.py
import httpx
from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import (
    AccountDisabled,
    ExternalServiceUnavailable,
    FederationError,
    FederationNotFound,
    FederationUnauthorized,
)
from app.schemas.employee import ExternalEmployeeRecord, HRLoginResponse


class HRClient:
    """
    Client for the external HR / check-in service.

    ``authenticate`` either returns the matched employee or raises:
    - AccountDisabled (HTTP 403): fatal, no local fallback allowed.
    - FederationError subclasses for everything else (401, 404, 5xx,
      transport errors, timeouts, malformed payloads): callers fall back
      to local credentials.
    """

    def __init__(
        self,
        login_url: str | None = None,
        roster_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.login_url = login_url or settings.HR_LOGIN_URL
        self.roster_url = roster_url or settings.HR_ROSTER_URL
        self.timeout = timeout if timeout is not None else settings.HR_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    # ------------------------------------------------------------------
    # LOGIN
    # ------------------------------------------------------------------
    async def authenticate(self, identifier: str, secret: str) -> ExternalEmployeeRecord:
        payload = {"employeeIdOrEmail": identifier, "secret": secret}

        async with self._client() as client:
            try:
                response = await client.post(self.login_url, json=payload)
            except httpx.TimeoutException as e:
                raise ExternalServiceUnavailable(f"HR login timed out after {self.timeout}s") from e
            except httpx.HTTPError as e:
                raise ExternalServiceUnavailable(f"HR login transport error: {e}") from e

        if response.status_code == 403:
            raise AccountDisabled(_error_message(response) or AccountDisabled.default_message)
        if response.status_code == 401:
            raise FederationUnauthorized()
        if response.status_code == 404:
            raise FederationNotFound()
        if response.status_code >= 500:
            raise ExternalServiceUnavailable(f"HR service answered {response.status_code}")
        if response.status_code != 200:
            raise FederationError(f"Unexpected HR status {response.status_code}")

        try:
            body = HRLoginResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ExternalServiceUnavailable("HR service returned a malformed login payload") from e

        if not body.success or body.employee is None:
            raise FederationNotFound(body.error or "HR login did not match an employee")

        if body.employee.active is False:
            # Deactivated employment is not a disabled account; use local rules
            raise FederationNotFound("HR employee is not active")

        return body.employee

    # ------------------------------------------------------------------
    # ROSTER (bulk sync)
    # ------------------------------------------------------------------
    async def fetch_roster(self) -> list[dict]:
        """Raw roster rows; each row is validated by the sync so one bad row cannot sink the batch."""
        async with self._client() as client:
            try:
                response = await client.get(self.roster_url)
                response.raise_for_status()
            except httpx.TimeoutException as e:
                raise ExternalServiceUnavailable(f"HR roster timed out after {self.timeout}s") from e
            except httpx.HTTPError as e:
                raise ExternalServiceUnavailable(f"HR roster request failed: {e}") from e

        try:
            rows = response.json()
        except ValueError as e:
            raise ExternalServiceUnavailable("HR roster is not valid JSON") from e

        if not isinstance(rows, list):
            raise ExternalServiceUnavailable("HR roster is not a JSON array")

        logger.info(f"Fetched {len(rows)} roster entries from HR")
        return rows


def _error_message(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        return data.get("error")
    return None
