"""Conference registration API client.

A thin wrapper around the registration REST API for bots and admin
tools.  Every method returns a tuple ``(data, error)``: on success
``data`` holds the decoded JSON response and ``error`` is ``None``; on
failure ``data`` is ``None`` (or an empty container) and ``error`` is a
dictionary with keys ``status_code`` and ``message``.

The client supports optional authentication via an API key which will
be sent in the ``Authorization`` header, for deployments where the
gateway in front of the API expects one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class ConferenceRegistrationClient:
    """Client for the ``/api/v1/registrations`` endpoints."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the service, e.g. ``https://example.com``.
            api_key: Optional API key sent as ``Bearer <api_key>``.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for each response.
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request against ``/api/v1/registrations``.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PATCH``, ``DELETE``, etc.).
            path: Path relative to the registrations resource (e.g. ``/stats/overview``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        """
        url = f"{self.base_url}/api/v1/registrations{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Registrations
    # ------------------------------------------------------------------
    def submit_registration(self, form: Dict[str, Any]) -> Result:
        """Submit the registration form (camelCase keys, e.g. ``firstName``)."""
        data, error = self._request("POST", "/", json_body=form)
        if error:
            return None, error
        return data.get("registration"), None

    def list_registrations(
        self,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """Return ``(registrations, error)`` for one page of results."""
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        data, error = self._request("GET", "/", params=params)
        if error:
            return [], error
        return data.get("registrations", []), None

    def get_registration(self, registration_id: int) -> Result:
        data, error = self._request("GET", f"/{registration_id}")
        if error:
            return None, error
        return data.get("registration"), None

    def update_status(self, registration_id: int, status: str) -> Result:
        data, error = self._request(
            "PATCH", f"/{registration_id}/status", json_body={"status": status}
        )
        if error:
            return None, error
        return data.get("registration"), None

    def bulk_update_status(self, ids: Iterable[int], status: str) -> Tuple[int, Optional[Dict[str, Any]]]:
        """Return ``(updated_count, error)``."""
        data, error = self._request(
            "PATCH", "/bulk/status", json_body={"ids": list(ids), "status": status}
        )
        if error:
            return 0, error
        return data.get("updatedCount", 0), None

    def update_registration(self, registration_id: int, fields: Dict[str, Any]) -> Result:
        data, error = self._request("PUT", f"/{registration_id}", json_body=fields)
        if error:
            return None, error
        return data.get("registration"), None

    def delete_registration(self, registration_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        _, error = self._request("DELETE", f"/{registration_id}")
        return error is None, error

    def statistics(self) -> Result:
        return self._request("GET", "/stats/overview")

    # ------------------------------------------------------------------
    # Enrollments
    # ------------------------------------------------------------------
    def enroll_session(self, session_id: int, registration_id: int) -> Result:
        return self._request(
            "POST", f"/sessions/{session_id}", json_body={"registration_id": registration_id}
        )

    def unenroll_session(self, session_id: int, registration_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        _, error = self._request("DELETE", f"/sessions/{session_id}/{registration_id}")
        return error is None, error

    def enroll_activity(self, activity_id: int, registration_id: int) -> Result:
        return self._request(
            "POST", f"/activities/{activity_id}", json_body={"registration_id": registration_id}
        )

    def unenroll_activity(self, activity_id: int, registration_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        _, error = self._request("DELETE", f"/activities/{activity_id}/{registration_id}")
        return error is None, error

    def registrant_schedule(self, registration_id: int) -> Result:
        """Return ``({"sessions": [...], "activities": [...]}, error)``."""
        return self._request("GET", f"/user/{registration_id}")
