"""HTTP store — JSON client for the calculations REST API.

Every endpoint answers ``{"data": ...}``.  Transport failures, non-2xx
statuses and malformed bodies are translated into
:class:`~construcalc.errors.AccessError`.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from construcalc.access.base import CalculationStore
from construcalc.config import DEFAULT_API_TIMEOUT, DEFAULT_API_URL, ConfigManager, Settings
from construcalc.errors import AccessError
from construcalc.models.result import CalculationResult
from construcalc.models.template import Template

logger = logging.getLogger(__name__)


class HttpCalculationStore(CalculationStore):
    """Store backed by the calculations API.

    Parameters
    ----------
    base_url:
        API root, e.g. ``http://localhost:4000/api``.
    token:
        Optional bearer token sent as ``Authorization``.
    cookie:
        Optional session cookie, for cookie-authenticated deployments.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_API_URL,
        token: str | None = None,
        cookie: str | None = None,
        timeout: float = DEFAULT_API_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.cookie = cookie
        self.timeout = timeout

    @classmethod
    def from_config(
        cls,
        settings: Settings | None = None,
        *,
        project_path: str = ".",
    ) -> HttpCalculationStore:
        """Build a store from :class:`Settings` (loaded from *project_path* if omitted)."""
        if settings is None:
            settings = ConfigManager().load_settings(project_path)
        return cls(
            base_url=settings.api_url,
            token=settings.api_token,
            timeout=settings.api_timeout,
        )

    # -- transport ------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.cookie:
            headers["Cookie"] = self.cookie
        return headers

    def _url(self, path: str, query: dict[str, Any] | None = None) -> str:
        url = f"{self.base_url}{path}"
        if query:
            params = {k: v for k, v in query.items() if v is not None and v != "" and v != []}
            if params:
                url = f"{url}?{urllib.parse.urlencode(params, doseq=True)}"
        return url

    def _request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Perform one JSON request and return the unwrapped ``data``."""
        url = self._url(path, query)
        payload = None
        if body is not None:
            payload = json.dumps(
                {k: v for k, v in body.items() if v is not None}
            ).encode("utf-8")

        req = urllib.request.Request(url, data=payload, headers=self._headers(), method=method)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            logger.debug("%s %s failed with status %s", method, url, exc.code)
            raise AccessError(
                f"{method} {path} returned HTTP {exc.code}", status=exc.code, url=url
            ) from exc
        except (urllib.error.URLError, OSError, TimeoutError) as exc:
            logger.debug("%s %s unreachable: %s", method, url, exc)
            raise AccessError(f"{method} {path} failed: {exc}", url=url) from exc

        try:
            document = json.loads(raw) if raw else {}
        except json.JSONDecodeError as exc:
            raise AccessError(f"{method} {path} returned invalid JSON", url=url) from exc

        if not isinstance(document, dict) or "data" not in document:
            raise AccessError(f"{method} {path} response has no 'data' field", url=url)
        return document["data"]

    def _parse(self, model: type[BaseModel], data: Any, path: str) -> Any:
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            raise AccessError(
                f"Malformed {model.__name__} payload from {path}", url=self._url(path)
            ) from exc

    def _parse_list(self, model: type[BaseModel], data: Any, path: str) -> list[Any]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise AccessError(f"Expected a list from {path}", url=self._url(path))
        return [self._parse(model, item, path) for item in data]

    # -- CalculationStore -----------------------------------------------------

    def list_templates(
        self,
        *,
        types: list[str] | str | None = None,
        target_professions: list[str] | str | None = None,
        search_term: str | None = None,
    ) -> list[Template]:
        path = "/calculations/templates"
        data = self._request(
            "GET",
            path,
            query={
                "types": types,
                "targetProfessions": target_professions,
                "searchTerm": search_term,
            },
        )
        templates = data.get("templates", []) if isinstance(data, dict) else data
        return self._parse_list(Template, templates, path)

    def get_template(self, template_id: str) -> Template | None:
        path = f"/calculations/templates/{urllib.parse.quote(template_id, safe='')}"
        try:
            data = self._request("GET", path)
        except AccessError as exc:
            if exc.status == 404:
                return None
            raise
        if data is None:
            return None
        return self._parse(Template, data, path)

    def execute(
        self,
        template_id: str,
        parameters: dict[str, Any],
        *,
        project_id: str | None = None,
    ) -> CalculationResult:
        path = "/calculations/execute"
        data = self._request(
            "POST",
            path,
            body={"templateId": template_id, "parameters": parameters, "projectId": project_id},
        )
        return self._parse(CalculationResult, data, path)

    def save_result(
        self,
        result_id: str,
        name: str,
        *,
        notes: str | None = None,
        used_in_project: bool | None = None,
        project_id: str | None = None,
    ) -> CalculationResult:
        path = "/calculations/save-result"
        data = self._request(
            "POST",
            path,
            body={
                "id": result_id,
                "name": name,
                "notes": notes,
                "usedInProject": used_in_project,
                "projectId": project_id,
            },
        )
        return self._parse(CalculationResult, data, path)

    def list_saved(self) -> list[CalculationResult]:
        path = "/calculations/saved"
        return self._parse_list(CalculationResult, self._request("GET", path), path)

    def recommendations(
        self,
        *,
        template_id: str | None = None,
        project_id: str | None = None,
        limit: int | None = None,
    ) -> list[Template]:
        path = "/calculations/recommendations"
        data = self._request(
            "GET",
            path,
            query={"templateId": template_id, "projectId": project_id, "limit": limit},
        )
        return self._parse_list(Template, data, path)

    def toggle_favorite(self, template_id: str) -> bool:
        path = f"/calculations/templates/{urllib.parse.quote(template_id, safe='')}/favorite"
        self._request("POST", path, body={})
        return True
