"""HTTP client for the system management service."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import Any, Iterable, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from .constants import COMMA_SEPARATOR
from .errors import EdgeXError, ErrorKind

API_BASE = "/api/v3"
API_HEALTH_ROUTE = API_BASE + "/system/health"
API_MULTI_CONFIG_ROUTE = API_BASE + "/system/config"
API_OPERATION_ROUTE = API_BASE + "/system/operation"
SERVICES = "services"

DEFAULT_TIMEOUT = 30.0

_STATUS_KINDS = {
    400: ErrorKind.CONTRACT_INVALID,
    404: ErrorKind.ENTITY_DOES_NOT_EXIST,
    409: ErrorKind.STATUS_CONFLICT,
    500: ErrorKind.SERVER_ERROR,
}


class AuthenticationInjector(Protocol):
    """Adds authentication data, such as an Authorization header, to a request."""

    def add_authentication_data(self, request: Request) -> None:
        ...


def _to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value


class SystemManagementClient:
    """Queries health and configuration of services and issues operations on them."""

    def __init__(self, base_url: str, auth_injector: AuthenticationInjector | None):
        self.base_url = base_url.rstrip("/")
        self.auth_injector = auth_injector

    def _send(self, method: str, path: str, params: dict[str, str] | None = None,
              body: Any = None) -> Any:
        url = self.base_url + path
        if params:
            url += "?" + urlencode(params)
        data = None
        headers = {}
        if body is not None:
            data = json.dumps(_to_jsonable(body)).encode("utf-8")
            headers["Content-Type"] = "application/json"
        request = Request(url, data=data, headers=headers, method=method)
        if self.auth_injector is not None:
            try:
                self.auth_injector.add_authentication_data(request)
            except Exception as exc:
                raise EdgeXError(ErrorKind.SERVER_ERROR,
                                 "failed to add authentication data to the request", exc) from exc
        try:
            with urlopen(request, timeout=DEFAULT_TIMEOUT) as response:
                payload = response.read()
        except HTTPError as exc:
            text = exc.read().decode("utf-8", errors="replace")
            kind = _STATUS_KINDS.get(exc.code, ErrorKind.UNKNOWN)
            raise EdgeXError(kind, f"request failed, status code: {exc.code}, err: {text}", exc) from exc
        except (URLError, OSError) as exc:
            raise EdgeXError(ErrorKind.COMMUNICATION_ERROR, "failed to send a http request", exc) from exc
        if not payload:
            return []
        try:
            return json.loads(payload)
        except ValueError as exc:
            raise EdgeXError(ErrorKind.CONTRACT_INVALID, "failed to parse the response body", exc) from exc

    def get_health(self, services: Iterable[str]) -> Any:
        """Return the health information of the named services."""
        params = {SERVICES: COMMA_SEPARATOR.join(services)}
        return self._send("GET", API_HEALTH_ROUTE, params=params)

    def get_config(self, services: Iterable[str]) -> Any:
        """Return the configuration of the named services."""
        params = {SERVICES: COMMA_SEPARATOR.join(services)}
        return self._send("GET", API_MULTI_CONFIG_ROUTE, params=params)

    def do_operation(self, requests: Iterable[Any]) -> Any:
        """Issue start, stop or restart operations on services."""
        return self._send("POST", API_OPERATION_ROUTE, body=list(requests))