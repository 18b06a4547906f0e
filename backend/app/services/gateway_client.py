import logging
from typing import Any

import requests

from app.core.config import settings
from app.core.errors import DispatchError

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to execute command"


def _json_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _error_text(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    error = body.get("error")
    if not error:
        return ""
    return str(error).strip()


class GatewayClient:
    def __init__(self, base_url: str, execute_path: str, timeout: int, token: str = "") -> None:
        self.base_url = base_url.rstrip("/")
        self.execute_path = "/" + execute_path.lstrip("/")
        self.timeout = timeout
        self.token = token

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def execute_command(self, command_id: str, ref_id: str) -> dict[str, Any]:
        """Ask the gateway to run one command; raise DispatchError if it did not."""
        url = f"{self.base_url}{self.execute_path}"
        payload = {"command_id": command_id, "ref_id": ref_id}

        try:
            response = requests.post(url, json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Gateway unreachable for %s: %s", ref_id, exc)
            raise DispatchError(str(exc) or GENERIC_FAILURE_MESSAGE) from exc

        body = _json_body(response)
        error = _error_text(body)

        if not 200 <= response.status_code < 300:
            logger.warning("Gateway rejected %s with HTTP %s", ref_id, response.status_code)
            raise DispatchError(error or GENERIC_FAILURE_MESSAGE, status_code=response.status_code)
        if error:
            logger.warning("Gateway reported an error for %s: %s", ref_id, error)
            raise DispatchError(error, status_code=response.status_code)

        return body if isinstance(body, dict) else {}


gateway_client = GatewayClient(
    settings.gateway_base_url,
    settings.gateway_execute_path,
    settings.gateway_timeout,
    settings.gateway_token,
)
