"""OpenAI Assistants (threads/messages/runs) REST adapter."""

from __future__ import annotations

import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..analysis_types import AssistantConfig
from ..errors import TransportError

OPENAI_API_URL = "https://api.openai.com/v1"
ASSISTANTS_BETA_HEADER = "assistants=v2"


def _error_detail(body: str, fallback: str) -> str:
    detail = body.strip() or fallback
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return detail
    if isinstance(parsed, dict):
        err = parsed.get("error")
        if isinstance(err, dict):
            return str(err.get("message") or err.get("code") or detail)
        if isinstance(err, str):
            return err
        if isinstance(parsed.get("message"), str):
            return parsed["message"]
    return detail


class AssistantsClient:
    """Thin stateless wrapper; safe to share across concurrent analyses."""

    def __init__(
        self,
        *,
        api_key: str,
        organization_id: str | None = None,
        base_url: str = OPENAI_API_URL,
        timeout_sec: int = 30,
    ) -> None:
        self._api_key = api_key
        self._organization_id = organization_id
        self._base_url = base_url.rstrip("/")
        self._timeout_sec = timeout_sec

    @classmethod
    def from_config(cls, config: AssistantConfig) -> "AssistantsClient":
        if not config.api_key:
            raise ValueError("AssistantsClient requires an API key.")
        return cls(
            api_key=config.api_key,
            organization_id=config.organization_id,
            base_url=config.base_url,
            timeout_sec=config.timeout_sec,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "OpenAI-Beta": ASSISTANTS_BETA_HEADER,
        }
        if self._organization_id:
            headers["OpenAI-Organization"] = self._organization_id
        return headers

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = Request(url, data=data, headers=self._headers(), method=method)
        operation = f"{method} {path}"
        try:
            with urlopen(req, timeout=self._timeout_sec) as response:
                body = response.read().decode("utf-8")
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")
            detail = _error_detail(body, str(exc))
            raise TransportError(f"HTTP {exc.code}: {detail}", status_code=exc.code, operation=operation) from exc
        except (URLError, TimeoutError, OSError) as exc:
            raise TransportError(f"{operation} failed: {exc}", operation=operation) from exc

        try:
            parsed = json.loads(body) if body.strip() else {}
        except json.JSONDecodeError as exc:
            raise TransportError(f"{operation} returned invalid JSON", operation=operation) from exc
        if not isinstance(parsed, dict):
            raise TransportError(f"{operation} response must be a JSON object", operation=operation)
        return parsed

    def create_conversation(self) -> str:
        out = self._request("POST", "/threads", {})
        thread_id = out.get("id")
        if not isinstance(thread_id, str) or not thread_id:
            raise TransportError("Thread creation response is missing an id", operation="POST /threads")
        return thread_id

    def delete_conversation(self, conversation_id: str) -> None:
        self._request("DELETE", f"/threads/{conversation_id}")

    def post_message(self, conversation_id: str, text: str) -> dict[str, Any]:
        return self._request("POST", f"/threads/{conversation_id}/messages", {"role": "user", "content": text})

    def create_run(self, conversation_id: str, assistant_id: str) -> dict[str, Any]:
        out = self._request("POST", f"/threads/{conversation_id}/runs", {"assistant_id": assistant_id})
        if not isinstance(out.get("id"), str):
            raise TransportError("Run creation response is missing an id", operation="POST runs")
        return out

    def get_run_status(self, conversation_id: str, run_id: str) -> dict[str, Any]:
        return self._request("GET", f"/threads/{conversation_id}/runs/{run_id}")

    def list_messages(self, conversation_id: str) -> list[str]:
        """Return assistant message texts, newest first."""
        out = self._request("GET", f"/threads/{conversation_id}/messages?order=desc")
        data = out.get("data")
        texts: list[str] = []
        if not isinstance(data, list):
            return texts
        for message in data:
            if not isinstance(message, dict) or message.get("role", "assistant") != "assistant":
                continue
            parts: list[str] = []
            for block in message.get("content") or []:
                if not isinstance(block, dict) or block.get("type") != "text":
                    continue
                text = block.get("text")
                value = text.get("value") if isinstance(text, dict) else None
                if isinstance(value, str):
                    parts.append(value)
            if parts:
                texts.append("\n".join(parts))
        return texts
