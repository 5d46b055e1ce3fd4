"""Backend access error taxonomy."""

from __future__ import annotations

from typing import Any


class FetchError(Exception):
    """Base class for any failed backend round trip."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NetworkError(FetchError):
    """Transport failure: connection refused, DNS, TLS, or timeout."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class HttpError(FetchError):
    """Non-2xx response (or an undecodable 2xx body)."""

    def __init__(self, status: int, body: str = '', detail: str | None = None) -> None:
        self.status = int(status)
        self.body = body
        self.detail = detail
        text = detail if detail else (body.strip() or 'Unknown error')
        super().__init__(f'HTTP error! status: {self.status}, detail: {text}')


def extract_detail(payload: Any) -> str | None:
    """Return the backend `detail` message from a decoded error body."""
    if not isinstance(payload, dict):
        return None
    detail = payload.get('detail')
    if detail is None:
        return None
    if isinstance(detail, list):
        # Validation errors arrive as a list of {loc, msg, type} records.
        parts = []
        for item in detail:
            if isinstance(item, dict):
                loc = '.'.join(str(x) for x in item.get('loc', []) if x != 'body')
                msg = str(item.get('msg', '')).strip()
                parts.append(f'{loc}: {msg}' if loc else msg)
            else:
                parts.append(str(item))
        return '; '.join(p for p in parts if p) or None
    return str(detail)
