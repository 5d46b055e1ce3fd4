from __future__ import annotations

import json
from typing import Any

import pytest

from src.api.client import BackendConfig, IrrbbApiClient


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        if text is not None:
            self.text = text
        elif body is None:
            self.text = ''
        else:
            self.text = json.dumps(body)

    def json(self) -> Any:
        return json.loads(self.text)


class FakeSession:
    """Records requests and replays queued responses (or raises queued exceptions)."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.routes: dict[tuple[str, str], list[Any]] = {}

    def add(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        status: int = 200,
        text: str | None = None,
        error: BaseException | None = None,
    ) -> None:
        response = error if error is not None else FakeResponse(status, body, text)
        self.routes.setdefault((method, path), []).append(response)

    def request(self, method: str, url: str, params=None, json=None, timeout=None):
        path = url.split('/api/v1', 1)[-1]
        self.calls.append({'method': method, 'url': url, 'path': path, 'params': params, 'json': json, 'timeout': timeout})
        queue = self.routes.get((method, path))
        if not queue:
            return FakeResponse(404, {'detail': 'Not Found'})
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def api_client(fake_session: FakeSession) -> IrrbbApiClient:
    return IrrbbApiClient(BackendConfig('http://backend.test/', timeout_seconds=5), session=fake_session)
