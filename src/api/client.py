"""HTTP client for the IRRBB analytics backend."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any, Callable, Generic, TypeVar
from urllib.parse import quote

import requests

from src.api.errors import FetchError, HttpError, NetworkError, extract_detail
from src.data.snapshot import DashboardSnapshot, normalize_snapshot
from src.models.assumptions import BehavioralAssumptions
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)

T = TypeVar('T')

DEFAULT_BACKEND_URL = 'https://irrbbb-backend.onrender.com'
DEFAULT_TIMEOUT_SECONDS = 30.0
BACKEND_URL_ENV = 'IRRBB_BACKEND_URL'
BACKEND_TIMEOUT_ENV = 'IRRBB_BACKEND_TIMEOUT'

NII_BREAKDOWNS = ['instrument', 'type', 'bucket']
CASHFLOW_AGGREGATIONS = ['assets', 'liabilities', 'net']
CASHFLOW_TYPES = ['pv', 'total']
INSTRUMENT_ENDPOINTS = {
    'Loan': 'loans',
    'Deposit': 'deposits',
    'Derivative': 'derivatives',
}


@dataclass(frozen=True)
class BackendConfig:
    """Connection settings injected into the API client."""

    base_url: str = DEFAULT_BACKEND_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    api_prefix: str = '/api/v1'

    def __post_init__(self) -> None:
        url = str(self.base_url or '').strip().rstrip('/')
        if not url:
            raise ValueError('Backend base URL is required.')
        object.__setattr__(self, 'base_url', url)
        timeout = float(self.timeout_seconds)
        if timeout <= 0:
            raise ValueError('Backend timeout must be positive.')
        object.__setattr__(self, 'timeout_seconds', timeout)
        prefix = '/' + str(self.api_prefix or '').strip('/')
        object.__setattr__(self, 'api_prefix', prefix.rstrip('/'))

    def url(self, path: str) -> str:
        return f'{self.base_url}{self.api_prefix}/{path.lstrip("/")}'

    @classmethod
    def from_env(
        cls,
        base_url: str | None = None,
        *,
        secrets: Any = None,
        environ: dict[str, str] | None = None,
    ) -> 'BackendConfig':
        """Resolve settings: explicit value, environment, secrets, then defaults."""
        env = os.environ if environ is None else environ
        backend_secrets: Any = {}
        if secrets is not None and hasattr(secrets, 'get'):
            try:
                backend_secrets = secrets.get('backend', {}) or {}
            except (FileNotFoundError, KeyError):
                backend_secrets = {}
        if not hasattr(backend_secrets, 'get'):
            backend_secrets = {}

        url = (
            base_url
            or env.get(BACKEND_URL_ENV)
            or backend_secrets.get('url')
            or DEFAULT_BACKEND_URL
        )
        timeout_raw = env.get(BACKEND_TIMEOUT_ENV) or backend_secrets.get('timeout')
        try:
            timeout = float(timeout_raw) if timeout_raw not in (None, '') else DEFAULT_TIMEOUT_SECONDS
        except (TypeError, ValueError):
            LOGGER.warning('Ignoring invalid backend timeout %r.', timeout_raw)
            timeout = DEFAULT_TIMEOUT_SECONDS
        return cls(base_url=str(url), timeout_seconds=timeout)


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of one backend round trip: a value or a FetchError."""

    value: T | None = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def value_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value

    def map(self, fn: Callable[[Any], Any]) -> 'FetchResult[Any]':
        if self.error is not None:
            return self
        return FetchResult(value=fn(self.value))

    @classmethod
    def success(cls, value: T) -> 'FetchResult[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, error: FetchError) -> 'FetchResult[T]':
        return cls(error=error)


def scenario_query_params(scenarios: str | list[str] | tuple[str, ...] | None) -> dict[str, str]:
    """Return `scenario=` for one name, `scenarios=a,b` for a list."""
    if scenarios is None:
        return {'scenario': 'Base Case'}
    if isinstance(scenarios, str):
        name = scenarios.strip()
        return {'scenario': name or 'Base Case'}
    names = [str(s).strip() for s in scenarios if str(s).strip()]
    if not names:
        return {'scenario': 'Base Case'}
    return {'scenarios': ','.join(names)}


def _instrument_endpoint(kind: str) -> str:
    try:
        return INSTRUMENT_ENDPOINTS[str(kind)]
    except KeyError:
        raise ValueError(f'Unknown instrument kind `{kind}`; expected one of {list(INSTRUMENT_ENDPOINTS)}.') from None


class IrrbbApiClient:
    """Single-round-trip access to the backend REST endpoints.

    Every method returns a FetchResult. Nothing is retried or cached; callers
    decide whether a failure becomes an error banner or an empty fallback.
    """

    def __init__(self, config: BackendConfig, session: Any = None) -> None:
        self.config = config
        self._session = session if session is not None else requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
        expect_body: bool = True,
    ) -> FetchResult[Any]:
        url = self.config.url(path)
        LOGGER.debug('%s %s params=%s', method, url, params)
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=payload,
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as exc:
            LOGGER.warning('%s %s failed: %s', method, url, exc)
            return FetchResult.failure(NetworkError(f'Network error contacting backend: {exc}', cause=exc))

        status = int(response.status_code)
        if not 200 <= status < 300:
            body = response.text or ''
            try:
                detail = extract_detail(response.json())
            except ValueError:
                detail = None
            LOGGER.warning('%s %s returned %s: %s', method, url, status, detail or body[:200])
            return FetchResult.failure(HttpError(status, body=body, detail=detail))

        if not expect_body or status == 204 or not (response.text or '').strip():
            return FetchResult.success(None)
        try:
            return FetchResult.success(response.json())
        except ValueError:
            LOGGER.warning('%s %s returned an undecodable body.', method, url)
            return FetchResult.failure(
                HttpError(status, body=response.text or '', detail='Response body is not valid JSON.')
            )

    # Dashboard

    def fetch_live_dashboard(
        self,
        nmd_effective_maturity_years: int = 5,
        nmd_deposit_beta: float = 0.5,
        prepayment_rate: float = 0.0,
    ) -> FetchResult[DashboardSnapshot]:
        """Fetch the full dashboard snapshot under the given behavioral assumptions."""
        assumptions = BehavioralAssumptions(
            nmd_effective_maturity_years=nmd_effective_maturity_years,
            nmd_deposit_beta=nmd_deposit_beta,
            prepayment_rate=prepayment_rate,
        )
        result = self._request('GET', 'dashboard/live-data', params=assumptions.to_query_params())
        return result.map(normalize_snapshot)

    def fetch_eve_drivers(self, scenarios: str | list[str] = 'Base Case') -> FetchResult[list[dict[str, Any]]]:
        result = self._request('GET', 'dashboard/eve-drivers', params=scenario_query_params(scenarios))
        return result.map(_as_records)

    def fetch_nii_drivers(
        self,
        scenarios: str | list[str] = 'Base Case',
        breakdown: str = 'instrument',
    ) -> FetchResult[list[dict[str, Any]]]:
        if breakdown not in NII_BREAKDOWNS:
            raise ValueError(f'NII breakdown must be one of {NII_BREAKDOWNS}.')
        params = scenario_query_params(scenarios)
        params['breakdown'] = breakdown
        result = self._request('GET', 'dashboard/nii-drivers', params=params)
        return result.map(_as_records)

    def fetch_net_positions(self, scenario: str = 'Base Case') -> FetchResult[list[dict[str, Any]]]:
        result = self._request('GET', 'dashboard/net-positions', params={'scenario': scenario})
        return result.map(_as_records)

    def fetch_bucket_constituents(self, scenario: str, bucket: str) -> FetchResult[list[dict[str, Any]]]:
        result = self._request(
            'GET',
            'dashboard/bucket-constituents',
            params={'scenario': scenario, 'bucket': bucket},
        )
        return result.map(_as_records)

    def fetch_yield_curves(self, scenario: str | None = None) -> FetchResult[list[dict[str, Any]]]:
        params = {'scenario': scenario} if scenario else None
        result = self._request('GET', 'yield-curves', params=params)
        return result.map(_as_records)

    def fetch_portfolio_composition(self) -> FetchResult[dict[str, Any]]:
        result = self._request('GET', 'portfolio/composition')
        return result.map(lambda v: v if isinstance(v, dict) else {'records': _as_records(v)})

    def fetch_repricing_gap(self, scenario: str = 'Base Case') -> FetchResult[list[dict[str, Any]]]:
        result = self._request('GET', 'repricing-gap', params={'scenario': scenario})
        return result.map(_as_records)

    def fetch_repricing_gap_drill_down(self, bucket: str, scenario: str = 'Base Case') -> FetchResult[dict[str, Any]]:
        path = f'repricing-gap/drill-down/{quote(str(bucket), safe="")}'
        result = self._request('GET', path, params={'scenario': scenario})
        return result.map(lambda v: v if isinstance(v, dict) else {'assets': [], 'liabilities': []})

    def fetch_cashflow_ladder(
        self,
        scenario: str = 'Base Case',
        instrument_type: str = 'all',
        aggregation: str = 'assets',
        cashflow_type: str = 'pv',
    ) -> FetchResult[list[dict[str, Any]]]:
        if aggregation not in CASHFLOW_AGGREGATIONS:
            raise ValueError(f'Cashflow aggregation must be one of {CASHFLOW_AGGREGATIONS}.')
        if cashflow_type not in CASHFLOW_TYPES:
            raise ValueError(f'Cashflow type must be one of {CASHFLOW_TYPES}.')
        params = {
            'scenario': scenario,
            'instrument_type': instrument_type or 'all',
            'aggregation': aggregation,
            'cashflow_type': cashflow_type,
        }
        result = self._request('GET', 'cashflow-ladder', params=params)
        return result.map(_as_records)

    def fetch_cashflow_instrument_types(self) -> FetchResult[list[str]]:
        result = self._request('GET', 'cashflow-ladder/instrument-types')
        return result.map(lambda v: [str(x) for x in v if x] if isinstance(v, list) else [])

    # Instruments

    def list_instruments(self, kind: str) -> FetchResult[list[dict[str, Any]]]:
        result = self._request('GET', _instrument_endpoint(kind))
        return result.map(_as_records)

    def create_instrument(self, kind: str, payload: dict[str, Any]) -> FetchResult[Any]:
        return self._request('POST', _instrument_endpoint(kind), payload=payload)

    def update_instrument(self, kind: str, instrument_id: str, payload: dict[str, Any]) -> FetchResult[Any]:
        path = f'{_instrument_endpoint(kind)}/{quote(str(instrument_id), safe="")}'
        return self._request('PUT', path, payload=payload)

    def delete_instrument(self, kind: str, instrument_id: str) -> FetchResult[None]:
        path = f'{_instrument_endpoint(kind)}/{quote(str(instrument_id), safe="")}'
        return self._request('DELETE', path, expect_body=False)


def _as_records(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]
