"""Behavioral assumptions sent with the live dashboard request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.utils.numbers import safe_float

NMD_MATURITY_MIN_YEARS = 1
NMD_MATURITY_MAX_YEARS = 30


@dataclass(frozen=True)
class BehavioralAssumptions:
    """NMD and prepayment settings applied by the backend to EVE/NII runs."""

    nmd_effective_maturity_years: int = 5
    nmd_deposit_beta: float = 0.5
    prepayment_rate: float = 0.0

    def __post_init__(self) -> None:
        maturity = int(self.nmd_effective_maturity_years)
        beta = float(self.nmd_deposit_beta)
        cpr = float(self.prepayment_rate)
        if not NMD_MATURITY_MIN_YEARS <= maturity <= NMD_MATURITY_MAX_YEARS:
            raise ValueError(
                f'NMD effective maturity must be between {NMD_MATURITY_MIN_YEARS} and {NMD_MATURITY_MAX_YEARS} years.'
            )
        if not 0.0 <= beta <= 1.0:
            raise ValueError('NMD deposit beta must be between 0 and 1.')
        if not 0.0 <= cpr <= 1.0:
            raise ValueError('Prepayment rate must be between 0 and 1.')
        object.__setattr__(self, 'nmd_effective_maturity_years', maturity)
        object.__setattr__(self, 'nmd_deposit_beta', beta)
        object.__setattr__(self, 'prepayment_rate', cpr)

    def to_query_params(self) -> dict[str, Any]:
        return {
            'nmd_effective_maturity_years': self.nmd_effective_maturity_years,
            'nmd_deposit_beta': self.nmd_deposit_beta,
            'prepayment_rate': self.prepayment_rate,
        }

    @classmethod
    def from_payload(cls, payload: Any) -> 'BehavioralAssumptions':
        """Build from a backend `current_assumptions` record, falling back to defaults."""
        defaults = cls()
        if not isinstance(payload, dict):
            return defaults
        maturity = safe_float(payload.get('nmd_effective_maturity_years'), None)
        beta = safe_float(payload.get('nmd_deposit_beta'), None)
        cpr = safe_float(payload.get('prepayment_rate'), None)
        try:
            return cls(
                nmd_effective_maturity_years=defaults.nmd_effective_maturity_years if maturity is None else int(maturity),
                nmd_deposit_beta=defaults.nmd_deposit_beta if beta is None else float(beta),
                prepayment_rate=defaults.prepayment_rate if cpr is None else float(cpr),
            )
        except ValueError:
            return defaults
