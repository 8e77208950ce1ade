from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..config import DEFAULT_TAX


@dataclass(frozen=True)
class TaxConfig:
    """Flat-rate capital gains tax with two optional surcharges and an annual allowance."""

    enabled: bool = True
    apply_allowance: bool = True
    include_surcharge_a: bool = True
    include_surcharge_b: bool = False
    base_rate: float = 0.25
    surcharge_a_rate: float = 0.055
    surcharge_b_rate: float = 0.09
    allowance_annual: float = 1000.0

    @property
    def effective_rate(self) -> float:
        surcharge = 0.0
        if self.include_surcharge_a:
            surcharge += self.surcharge_a_rate
        if self.include_surcharge_b:
            surcharge += self.surcharge_b_rate
        return self.base_rate * (1.0 + surcharge)

    @property
    def annual_allowance_in_effect(self) -> float:
        return self.allowance_annual if self.apply_allowance else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "applyAllowance": self.apply_allowance,
            "includeSurchargeA": self.include_surcharge_a,
            "includeSurchargeB": self.include_surcharge_b,
            "baseRate": self.base_rate,
            "surchargeARate": self.surcharge_a_rate,
            "surchargeBRate": self.surcharge_b_rate,
            "allowanceAnnual": self.allowance_annual,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "TaxConfig":
        data = {**DEFAULT_TAX, **(payload or {})}
        return cls(
            enabled=bool(data["enabled"]),
            apply_allowance=bool(data["applyAllowance"]),
            include_surcharge_a=bool(data["includeSurchargeA"]),
            include_surcharge_b=bool(data["includeSurchargeB"]),
            base_rate=min(1.0, max(0.0, float(data["baseRate"]))),
            surcharge_a_rate=max(0.0, float(data["surchargeARate"])),
            surcharge_b_rate=max(0.0, float(data["surchargeBRate"])),
            allowance_annual=max(0.0, float(data["allowanceAnnual"])),
        )


NO_TAX = TaxConfig(enabled=False)
