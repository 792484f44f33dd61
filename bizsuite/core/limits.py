"""
Plan Limits

Plans store their limits as an open JSON map (``{"maxProducts": 100, ...}``)
and tenants may carry a sparse ``custom_limits`` map that overrides
individual keys. This module turns those blobs into typed values.

A stored value of -1 means unlimited. It is converted to
``Limit.unlimited()`` at the edge so nothing downstream ever compares
against the sentinel.
"""
import enum
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from bizsuite.core.exceptions import InvalidInputError, LimitNotConfiguredError

UNLIMITED = -1


class LimitKey(str, enum.Enum):
    """Every limit a plan can define, by its JSON key."""

    MAX_PRODUCTS = "maxProducts"
    MAX_USERS = "maxUsers"
    MAX_TABLES = "maxTables"
    MAX_STORAGE_MB = "maxStorageMB"


@dataclass(frozen=True)
class Limit:
    """Either unlimited or bounded by a non-negative integer."""

    bound: Optional[int] = None

    @classmethod
    def unlimited(cls) -> "Limit":
        return cls(None)

    @classmethod
    def bounded(cls, value: int) -> "Limit":
        if value < 0:
            raise ValueError("bounded limit must be non-negative")
        return cls(value)

    @classmethod
    def from_raw(cls, raw: Any) -> "Limit":
        """Parse a stored JSON value."""
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ValueError(f"limit must be an integer, got {raw!r}")
        if raw == UNLIMITED:
            return cls.unlimited()
        return cls.bounded(raw)

    @property
    def is_unlimited(self) -> bool:
        return self.bound is None

    def allows(self, current_count: int) -> bool:
        """True when one more resource fits next to ``current_count`` existing ones."""
        if self.is_unlimited:
            return True
        return current_count < self.bound

    def to_raw(self) -> int:
        return UNLIMITED if self.is_unlimited else self.bound


@dataclass(frozen=True)
class EffectiveLimits:
    """
    Resolved limits for one tenant.

    A key maps to None when neither the plan nor the override defines it.
    """

    values: Mapping[LimitKey, Optional[Limit]]

    def get(self, key: LimitKey) -> Limit:
        """Return the limit for ``key``, failing closed when it is unspecified."""
        limit = self.values.get(key)
        if limit is None:
            raise LimitNotConfiguredError(key.value)
        return limit

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {
            key.value: (limit.to_raw() if limit is not None else None)
            for key, limit in self.values.items()
        }


def _parse_map(raw: Optional[Mapping[str, Any]]) -> Dict[LimitKey, Limit]:
    parsed: Dict[LimitKey, Limit] = {}
    if not raw:
        return parsed
    for key in LimitKey:
        if key.value in raw and raw[key.value] is not None:
            parsed[key] = Limit.from_raw(raw[key.value])
    return parsed


def merge_limits(
    plan_features: Optional[Mapping[str, Any]],
    custom_limits: Optional[Mapping[str, Any]] = None,
) -> EffectiveLimits:
    """
    Overlay a tenant's custom limits on its plan's features.

    Pure function: plan defaults first, then any key present in the
    override map replaces the plan value. Non-limit keys in the plan
    features (``support``, ``trialDurationDays`` ...) are ignored.
    """
    merged: Dict[LimitKey, Optional[Limit]] = {key: None for key in LimitKey}
    merged.update(_parse_map(plan_features))
    merged.update(_parse_map(custom_limits))
    return EffectiveLimits(values=merged)


def effective_limits(tenant) -> EffectiveLimits:
    """Resolve the effective limits for a tenant row (with its plan loaded)."""
    features = tenant.plan.features if tenant.plan is not None else None
    return merge_limits(features, tenant.custom_limits)


def resolve_limit(tenant, key: LimitKey) -> Limit:
    """Return the effective value of one limit for a tenant."""
    return effective_limits(tenant).get(key)


def validate_limit_map(
    raw: Mapping[str, Any],
    require_all: bool = False,
    allow_extra: bool = True,
) -> Dict[str, Any]:
    """
    Validate a limits map supplied by a platform admin.

    Recognised keys must be integers >= -1. Plan features may also carry
    descriptive entries such as ``support``; tenant overrides may not
    (``allow_extra=False``).
    """
    cleaned: Dict[str, Any] = dict(raw)
    errors = []
    if not allow_extra:
        known = {key.value for key in LimitKey}
        for name in raw:
            if name not in known:
                errors.append({"field": name, "message": "Unknown limit"})
    for key in LimitKey:
        if key.value not in raw:
            if require_all:
                errors.append({"field": key.value, "message": "Limit is required"})
            continue
        try:
            Limit.from_raw(raw[key.value])
        except ValueError:
            errors.append({
                "field": key.value,
                "message": "Limit must be an integer >= -1 (-1 means unlimited)"
            })
    if errors:
        raise InvalidInputError("Invalid limits", details=errors)
    return cleaned
