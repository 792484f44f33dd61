"""Plan limit parsing and the plan/override merge."""
import pytest

from bizsuite.core.exceptions import InvalidInputError, LimitNotConfiguredError
from bizsuite.core.limits import Limit, LimitKey, merge_limits, validate_limit_map

BASIC = {"maxProducts": 100, "maxUsers": 2, "maxTables": 10, "maxStorageMB": 100, "support": "email"}


class TestLimit:
    def test_minus_one_is_unlimited(self):
        limit = Limit.from_raw(-1)
        assert limit.is_unlimited
        assert limit.allows(10 ** 9)
        assert limit.to_raw() == -1

    def test_bounded_allows_below_bound_only(self):
        limit = Limit.from_raw(3)
        assert limit.allows(2)
        assert not limit.allows(3)

    def test_zero_blocks_everything(self):
        assert not Limit.from_raw(0).allows(0)

    @pytest.mark.parametrize("raw", [-2, "10", 1.5, True, None])
    def test_rejects_invalid_values(self, raw):
        with pytest.raises(ValueError):
            Limit.from_raw(raw)


class TestMergeLimits:
    def test_plan_values_apply_without_override(self):
        limits = merge_limits(BASIC)
        assert limits.get(LimitKey.MAX_PRODUCTS) == Limit.bounded(100)

    def test_override_wins_over_plan(self):
        limits = merge_limits(BASIC, {"maxProducts": 500, "maxUsers": -1})
        assert limits.get(LimitKey.MAX_PRODUCTS).bound == 500
        assert limits.get(LimitKey.MAX_USERS).is_unlimited
        assert limits.get(LimitKey.MAX_TABLES).bound == 10

    def test_override_can_tighten(self):
        limits = merge_limits(BASIC, {"maxTables": 0})
        assert limits.get(LimitKey.MAX_TABLES).bound == 0

    def test_missing_key_fails_closed(self):
        limits = merge_limits({"maxProducts": 5})
        with pytest.raises(LimitNotConfiguredError) as exc_info:
            limits.get(LimitKey.MAX_TABLES)
        assert exc_info.value.status_code == 500
        assert exc_info.value.limit_key == "maxTables"

    def test_to_dict_keeps_sentinel_and_unspecified(self):
        limits = merge_limits({"maxProducts": -1, "maxUsers": 2})
        assert limits.to_dict() == {
            "maxProducts": -1,
            "maxUsers": 2,
            "maxTables": None,
            "maxStorageMB": None,
        }


class TestValidateLimitMap:
    def test_plan_features_may_carry_descriptive_keys(self):
        assert validate_limit_map(BASIC, require_all=True)["support"] == "email"

    def test_missing_key_reported_when_required(self):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_limit_map({"maxProducts": 1}, require_all=True)
        fields = {detail["field"] for detail in exc_info.value.details}
        assert fields == {"maxUsers", "maxTables", "maxStorageMB"}

    def test_override_rejects_unknown_keys(self):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_limit_map({"maxWidgets": 3}, allow_extra=False)
        assert exc_info.value.details[0]["field"] == "maxWidgets"

    def test_rejects_values_below_minus_one(self):
        with pytest.raises(InvalidInputError):
            validate_limit_map({"maxUsers": -5})
