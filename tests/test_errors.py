"""
Tests for error handling: structured error responses, HTTP status codes,
and the custom exception classes.
"""
import pytest

from tinywins.core.errors import (
    InvalidRewardError,
    InvalidThresholdsError,
    TinyWinsException,
    UnknownTimezoneError,
)


# ---------------------------------------------------------------------------
# Unit tests on exception classes
# ---------------------------------------------------------------------------

class TestExceptionClasses:
    def test_invalid_reward_error(self):
        err = InvalidRewardError(target_points=-3)
        assert err.http_status == 422
        assert err.code == "INVALID_REWARD"
        assert "-3" in err.message
        assert err.to_dict()["details"]["target_points"] == -3

    def test_invalid_thresholds_error(self):
        err = InvalidThresholdsError([0, 7])
        assert err.http_status == 422
        assert err.code == "INVALID_THRESHOLDS"
        assert err.to_dict()["details"]["thresholds"] == [0, 7]

    def test_unknown_timezone_error(self):
        err = UnknownTimezoneError("Nowhere/City")
        assert err.code == "UNKNOWN_TIMEZONE"
        assert "Nowhere/City" in err.message

    def test_domain_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            raise InvalidRewardError(0)

    def test_to_dict_without_details(self):
        err = TinyWinsException("boom")
        d = err.to_dict()
        assert d == {"code": "INTERNAL_ERROR", "message": "boom"}
        assert err.http_status == 500


# ---------------------------------------------------------------------------
# Integration tests on HTTP error responses
# ---------------------------------------------------------------------------

class TestValidationErrors:
    def test_missing_body_field(self, client):
        r = client.post("/milestones/check", json={"new_value": 3})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = [e["field"] for e in body["details"]["errors"]]
        assert "thresholds" in fields

    def test_bad_uuid(self, client):
        r = client.post("/agreements/coverage", json={"child_id": "not-a-uuid"})
        assert r.status_code == 422
        errors = r.json()["details"]["errors"]
        assert errors[0]["field"] == "child_id"
        assert errors[0]["type"]

    def test_reduction_factor_out_of_range(self, client):
        r = client.post("/progress/rewards", json={"rewards": [{
            "child_id": "5c8e0a4e-7c43-4a55-9b0e-3f55a1b8b0a1",
            "name": "Bike",
            "target_points": 20,
            "created_date": "2026-03-01T09:00:00",
            "progress_reduction_factor": 1.5,
        }]})
        assert r.status_code == 422
        assert r.json()["details"]["errors"][0]["field"] == "rewards.0.progress_reduction_factor"

    def test_bad_celebration_page_size(self, client):
        r = client.get("/celebrations?limit=0")
        assert r.status_code == 422
        assert r.json()["details"]["errors"][0]["field"] == "query.limit"
