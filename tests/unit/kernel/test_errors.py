"""Unit tests for kernel errors."""
from __future__ import annotations

import json

import pytest

from mp_pprof.kernel.errors import (
    ApplicationError,
    BaseError,
    DomainError,
    InfrastructureError,
    InvalidParameterError,
    MethodNotAllowedError,
    ReadError,
    SamplerStartError,
    ValidationError,
)


# ---------------------------------------------------------------------------
# BaseError
# ---------------------------------------------------------------------------


class TestBaseError:
    def test_message_and_default_code(self) -> None:
        err = BaseError("boom")
        assert err.message == "boom"
        assert err.code == "base_error"
        assert err.detail == {}
        assert err.http_status == 500

    def test_custom_code_and_detail(self) -> None:
        err = BaseError("boom", code="custom", detail={"k": 1})
        assert err.code == "custom"
        assert err.detail == {"k": 1}

    def test_cause_is_chained(self) -> None:
        cause = OSError("disk")
        err = BaseError("wrapped", cause=cause)
        assert err.__cause__ is cause
        assert "cause" in err.to_dict()

    def test_str_is_json(self) -> None:
        payload = json.loads(str(BaseError("boom")))
        assert payload["message"] == "boom"
        assert payload["code"] == "base_error"

    def test_repr(self) -> None:
        assert repr(BaseError("x")) == "BaseError(code='base_error', message='x')"


# ---------------------------------------------------------------------------
# Hierarchy and statuses
# ---------------------------------------------------------------------------


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls, parent",
        [
            (DomainError, BaseError),
            (ValidationError, DomainError),
            (InvalidParameterError, ValidationError),
            (ApplicationError, BaseError),
            (MethodNotAllowedError, ApplicationError),
            (InfrastructureError, BaseError),
            (SamplerStartError, InfrastructureError),
            (ReadError, InfrastructureError),
        ],
    )
    def test_subclassing(self, cls: type, parent: type) -> None:
        assert issubclass(cls, parent)

    def test_client_errors_map_to_400(self) -> None:
        assert InvalidParameterError("seconds", "x").http_status == 400
        assert MethodNotAllowedError("PUT", "GET").http_status == 400

    def test_infrastructure_maps_to_503(self) -> None:
        assert ReadError("/tmp/x").http_status == 503


class TestInvalidParameterError:
    def test_carries_parameter_and_value(self) -> None:
        err = InvalidParameterError("seconds", "abc", "Invalid Profile Seconds Parameter")
        assert err.parameter == "seconds"
        assert err.value == "abc"
        assert err.message == "Invalid Profile Seconds Parameter"
        assert err.detail == {"parameter": "seconds", "value": "abc"}

    def test_default_message(self) -> None:
        assert InvalidParameterError("n", 1).message == "Invalid Parameter"


class TestMethodNotAllowedError:
    def test_message_names_allowed_method(self) -> None:
        assert MethodNotAllowedError("POST", "GET").message == "Only accept Get method"
        assert MethodNotAllowedError("PUT", "POST").message == "Only accept Post method"

    def test_detail(self) -> None:
        err = MethodNotAllowedError("DELETE", "GET")
        assert err.detail == {"method": "DELETE", "allowed": "GET"}
        assert err.code == "method_not_allowed"


class TestInfrastructureErrors:
    def test_sampler_start_default_message(self) -> None:
        err = SamplerStartError("pyinstrument")
        assert err.sampler == "pyinstrument"
        assert "pyinstrument" in err.message

    def test_read_error_default_message(self) -> None:
        err = ReadError("/proc/self/cmdline")
        assert err.source == "/proc/self/cmdline"
        assert err.message == "Could not read '/proc/self/cmdline'"
