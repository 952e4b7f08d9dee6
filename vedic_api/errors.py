"""Error taxonomy shared by the chart and geocode endpoints.

Every failure carries a stable ``kind`` string alongside the human readable
message so clients can branch without parsing text.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ChartError(Exception):
    kind = "ChartError"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message, "kind": self.kind}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ChartError):
    kind = "ValidationError"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        details = dict(details or {})
        if field is not None:
            details.setdefault("fields", [{"field": field, "message": message}])
        super().__init__(message, details)
        self.field = field


class UnparseableDateTime(ChartError):
    kind = "UnparseableDateTime"
    status_code = 400


class EphemerisFailure(ChartError):
    kind = "EphemerisFailure"
    status_code = 500


class HouseComputationFailed(ChartError):
    kind = "HouseComputationFailed"
    status_code = 500


class GeocodeTimeout(ChartError):
    kind = "GeocodeTimeout"
    status_code = 504


class GeocodeFailure(ChartError):
    kind = "GeocodeFailure"
    status_code = 502
