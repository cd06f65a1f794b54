# Error taxonomy for an assessment run. `kind` is what callers see in results.
from typing import Optional


class AssessmentError(Exception):
    """Base class; every subclass except PartialDataError aborts the run."""

    kind = "AssessmentError"


class TargetConnectionError(AssessmentError):
    kind = "ConnectionError"


class UpstreamHTTPError(AssessmentError):
    kind = "UpstreamHTTPError"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class JSONRepairError(AssessmentError):
    kind = "JSONRepairError"


class SchemaValidationError(AssessmentError):
    kind = "SchemaValidationError"

    def __init__(self, message: str, analysis_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.analysis_type = analysis_type


class PartialDataError(AssessmentError):
    """A single tool or finding entry was skipped; the run continues."""

    kind = "PartialDataError"

    def __init__(self, message: str, location: str) -> None:
        super().__init__(f"{location}: {message}")
        self.location = location
