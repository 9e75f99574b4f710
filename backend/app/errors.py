"""Error taxonomy for the decision lifecycle and the LLM gateway."""


class SignalError(Exception):
    """Base class for errors surfaced to clients."""

    code = "signal_error"
    status_code = 500


class ValidationError(SignalError):
    """Required field missing or value out of bounds. No network call is attempted."""

    code = "validation_error"
    status_code = 422


class NotFoundError(SignalError):
    """Decision or entry does not exist."""

    code = "not_found"
    status_code = 404


class StateError(SignalError):
    """Operation is illegal in the current lifecycle state."""

    code = "state_error"
    status_code = 409


class ExtractionError(SignalError):
    """Extraction call errored, timed out, or returned unparseable output."""

    code = "extraction_failed"
    status_code = 502


class AnalysisError(SignalError):
    """Synthesis call errored, timed out, or returned unparseable output."""

    code = "analysis_failed"
    status_code = 502
