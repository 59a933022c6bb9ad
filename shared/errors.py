"""
Shared error handling for the Hydra consent client.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel
from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""
    
    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class HydraError(Exception):
    """Base exception for the Hydra consent client."""
    
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.code = code
        self.message = message
        self.details = dict(details or {})
        self.cause = cause
        if cause is not None and "cause" not in self.details:
            self.details["cause"] = str(cause)
        super().__init__(message)
    
    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        # Get trace ID from current span
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"
        
        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(HydraError):
    """Invalid or incomplete client configuration."""
    
    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class AuthenticationError(HydraError):
    """The client-credentials token exchange failed."""
    
    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__("AUTHENTICATION_ERROR", message, details, cause)


class KeyRetrievalError(HydraError):
    """A key could not be fetched, or the key set response was malformed."""
    
    def __init__(
        self,
        message: str = "Could not retrieve key.",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__("KEY_RETRIEVAL_ERROR", message, details, cause)


class ChallengeVerificationError(HydraError):
    """A consent challenge failed signature or claim verification."""
    
    def __init__(
        self,
        message: str = "Could not verify consent challenge.",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__("CHALLENGE_VERIFICATION_ERROR", message, details, cause)

    @property
    def reason(self) -> Optional[str]:
        return self.details.get("reason")


class ConsentSigningError(HydraError):
    """Key reconstruction or signing of a consent response failed."""
    
    def __init__(
        self,
        message: str = "Could not sign consent response.",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__("CONSENT_SIGNING_ERROR", message, details, cause)

    @property
    def stage(self) -> Optional[str]:
        return self.details.get("stage")


class RemoteCallError(HydraError):
    """An authenticated provider call answered with a non-2xx status."""
    
    def __init__(
        self,
        message: str = "Remote call failed",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__("REMOTE_CALL_ERROR", message, details, cause)

    @property
    def status_code(self) -> Optional[int]:
        return self.details.get("status_code")
