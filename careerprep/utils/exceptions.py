"""
Custom Exception Classes for the CareerPrep API
"""
from typing import Dict, Any
from fastapi import HTTPException
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import PyMongoError


class CareerPrepBaseException(Exception):
    """Base exception for the CareerPrep API"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        cause: Exception = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/response"""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ValidationError(CareerPrepBaseException):
    """Raised when caller input is missing or malformed. Never retried."""

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        details = kwargs.pop('details', None) or {}
        if field:
            details['field'] = field
        if value is not None:
            details['invalid_value'] = str(value)[:200]
        super().__init__(message, error_code="VALIDATION_ERROR", details=details, **kwargs)


class PersistenceError(CareerPrepBaseException):
    """Raised when the document store is unavailable; retryable by the caller"""

    def __init__(self, message: str, operation: str = None, collection: str = None, **kwargs):
        details = kwargs.pop('details', None) or {}
        if operation:
            details['operation'] = operation
        if collection:
            details['collection'] = collection
        details['retryable'] = True
        super().__init__(message, error_code="PERSISTENCE_ERROR", details=details, **kwargs)


class AIGatewayError(CareerPrepBaseException):
    """Raised inside the AI gateway when a model call fails.

    ``kind`` is one of timeout, network, rate_limit, http, malformed, empty,
    not_configured. The gateway converts it into a failed ``GatewayResult``
    so it never reaches a pipeline caller.
    """

    def __init__(self, message: str, kind: str = "network", model_name: str = None, status_code: int = None, **kwargs):
        details = kwargs.pop('details', None) or {}
        details['kind'] = kind
        if model_name:
            details['model_name'] = model_name
        if status_code:
            details['status_code'] = status_code
        self.kind = kind
        super().__init__(message, error_code="AI_GATEWAY_ERROR", details=details, **kwargs)


class ConfigurationError(CareerPrepBaseException):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, config_key: str = None, config_value: Any = None, **kwargs):
        details = kwargs.pop('details', None) or {}
        if config_key:
            details['config_key'] = config_key
        if config_value is not None:
            details['config_value'] = str(config_value)
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details, **kwargs)


class NotFoundError(CareerPrepBaseException):
    """Raised when a requested document does not exist for the caller"""

    def __init__(self, message: str, resource: str = None, resource_id: str = None, **kwargs):
        details = kwargs.pop('details', None) or {}
        if resource:
            details['resource'] = resource
        if resource_id:
            details['resource_id'] = resource_id
        super().__init__(message, error_code="NOT_FOUND", details=details, **kwargs)


class StateError(CareerPrepBaseException):
    """Base for interview session contract violations"""

    def __init__(self, message: str, session_id: str = None, status: str = None, error_code: str = "STATE_ERROR", **kwargs):
        details = kwargs.pop('details', None) or {}
        if session_id:
            details['session_id'] = session_id
        if status:
            details['status'] = status
        super().__init__(message, error_code=error_code, details=details, **kwargs)


class InvalidStateError(StateError):
    """Raised when a transition is not allowed from the current status"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="INVALID_STATE", **kwargs)


class NoQuestionsError(StateError):
    """Raised when an interview has no questions to ask"""

    def __init__(self, message: str = "Interview has no questions", **kwargs):
        super().__init__(message, error_code="NO_QUESTIONS", **kwargs)


class QuestionNotFoundError(StateError):
    """Raised when an answer references an unknown question id"""

    def __init__(self, message: str, question_id: str = None, **kwargs):
        details = kwargs.pop('details', None) or {}
        if question_id:
            details['question_id'] = question_id
        super().__init__(message, error_code="QUESTION_NOT_FOUND", details=details, **kwargs)


class DuplicateAnswerError(StateError):
    """Raised when a question that already has a response is answered again"""

    def __init__(self, message: str, question_id: str = None, **kwargs):
        details = kwargs.pop('details', None) or {}
        if question_id:
            details['question_id'] = question_id
        super().__init__(message, error_code="DUPLICATE_ANSWER", details=details, **kwargs)


class ConcurrentModificationError(StateError):
    """Raised when a versioned session update loses a race"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="CONCURRENT_MODIFICATION", **kwargs)


# HTTP Exception Mapping
def map_to_http_exception(exc: CareerPrepBaseException) -> HTTPException:
    """Map custom exceptions to HTTP exceptions"""

    status_code_mapping = {
        ValidationError: 400,
        ConfigurationError: 400,
        NotFoundError: 404,
        QuestionNotFoundError: 404,
        InvalidStateError: 409,
        NoQuestionsError: 409,
        DuplicateAnswerError: 409,
        ConcurrentModificationError: 409,
        StateError: 409,
        AIGatewayError: 502,
        PersistenceError: 503,
    }

    status_code = status_code_mapping.get(type(exc), 500)

    detail = {
        "error": exc.to_dict(),
        "message": exc.message
    }

    return HTTPException(status_code=status_code, detail=detail)


class ExceptionContext:
    """Context manager for handling exceptions with additional context"""

    def __init__(self, operation: str, logger=None, **context):
        self.operation = operation
        self.logger = logger
        self.context = context

    def __enter__(self):
        if self.logger:
            self.logger.debug(f"Starting operation: {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            if self.logger:
                self.logger.debug(f"Operation completed: {self.operation}", extra=self.context)
            return False

        if self.logger:
            self.logger.error(
                f"Operation failed: {self.operation} - {exc_val}",
                extra={**self.context, "exception_type": exc_type.__name__}
            )

        # Custom and HTTP exceptions pass through unchanged
        if isinstance(exc_val, (CareerPrepBaseException, HTTPException)):
            return False

        # only pydantic model errors count as bad input
        if isinstance(exc_val, PydanticValidationError):
            raise ValidationError(
                f"Validation error in {self.operation}: {str(exc_val)}",
                details=dict(self.context),
                cause=exc_val
            ) from exc_val

        if isinstance(exc_val, PyMongoError) or "mongo" in str(exc_val).lower():
            raise PersistenceError(
                f"Storage error in {self.operation}: {str(exc_val)}",
                operation=self.operation,
                details=dict(self.context),
                cause=exc_val
            ) from exc_val

        return False
