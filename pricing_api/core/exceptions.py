"""
Custom exception hierarchy for structured error handling.

WHY: Custom exceptions provide:
1. Consistent error handling across the API
2. HTTP status code mapping for FastAPI
3. Structured error responses with contextual data
4. No sensitive data leaks in error messages

Calculators raise the pricing exceptions below instead of returning
sentinel values, so the API layer can turn a bad plan name or an
out-of-range discount into a 4xx response with the offending field.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    WHY: Centralizing exception handling in a base class ensures consistent
    error responses and HTTP status code mapping.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            **context: Additional context for debugging (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for JSON response.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        # WHY: Filter out sensitive fields to prevent data leaks
        sensitive_fields = {"password", "token", "secret", "key", "api_key"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(AppException):
    """
    Raised when authentication fails.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Authentication failed"


class AuthorizationError(AppException):
    """
    Raised when user lacks permissions for an action.

    WHY: Distinguishing authorization (403) from authentication (401) lets
    the calculators show "only admins can edit price tables" instead of
    sending the user back to the login screen.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "You do not have permission to perform this action"


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""

    default_message = "Token has expired"


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is malformed or has invalid signature."""

    default_message = "Token is invalid"


# ============================================================================
# Validation & Input Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation fails.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when a requested resource doesn't exist.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class ResourceAlreadyExistsError(AppException):
    """
    Raised when attempting to create a resource that already exists.

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Resource already exists"


# ============================================================================
# Pricing Exceptions
# ============================================================================


class ProposalNotFoundError(ResourceNotFoundError):
    """Raised when a proposal doesn't exist."""

    default_message = "Proposal not found"


class PlanNotFoundError(ResourceNotFoundError):
    """
    Raised when a calculator is asked for a plan that isn't in its table.

    Examples: a link speed missing from the double fiber/radio plans, an
    unknown SIP plan name, or an AI agent plan that was never priced.
    """

    default_message = "Plan not found"


class PricingValidationError(ValidationError):
    """
    Raised when calculator input is rejected before pricing.

    WHY: Mirrors the checks the sales team relied on before saving a
    proposal (client name, proposal name, at least one VM, named VMs).
    """

    default_message = "Invalid pricing input"


class InvalidDiscountError(ValidationError):
    """Raised when a discount percentage falls outside 0..100."""

    default_message = "Discount percentage must be between 0 and 100"
