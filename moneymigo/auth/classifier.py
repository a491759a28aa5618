"""
Error Classifier

Maps raw provider error codes to canonical AuthErrorKinds.

DESIGN DECISION: classify() is a pure, total function.
Unknown codes degrade to UNKNOWN instead of raising, so classifying
an error can never become a second failure.

NOTE: user-not-found and wrong-password both map to INVALID_CREDENTIAL.
Firebase itself reports both as invalid-credential when email
enumeration protection is on, so we do not try to tell them apart.
"""

from typing import Optional

from moneymigo.models.auth_error import AuthError, AuthErrorKind


PROVIDER_CODE_PREFIX = "auth/"

ERROR_CODE_KINDS: dict[str, AuthErrorKind] = {
    "email-already-in-use": AuthErrorKind.EMAIL_IN_USE,
    "invalid-credential": AuthErrorKind.INVALID_CREDENTIAL,
    "user-not-found": AuthErrorKind.INVALID_CREDENTIAL,
    "wrong-password": AuthErrorKind.INVALID_CREDENTIAL,
    "weak-password": AuthErrorKind.WEAK_PASSWORD,
    "invalid-email": AuthErrorKind.INVALID_EMAIL,
    "too-many-requests": AuthErrorKind.TOO_MANY_REQUESTS,
    "configuration-not-found": AuthErrorKind.CONFIGURATION_MISSING,
    "admin-restricted-operation": AuthErrorKind.ANONYMOUS_DISABLED,
    "operation-not-allowed": AuthErrorKind.ANONYMOUS_DISABLED,
    "unauthorized-domain": AuthErrorKind.DOMAIN_UNAUTHORIZED,
    "popup-blocked": AuthErrorKind.POPUP_BLOCKED,
    "popup-closed-by-user": AuthErrorKind.POPUP_CANCELLED,
    "cancelled-popup-request": AuthErrorKind.OPERATION_CANCELLED,
}


def normalize_code(raw_code: Optional[str]) -> str:
    """'auth/Email-Already-In-Use ' -> 'email-already-in-use'"""
    code = (raw_code or "").strip().lower()
    if code.startswith(PROVIDER_CODE_PREFIX):
        code = code[len(PROVIDER_CODE_PREFIX):]
    return code


def classify(raw_code: Optional[str]) -> AuthErrorKind:
    """Classify a raw provider error code."""
    return ERROR_CODE_KINDS.get(normalize_code(raw_code), AuthErrorKind.UNKNOWN)


def to_auth_error(raw_code: Optional[str], message: Optional[str] = None) -> AuthError:
    """Build the classified AuthError for one failed operation."""
    return AuthError(
        kind=classify(raw_code),
        raw_code=raw_code or "",
        message=message or "",
    )
