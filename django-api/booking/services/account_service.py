"""Account service - password reset via emailed one-time passcode."""

import logging
import re

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from booking.domain.errors import InvalidInputError
from booking.stores.interfaces import TicketingApi

logger = logging.getLogger(__name__)

OTP_PATTERN = re.compile(r"^\d{4,8}$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d@$!%*?&]{8,}$")


def _clean_email(email: str) -> str:
    email = (email or "").strip().lower()
    try:
        validate_email(email)
    except ValidationError as e:
        raise InvalidInputError("Enter a valid email address") from e
    return email


def _clean_otp(otp: str) -> str:
    otp = (otp or "").strip()
    if not OTP_PATTERN.match(otp):
        raise InvalidInputError("Enter the code sent to your email")
    return otp


class AccountService:
    """Service for the forgot-password -> verify OTP -> reset flow."""

    def __init__(self, api: TicketingApi) -> None:
        self._api = api

    def request_reset(self, email: str) -> None:
        self._api.forgot_password(_clean_email(email))
        logger.info("Password reset code requested")

    def verify_otp(self, email: str, otp: str) -> bool:
        return self._api.verify_reset_otp(_clean_email(email), _clean_otp(otp))

    def reset_password(self, email: str, otp: str, new_password: str) -> None:
        """Set a new password.

        Raises:
            InvalidInputError: If the email, code or password is malformed.
        """
        email = _clean_email(email)
        otp = _clean_otp(otp)
        if not PASSWORD_PATTERN.match(new_password or ""):
            raise InvalidInputError(
                "Password must be at least 8 characters with upper and lower case letters and a number"
            )
        self._api.reset_password(email, otp, new_password)
        logger.info("Password reset completed")
