"""TOTP generation from an entry's ``otpauth://`` URL."""

from typing import Optional

import pyotp

from kpasscli.exceptions import OTPError


def generate_totp(otp_url: Optional[str], for_time=None) -> str:
    """Return the current TOTP token described by *otp_url*.

    Args:
        otp_url: A ``otpauth://totp/...`` URL as stored by KeePassXC.
        for_time: Optional datetime or unix timestamp to generate for.

    Raises:
        OTPError: If the URL is missing, malformed, or not a TOTP URL.
    """
    if not otp_url:
        raise OTPError("Entry has no TOTP configuration")

    try:
        otp = pyotp.parse_uri(otp_url)
        if not isinstance(otp, pyotp.TOTP):
            raise OTPError("Only time-based (TOTP) one-time passwords are supported")
        # binascii.Error for a bad base32 secret is a ValueError
        return otp.now() if for_time is None else otp.at(for_time)
    except ValueError as exc:
        raise OTPError(f"Invalid OTP URL: {exc}") from exc
