# carcheck/services/registration.py
"""
Registration Normalizer — turns free-text input into a canonical VRM.

Canonical form: whitespace removed, upper-cased, 2–7 characters, at least
one letter and one digit. Used by every entry point (search, dashboard,
direct /check/{vrm} route).
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from carcheck.services.exceptions import InvalidRegistrationError

MIN_LENGTH = 2
MAX_LENGTH = 7

_WHITESPACE = re.compile(r"\s+")
_ALPHANUMERIC = re.compile(r"^[A-Z0-9]+$")
_CURRENT_STYLE = re.compile(r"^[A-Z]{2}(\d{2})[A-Z]{3}$")   # AB12 CDE (2001 onwards)
_SUFFIX_STYLE = re.compile(r"^[A-Z]{3}\d{3}[A-Z]$")         # ABC 123D (1963–1983)


@dataclass(frozen=True)
class Registration:
    value: str

    @classmethod
    def parse(cls, text: Optional[str]) -> "Registration":
        """Validate and canonicalise. Raises InvalidRegistrationError."""
        if not text:
            raise InvalidRegistrationError("Please enter a vehicle registration number", status_code=400)

        cleaned = _WHITESPACE.sub("", text).upper()

        if len(cleaned) < MIN_LENGTH or len(cleaned) > MAX_LENGTH:
            raise InvalidRegistrationError(
                f"Registration must be {MIN_LENGTH}-{MAX_LENGTH} characters long", status_code=400
            )
        if not _ALPHANUMERIC.match(cleaned):
            raise InvalidRegistrationError("Registration may only contain letters and numbers", status_code=400)
        if not (re.search(r"[A-Z]", cleaned) and re.search(r"\d", cleaned)):
            raise InvalidRegistrationError("Registration must contain at least one letter and one number", status_code=400)

        return cls(cleaned)

    @property
    def display(self) -> str:
        return format_registration(self)

    def __str__(self):
        return self.value


def normalize(text: Optional[str]) -> Union[Registration, InvalidRegistrationError]:
    """
    Non-raising entry point. Malformed input is an expected, user-correctable
    condition, so the error is returned rather than raised.
    """
    try:
        return Registration.parse(text)
    except InvalidRegistrationError as e:
        return e


def format_registration(vrm: Union[Registration, str]) -> str:
    """Spaced display form. Removing the spaces gives back the canonical token."""
    cleaned = _WHITESPACE.sub("", str(vrm)).upper()

    if len(cleaned) <= 4:
        return cleaned
    if _SUFFIX_STYLE.match(cleaned):
        return f"{cleaned[:3]} {cleaned[3:]}"
    return f"{cleaned[:4]} {cleaned[4:]}"


def plate_year(vrm: Union[Registration, str]) -> Optional[int]:
    """
    Year of first registration from a current-style age identifier.
    March plates carry the year (17 → 2017), September plates add 50 (67 → 2017).
    Returns None for any other plate style.
    """
    match = _CURRENT_STYLE.match(_WHITESPACE.sub("", str(vrm)).upper())
    if not match:
        return None
    code = int(match.group(1))
    if code >= 51:
        return 2000 + (code - 50)
    if code < 2:
        # Age identifiers start at 51 (Sept 2001); 00 and 01 were never issued
        return None
    return 2000 + code
