"""Format validators for common input types.

Every validator here follows the same contract: it returns ``True`` when the
value is acceptable and a human-readable error message otherwise. They never
raise for bad input, which lets them be used directly as ``validate``
callables in a rule or composed with :func:`combine_validators`.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

ValidatorResult = bool | str

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
_PROTOCOL_PREFIX = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")

CARD_PATTERNS: dict[str, re.Pattern[str]] = {
    "visa": re.compile(r"^4"),
    "mastercard": re.compile(r"^5[1-5]"),
    "amex": re.compile(r"^3[47]"),
    "discover": re.compile(r"^6(?:011|5)"),
    "diners": re.compile(r"^3(?:0[0-5]|[68])"),
    "jcb": re.compile(r"^35"),
}

EXECUTABLE_EXTENSIONS = frozenset({"exe", "dll", "bat", "cmd", "sh", "app"})

DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
)


def _is_blank(value: Any) -> bool:
    return not value or (isinstance(value, str) and value.strip() == "")


def validate_email(
    email: str | None,
    required: bool = False,
    allow_empty: bool | None = None,
    max_length: int = 254,
    domains: Iterable[str] | None = None,
    blocked_domains: Iterable[str] | None = None,
    message: str = "Invalid email address",
) -> ValidatorResult:
    """Validate an email address.

    Args:
        email: Address to check
        required: Whether an empty value is an error
        allow_empty: Overrides ``required`` for empty values (defaults to
            ``not required``)
        max_length: Maximum address length
        domains: If given, the domain must be one of these (case-insensitive)
        blocked_domains: Domains that are rejected (case-insensitive)
        message: Message for a malformed address

    Returns:
        True if valid, error message if invalid
    """
    if allow_empty is None:
        allow_empty = not required
    if _is_blank(email):
        return True if allow_empty else "Email is required"
    if not isinstance(email, str):
        return message

    if len(email) > max_length:
        return f"Email must be less than {max_length} characters"

    if not EMAIL_PATTERN.match(email):
        return message

    domain = email.split("@")[1].lower()

    allowed = list(domains or [])
    if allowed and domain not in {d.lower() for d in allowed}:
        return f"Email domain must be one of: {', '.join(allowed)}"

    if blocked_domains and domain in {d.lower() for d in blocked_domains}:
        return "This email domain is not allowed"

    return True


def validate_url(
    url: str | None,
    required: bool = False,
    allow_empty: bool | None = None,
    protocols: Iterable[str] = ("http", "https"),
    require_protocol: bool = True,
    require_tld: bool = True,
    max_length: int = 2048,
    message: str = "Invalid URL",
) -> ValidatorResult:
    """Validate a URL.

    When ``require_protocol`` is False and the value has no ``scheme://``
    prefix, ``https://`` is assumed before parsing.

    Args:
        url: URL to check
        required: Whether an empty value is an error
        allow_empty: Overrides ``required`` for empty values
        protocols: Accepted schemes, without the trailing colon
        require_protocol: Reject values without an explicit scheme
        require_tld: Require a dotted hostname
        max_length: Maximum URL length
        message: Message for an unparseable URL

    Returns:
        True if valid, error message if invalid
    """
    if allow_empty is None:
        allow_empty = not required
    if _is_blank(url):
        return True if allow_empty else "URL is required"
    if not isinstance(url, str):
        return message

    if len(url) > max_length:
        return f"URL must be less than {max_length} characters"

    candidate = url
    if not require_protocol and not _PROTOCOL_PREFIX.match(url):
        candidate = f"https://{url}"

    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
    except ValueError:
        return message

    if not parts.scheme or any(ch.isspace() for ch in candidate):
        return message

    accepted = list(protocols)
    if parts.scheme.lower() not in accepted:
        return f"URL protocol must be one of: {', '.join(accepted)}"

    if not hostname:
        return message

    if require_tld and ("." not in hostname or hostname.endswith(".")):
        return "URL must include a valid domain"

    return True


def validate_phone(
    phone: str | None,
    required: bool = False,
    allow_empty: bool | None = None,
    country: str | None = "US",
    format: str = "any",
    message: str = "Invalid phone number",
) -> ValidatorResult:
    """Validate a phone number.

    US numbers must have 10 digits, or 11 with a leading ``1``. For other
    countries ``format="e164"`` enforces ``+<country><number>`` and any
    format accepts 7 to 15 digits.
    """
    if allow_empty is None:
        allow_empty = not required
    if _is_blank(phone):
        return True if allow_empty else "Phone number is required"
    if not isinstance(phone, str):
        return message

    digits = re.sub(r"\D", "", phone)

    if country == "US":
        if len(digits) == 10 or (len(digits) == 11 and digits[0] == "1"):
            return True
        return "Phone number must be 10 digits"

    if format == "e164" and not _E164_PATTERN.match(phone):
        return "Phone number must be in E.164 format (+1234567890)"

    if len(digits) < 7 or len(digits) > 15:
        return message

    return True


@dataclass(frozen=True)
class PasswordRule:
    """Extra password rule: ``check`` returns True or a message."""

    check: Callable[[str], ValidatorResult]
    message: str | None = None


def validate_password(
    password: str | None,
    required: bool = True,
    min_length: int = 8,
    max_length: int = 128,
    require_uppercase: bool = True,
    require_lowercase: bool = True,
    require_numbers: bool = True,
    require_special_chars: bool = True,
    special_chars: str = "!@#$%^&*()_+-=[]{}|;:,.<>?",
    banned_words: Iterable[str] = (),
    custom_rules: Iterable[PasswordRule] = (),
) -> ValidatorResult:
    """Validate password strength.

    All failing requirements are reported together, e.g.
    ``"Password must contain one uppercase letter, one number"``.
    """
    if not password:
        return "Password is required" if required else True

    problems = []

    if len(password) < min_length:
        problems.append(f"at least {min_length} characters")
    if len(password) > max_length:
        problems.append(f"no more than {max_length} characters")

    if require_uppercase and not re.search(r"[A-Z]", password):
        problems.append("one uppercase letter")
    if require_lowercase and not re.search(r"[a-z]", password):
        problems.append("one lowercase letter")
    if require_numbers and not re.search(r"\d", password):
        problems.append("one number")
    if require_special_chars and not any(ch in special_chars for ch in password):
        problems.append("one special character")

    lowered = password.lower()
    for word in banned_words:
        if word.lower() in lowered:
            problems.append(f'not contain "{word}"')

    for rule in custom_rules:
        outcome = rule.check(password)
        if outcome is not True:
            problems.append(rule.message or str(outcome))

    if problems:
        return f"Password must contain {', '.join(problems)}"

    return True


def validate_username(
    username: str | None,
    required: bool = True,
    min_length: int = 3,
    max_length: int = 20,
    allow_special_chars: bool = False,
    allow_spaces: bool = False,
    start_with_letter: bool = True,
    reserved: Iterable[str] = (),
    message: str = "Invalid username",
) -> ValidatorResult:
    """Validate a username against length, character and reserved-name rules."""
    if _is_blank(username):
        return "Username is required" if required else True
    if not isinstance(username, str):
        return message

    if len(username) < min_length:
        return f"Username must be at least {min_length} characters"
    if len(username) > max_length:
        return f"Username must be no more than {max_length} characters"

    if start_with_letter and not re.match(r"^[a-zA-Z]", username):
        return "Username must start with a letter"

    if allow_special_chars and allow_spaces:
        pattern = r"^[a-zA-Z0-9_\-. ]+$"
    elif allow_special_chars:
        pattern = r"^[a-zA-Z0-9_\-.]+$"
    elif allow_spaces:
        pattern = r"^[a-zA-Z0-9 ]+$"
    else:
        pattern = r"^[a-zA-Z0-9]+$"

    if not re.match(pattern, username):
        return message

    if username.lower() in {r.lower() for r in reserved}:
        return "This username is not available"

    return True


def detect_card_type(card_number: str) -> str | None:
    """Detect the card network from the number prefix."""
    for card_type, pattern in CARD_PATTERNS.items():
        if pattern.match(card_number):
            return card_type
    return None


def luhn_checksum_ok(digits: str) -> bool:
    """Check a digit string with the Luhn algorithm."""
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def validate_credit_card(
    card_number: str | None,
    required: bool = True,
    allow_empty: bool | None = None,
    accepted_types: Iterable[str] = ("visa", "mastercard", "amex", "discover"),
) -> ValidatorResult:
    """Validate a card number: digits only, 13 to 19 long, accepted network, Luhn."""
    if allow_empty is None:
        allow_empty = not required
    if _is_blank(card_number):
        return True if allow_empty else "Card number is required"
    if not isinstance(card_number, str):
        return "Card number must contain only digits"

    cleaned = re.sub(r"[\s-]", "", card_number)

    if not cleaned.isdigit() or not cleaned.isascii():
        return "Card number must contain only digits"

    if len(cleaned) < 13 or len(cleaned) > 19:
        return "Invalid card number length"

    accepted = list(accepted_types)
    card_type = detect_card_type(cleaned)
    if card_type and card_type not in accepted:
        return f"Card type not accepted. Accepted types: {', '.join(accepted)}"

    if not luhn_checksum_ok(cleaned):
        return "Invalid card number"

    return True


def to_datetime(value: Any) -> datetime:
    """Coerce a date, datetime or date string to a datetime.

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty string cannot be converted to datetime")

        for fmt in DATETIME_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue

        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass

        raise ValueError(f"Cannot parse '{value}' as datetime")
    raise ValueError(f"Cannot convert {type(value).__name__} to datetime")


def _aligned(left: datetime, right: datetime) -> tuple[datetime, datetime]:
    """Make two datetimes comparable; naive values are taken as local time."""
    if (left.tzinfo is None) == (right.tzinfo is None):
        return left, right
    if left.tzinfo is None:
        return left.astimezone(), right
    return left, right.astimezone()


def validate_date(
    value: Any,
    required: bool = False,
    allow_empty: bool | None = None,
    min_date: Any = None,
    max_date: Any = None,
    allow_future: bool = True,
    allow_past: bool = True,
    message: str = "Invalid date",
) -> ValidatorResult:
    """Validate a date or date string against bounds and a future/past policy.

    "Now" is read when the function is called.
    """
    if allow_empty is None:
        allow_empty = not required
    if value is None or value == "":
        return True if allow_empty else "Date is required"

    if not isinstance(value, (str, date)):
        return message
    try:
        moment = to_datetime(value)
    except ValueError:
        return message

    now, moment_now = _aligned(datetime.now(), moment)
    if not allow_future and moment_now > now:
        return "Future dates are not allowed"
    if not allow_past and moment_now < now:
        return "Past dates are not allowed"

    if min_date is not None:
        lower, current = _aligned(to_datetime(min_date), moment)
        if current < lower:
            return f"Date must be after {lower.date().isoformat()}"

    if max_date is not None:
        upper, current = _aligned(to_datetime(max_date), moment)
        if current > upper:
            return f"Date must be before {upper.date().isoformat()}"

    return True


@dataclass(frozen=True)
class FileInfo:
    """Minimal description of an uploaded file."""

    name: str
    size: int
    type: str = ""


def _file_attr(file: Any, attr: str, default: Any) -> Any:
    if isinstance(file, Mapping):
        return file.get(attr, default)
    return getattr(file, attr, default)


def format_file_size(size: int) -> str:
    """Render a byte count as e.g. ``"1.5 KB"``."""
    units = ["Bytes", "KB", "MB", "GB"]
    if size <= 0:
        return "0 Bytes"
    exponent = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    scaled = round(size / 1024**exponent, 2)
    return f"{scaled:g} {units[exponent]}"


def _extension(name: str) -> str:
    return name.rsplit(".", 1)[-1].lower()


def validate_file(
    file: Any,
    required: bool = False,
    allow_empty: bool | None = None,
    max_size: int = 10 * 1024 * 1024,
    min_size: int = 0,
    accepted_types: Iterable[str] = (),
    accepted_extensions: Iterable[str] = (),
    reject_executable: bool = True,
) -> ValidatorResult:
    """Validate an uploaded file's size, MIME type and extension.

    Args:
        file: A FileInfo, a mapping or any object with ``name``, ``size``
            and ``type``
        accepted_types: MIME types; ``*`` acts as a wildcard (``image/*``)
        accepted_extensions: Extensions without the dot, case-insensitive
        reject_executable: Reject common executable extensions
    """
    if allow_empty is None:
        allow_empty = not required
    if not file:
        return True if allow_empty else "File is required"

    size = _file_attr(file, "size", 0) or 0
    name = _file_attr(file, "name", "") or ""
    mime = _file_attr(file, "type", "") or ""

    if size > max_size:
        return f"File size must be less than {format_file_size(max_size)}"
    if size < min_size:
        return f"File size must be at least {format_file_size(min_size)}"

    types = list(accepted_types)
    if types:
        def matches(accepted: str) -> bool:
            if "*" in accepted:
                return re.fullmatch(re.escape(accepted).replace(r"\*", ".*"), mime) is not None
            return mime == accepted

        if not any(matches(t) for t in types):
            return f"File type must be one of: {', '.join(types)}"

    extensions = list(accepted_extensions)
    if extensions and _extension(name) not in {e.lower() for e in extensions}:
        return f"File extension must be one of: {', '.join(extensions)}"

    if reject_executable and _extension(name) in EXECUTABLE_EXTENSIONS:
        return "Executable files are not allowed"

    return True


def _unique_key(item: Any) -> Hashable:
    if isinstance(item, (dict, list, tuple)):
        try:
            return ("json", json.dumps(item, sort_keys=True, default=str))
        except TypeError:
            # mixed key types cannot be sorted
            if isinstance(item, dict):
                return ("items", repr(sorted(item.items(), key=repr)))
            return ("repr", repr(item))
    if isinstance(item, bool):
        return ("bool", item)
    if isinstance(item, Hashable):
        return ("value", item)
    return ("repr", repr(item))


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def validate_array(
    items: Any,
    required: bool = False,
    min_length: int = 0,
    max_length: int | None = None,
    unique_items: bool = False,
    item_validator: Callable[[Any, int], ValidatorResult] | None = None,
) -> ValidatorResult:
    """Validate a list's length, uniqueness and, optionally, each item.

    Uniqueness compares dicts and lists structurally through their canonical
    JSON encoding.
    """
    if not isinstance(items, (list, tuple)):
        return "At least one item is required" if required and not items else True

    if len(items) < min_length:
        return f"At least {min_length} item{_plural(min_length)} required"

    if max_length is not None and len(items) > max_length:
        return f"Maximum {max_length} item{_plural(max_length)} allowed"

    if unique_items:
        keys = [_unique_key(item) for item in items]
        if len(set(keys)) != len(keys):
            return "Duplicate items are not allowed"

    if item_validator is not None:
        for index, item in enumerate(items):
            outcome = item_validator(item, index)
            if outcome is not True:
                return f"Item {index + 1}: {outcome}"

    return True


def validate_number(
    value: Any,
    required: bool = False,
    min: float | None = None,
    max: float | None = None,
    integer: bool = False,
    positive: bool = False,
    negative: bool = False,
    multiple_of: float | None = None,
) -> ValidatorResult:
    """Validate a number or numeric string."""
    if value is None or value == "":
        return "Number is required" if required else True

    try:
        number = float(value)
    except (TypeError, ValueError):
        return "Must be a valid number"
    if math.isnan(number):
        return "Must be a valid number"

    if integer and not number.is_integer():
        return "Must be an integer"
    if positive and number <= 0:
        return "Must be a positive number"
    if negative and number >= 0:
        return "Must be a negative number"
    if min is not None and number < min:
        return f"Must be at least {min}"
    if max is not None and number > max:
        return f"Must be no more than {max}"
    if multiple_of is not None and number % multiple_of != 0:
        return f"Must be a multiple of {multiple_of}"

    return True


def create_validator(
    check: Callable[..., Any], message: str = "Validation failed"
) -> Callable[..., ValidatorResult]:
    """Wrap a predicate so it follows the True-or-message contract.

    A falsy result or an exception inside ``check`` becomes ``message``;
    exceptions are logged.
    """

    def wrapped(value: Any, **options: Any) -> ValidatorResult:
        try:
            outcome = check(value, **options)
        except Exception:
            logger.exception(f"Validator {getattr(check, '__name__', check)!s} raised")
            return message
        if outcome is True:
            return True
        return outcome or message

    return wrapped


def combine_validators(*validators: Callable[..., ValidatorResult]) -> Callable[..., ValidatorResult]:
    """Chain validators; the first failure's message is returned."""

    def combined(value: Any, **options: Any) -> ValidatorResult:
        for validator in validators:
            outcome = validator(value, **options)
            if outcome is not True:
                return outcome
        return True

    return combined
