"""Tests for the format validators."""

from datetime import datetime, timedelta, timezone

import pytest

from formcheck_validation.formats import (
    FileInfo,
    PasswordRule,
    combine_validators,
    create_validator,
    detect_card_type,
    format_file_size,
    to_datetime,
    validate_array,
    validate_credit_card,
    validate_date,
    validate_email,
    validate_file,
    validate_number,
    validate_password,
    validate_phone,
    validate_url,
    validate_username,
)


class TestValidateEmail:
    """Test email validation."""

    def test_valid_and_invalid(self):
        """Test basic address shapes."""
        assert validate_email("user.name+tag@example.co.uk") is True
        assert validate_email("not-an-email") == "Invalid email address"
        assert validate_email("a@b@c.com") == "Invalid email address"

    def test_non_string_values(self):
        """Test non-string input is reported instead of raising."""
        assert validate_email(12345) == "Invalid email address"
        assert validate_url(["http://x.com"]) == "Invalid URL"
        assert validate_phone(5551234567) == "Invalid phone number"
        assert validate_username(42) == "Invalid username"
        assert validate_credit_card(4111111111111111) == "Card number must contain only digits"

    def test_empty_handling(self):
        """Test empty values depend on required."""
        assert validate_email("") is True
        assert validate_email("  ", required=True) == "Email is required"

    def test_domain_allow_list(self):
        """Test that only listed domains are accepted."""
        assert validate_email("a@good.com", domains=["good.com"]) is True
        assert validate_email("a@GOOD.com", domains=["good.com"]) is True
        assert validate_email("a@evil.com", domains=["good.com"]) == (
            "Email domain must be one of: good.com"
        )

    def test_blocked_domains(self):
        """Test blocked domains are rejected."""
        assert validate_email("a@spam.io", blocked_domains=["spam.io"]) == (
            "This email domain is not allowed"
        )

    def test_max_length(self):
        """Test overly long addresses."""
        assert validate_email("a" * 20 + "@x.com", max_length=10).startswith("Email must be less than")


class TestValidateUrl:
    """Test URL validation."""

    def test_valid_urls(self):
        """Test ordinary http(s) URLs."""
        assert validate_url("https://example.com/path?q=1") is True
        assert validate_url("http://sub.example.org") is True

    def test_protocol_rules(self):
        """Test protocol requirements."""
        assert validate_url("example.com") == "Invalid URL"
        assert validate_url("example.com", require_protocol=False) is True
        assert validate_url("ftp://example.com") == "URL protocol must be one of: http, https"
        assert validate_url("ftp://example.com", protocols=["ftp"]) is True

    def test_tld_required(self):
        """Test hostnames without a dot."""
        assert validate_url("http://localhost") == "URL must include a valid domain"
        assert validate_url("http://localhost", require_tld=False) is True

    def test_whitespace_rejected(self):
        """Test URLs containing spaces."""
        assert validate_url("http://exa mple.com") == "Invalid URL"


class TestValidatePhone:
    """Test phone validation."""

    def test_us_numbers(self):
        """Test 10 digits, or 11 with a leading 1."""
        assert validate_phone("(555) 123-4567") is True
        assert validate_phone("1-555-123-4567") is True
        assert validate_phone("555-1234") == "Phone number must be 10 digits"

    def test_international(self):
        """Test E.164 and digit-count rules."""
        assert validate_phone("+447911123456", country=None, format="e164") is True
        assert validate_phone("07911 123456", country=None, format="e164").startswith(
            "Phone number must be in E.164"
        )
        assert validate_phone("123", country=None) == "Invalid phone number"


class TestValidatePassword:
    """Test password strength rules."""

    def test_strong_password(self):
        """Test a password meeting every requirement."""
        assert validate_password("Str0ng!pass") is True

    def test_reports_all_problems(self):
        """Test all failing requirements appear in one message."""
        assert validate_password("weakpass") == (
            "Password must contain one uppercase letter, one number, one special character"
        )

    def test_banned_words_and_custom_rules(self):
        """Test banned words and extra rules."""
        no_repeats = PasswordRule(lambda p: "aaa" not in p or "no repeats", message="no repeated runs")
        outcome = validate_password(
            "Passw0rd!aaa", banned_words=["passw0rd"], custom_rules=[no_repeats]
        )
        assert outcome == 'Password must contain not contain "passw0rd", no repeated runs'

    def test_required(self):
        """Test missing passwords."""
        assert validate_password("") == "Password is required"
        assert validate_password("", required=False) is True


class TestValidateUsername:
    """Test username rules."""

    def test_rules(self):
        """Test length, first letter, charset and reserved names."""
        assert validate_username("alice99") is True
        assert validate_username("al") == "Username must be at least 3 characters"
        assert validate_username("9lives") == "Username must start with a letter"
        assert validate_username("bob.smith") == "Invalid username"
        assert validate_username("bob.smith", allow_special_chars=True) is True
        assert validate_username("Admin", reserved=["admin"]) == "This username is not available"


class TestValidateCreditCard:
    """Test card number validation."""

    def test_luhn(self):
        """Test the Luhn checksum."""
        assert validate_credit_card("4111111111111111") is True
        assert validate_credit_card("4111111111111112") == "Invalid card number"

    def test_formatting_and_length(self):
        """Test separators, non-digits and length."""
        assert validate_credit_card("4111 1111-1111 1111") is True
        assert validate_credit_card("4111abcd11111111") == "Card number must contain only digits"
        assert validate_credit_card("411111") == "Invalid card number length"

    def test_accepted_types(self):
        """Test networks outside the accepted list."""
        assert detect_card_type("378282246310005") == "amex"
        assert validate_credit_card("378282246310005", accepted_types=["visa"]).startswith(
            "Card type not accepted"
        )


class TestValidateDate:
    """Test date validation."""

    def test_parsing(self):
        """Test date strings and invalid input."""
        assert validate_date("2024-02-29") is True
        assert validate_date("02/29/2024") is True
        assert validate_date("not a date") == "Invalid date"
        assert validate_date(12345) == "Invalid date"

    def test_future_and_past(self):
        """Test the future/past policy."""
        assert validate_date("2999-01-01", allow_future=False) == "Future dates are not allowed"
        assert validate_date("1999-01-01", allow_past=False) == "Past dates are not allowed"

    def test_bounds(self):
        """Test min and max dates."""
        assert validate_date("2019-06-01", min_date="2020-01-01") == "Date must be after 2020-01-01"
        assert validate_date("2021-06-01", max_date="2020-12-31") == "Date must be before 2020-12-31"
        assert validate_date("2020-06-01", min_date="2020-01-01", max_date="2020-12-31") is True

    def test_timezone_aware_value(self):
        """Test aware timestamps compare with naive bounds."""
        assert validate_date("2020-06-01T12:00:00+02:00", min_date="2020-01-01") is True

    def test_utc_suffix_is_timezone_aware(self):
        """Test a trailing Z is read as UTC, not local time."""
        assert to_datetime("2024-01-01T10:00:00Z").tzinfo is not None
        assert to_datetime("2024-01-01T10:00:00.123456Z").utcoffset() == timedelta(0)

        soon = (datetime.now(timezone.utc) + timedelta(minutes=5)).strftime("%Y-%m-%dT%H:%M:%SZ")
        assert validate_date(soon, allow_future=False) == "Future dates are not allowed"


class TestValidateFile:
    """Test file validation."""

    def test_size_limits(self):
        """Test maximum and minimum sizes."""
        big = FileInfo("photo.png", 2048, "image/png")
        assert validate_file(big, max_size=1024) == "File size must be less than 1 KB"
        assert validate_file(big, min_size=4096) == "File size must be at least 4 KB"

    def test_types_and_extensions(self):
        """Test MIME wildcards and extensions."""
        photo = {"name": "photo.PNG", "size": 10, "type": "image/png"}
        assert validate_file(photo, accepted_types=["image/*"]) is True
        assert validate_file(photo, accepted_types=["application/pdf"]) == (
            "File type must be one of: application/pdf"
        )
        assert validate_file(photo, accepted_extensions=["png"]) is True
        assert validate_file(photo, accepted_extensions=["jpg"]) == "File extension must be one of: jpg"

    def test_executables_rejected(self):
        """Test executable extensions."""
        assert validate_file(FileInfo("setup.exe", 10)) == "Executable files are not allowed"

    def test_format_file_size(self):
        """Test human-readable sizes."""
        assert format_file_size(0) == "0 Bytes"
        assert format_file_size(1536) == "1.5 KB"
        assert format_file_size(10 * 1024 * 1024) == "10 MB"


class TestValidateArray:
    """Test array validation."""

    def test_length(self):
        """Test item count limits."""
        assert validate_array([1], min_length=2) == "At least 2 items required"
        assert validate_array([1, 2], max_length=1) == "Maximum 1 item allowed"

    def test_unique_items_compares_structure(self):
        """Test dicts with the same content count as duplicates."""
        assert validate_array([{"a": 1, "b": 2}, {"b": 2, "a": 1}], unique_items=True) == (
            "Duplicate items are not allowed"
        )
        assert validate_array([1, True], unique_items=True) is True

    def test_unique_items_with_mixed_key_types(self):
        """Test dicts mixing int and str keys are compared without raising."""
        assert validate_array([{1: "a", "b": 2}], unique_items=True) is True
        assert validate_array([{1: "a", "b": 2}, {"b": 2, 1: "a"}], unique_items=True) == (
            "Duplicate items are not allowed"
        )

    def test_item_validator(self):
        """Test per-item checks report a 1-based position."""
        def positive(item, index):
            return item > 0 or "must be positive"

        assert validate_array([1, -1], item_validator=positive) == "Item 2: must be positive"


class TestValidateNumber:
    """Test numeric validation."""

    def test_numbers_and_strings(self):
        """Test numeric strings and constraints."""
        assert validate_number("42", integer=True, min=0) is True
        assert validate_number("abc") == "Must be a valid number"
        assert validate_number(4.5, integer=True) == "Must be an integer"
        assert validate_number(10, multiple_of=3) == "Must be a multiple of 3"
        assert validate_number(-1, positive=True) == "Must be a positive number"


class TestComposition:
    """Test validator helpers."""

    def test_create_validator(self):
        """Test predicates become True-or-message validators."""
        is_even = create_validator(lambda v: v % 2 == 0, "Must be even")
        assert is_even(2) is True
        assert is_even(3) == "Must be even"
        assert is_even("x") == "Must be even"

    def test_combine_validators(self):
        """Test the first failing message wins."""
        check = combine_validators(validate_email, lambda v: v.endswith(".com") or "Must be .com")
        assert check("a@b.com") is True
        assert check("a@b.org") == "Must be .com"
        assert check("bad") == "Invalid email address"
