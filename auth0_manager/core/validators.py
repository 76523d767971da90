"""Input validation helpers for user data."""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, List

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_email(value: Any) -> bool:
    """Return True if ``value`` looks like an email address."""
    if not isinstance(value, str) or len(value) > 254:
        return False
    return bool(_EMAIL_PATTERN.match(value))


@dataclass
class PasswordTestResult:
    """Outcome of ``PasswordPolicy.test``."""

    strong: bool
    is_passphrase: bool
    errors: List[str] = field(default_factory=list)
    required_test_errors: List[str] = field(default_factory=list)
    optional_test_errors: List[str] = field(default_factory=list)
    passed_tests: List[int] = field(default_factory=list)
    failed_tests: List[int] = field(default_factory=list)
    optional_tests_passed: int = 0


@dataclass
class PasswordPolicy:
    """OWASP-style password strength test.

    Required tests (must all pass):
        0. at least ``min_length`` characters
        1. fewer than ``max_length`` characters
        2. no run of three or more identical characters

    Optional tests (``min_optional_tests`` of them must pass):
        3. a lowercase letter
        4. an uppercase letter
        5. a number
        6. a special character

    A password of ``min_phrase_length`` characters or more counts as a
    passphrase when ``allow_passphrases`` is set, and skips the optional tests.

    Usage:
        result = PasswordPolicy().test("Iam1$trongPassword")
        result.strong  # True
    """

    min_length: int = 10
    max_length: int = 128
    min_phrase_length: int = 20
    min_optional_tests: int = 4
    allow_passphrases: bool = True

    def _required_tests(self, password: str) -> List[str]:
        return [
            f"The password must be at least {self.min_length} characters long."
            if len(password) < self.min_length else "",
            f"The password must be fewer than {self.max_length} characters."
            if len(password) >= self.max_length else "",
            "The password may not contain sequences of three or more repeated characters."
            if re.search(r"(.)\1{2,}", password) else "",
        ]

    @staticmethod
    def _optional_tests(password: str) -> List[str]:
        return [
            "The password must contain at least one lowercase letter."
            if not re.search(r"[a-z]", password) else "",
            "The password must contain at least one uppercase letter."
            if not re.search(r"[A-Z]", password) else "",
            "The password must contain at least one number."
            if not re.search(r"[0-9]", password) else "",
            "The password must contain at least one special character."
            if not re.search(r"[^A-Za-z0-9]", password) else "",
        ]

    def test(self, password: str) -> PasswordTestResult:
        """Run every test against ``password``.

        Returns:
            PasswordTestResult; ``errors`` lists every violation in test order
        """
        password = password if isinstance(password, str) else str(password)
        result = PasswordTestResult(strong=True, is_passphrase=False)

        for index, error in enumerate(self._required_tests(password)):
            if error:
                result.strong = False
                result.errors.append(error)
                result.required_test_errors.append(error)
                result.failed_tests.append(index)
            else:
                result.passed_tests.append(index)

        if self.allow_passphrases and len(password) >= self.min_phrase_length:
            result.is_passphrase = True

        if not result.is_passphrase:
            offset = len(result.passed_tests) + len(result.failed_tests)
            for index, error in enumerate(self._optional_tests(password), start=offset):
                if error:
                    result.errors.append(error)
                    result.optional_test_errors.append(error)
                    result.failed_tests.append(index)
                else:
                    result.optional_tests_passed += 1
                    result.passed_tests.append(index)

        if (
            not result.is_passphrase
            and result.optional_tests_passed < self.min_optional_tests
        ):
            result.strong = False

        return result
