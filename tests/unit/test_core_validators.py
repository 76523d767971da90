import pytest

from auth0_manager.core.validators import PasswordPolicy, is_email


class TestIsEmail:
    @pytest.mark.parametrize("value", ["user@example.com", "first.last+tag@sub.example.org"])
    def test_valid(self, value):
        assert is_email(value) is True

    @pytest.mark.parametrize(
        "value",
        ["", "no-at-symbol", "user@", "@domain.com", "user@example", "a b@example.com", None, 42, "auth0|123"],
    )
    def test_invalid(self, value):
        assert is_email(value) is False


class TestPasswordPolicy:
    def test_weak_password_lists_every_violation(self):
        result = PasswordPolicy().test("iamweak")
        assert result.strong is False
        assert result.errors == [
            "The password must be at least 10 characters long.",
            "The password must contain at least one uppercase letter.",
            "The password must contain at least one number.",
            "The password must contain at least one special character.",
        ]
        assert result.required_test_errors == ["The password must be at least 10 characters long."]

    def test_strong_password(self):
        result = PasswordPolicy().test("Iam1$trongPassword")
        assert result.strong is True
        assert result.errors == []
        assert result.optional_tests_passed == 4

    def test_repeated_characters_fail_a_required_test(self):
        result = PasswordPolicy().test("Paaassword1!")
        assert result.strong is False
        assert result.errors == [
            "The password may not contain sequences of three or more repeated characters."
        ]

    def test_max_length(self):
        result = PasswordPolicy(max_length=16).test("Abcdefgh1!Abcdefgh1!")
        assert "The password must be fewer than 16 characters." in result.errors

    def test_passphrase_skips_optional_tests(self):
        result = PasswordPolicy().test("correct horse battery staple")
        assert result.is_passphrase is True
        assert result.strong is True
        assert result.optional_test_errors == []

    def test_passphrases_can_be_disabled(self):
        result = PasswordPolicy(allow_passphrases=False).test("correct horse battery staple")
        assert result.is_passphrase is False
        assert result.strong is False

    def test_min_optional_tests_is_configurable(self):
        assert PasswordPolicy(min_optional_tests=3).test("lowercase123!").strong is True
        assert PasswordPolicy(min_optional_tests=4).test("lowercase123!").strong is False
