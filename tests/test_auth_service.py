import pytest

from config.auth import decode_access_token
from models.repositories import ProfileRepository
from services.auth_service import AuthService, validate_sign_in_form, validate_sign_up_form
from services.errors import AuthenticationError, RateLimitError, ValidationError


class TestSignUpForm:
    def test_valid_form(self):
        """A complete, matching form passes."""
        assert validate_sign_up_form("ada@example.com", "secret1", "secret1", "Ada") is None

    @pytest.mark.parametrize("email,password,confirm,name,expected", [
        ("", "secret1", "secret1", "Ada", "Please fill in all fields"),
        ("ada@example.com", "secret1", "secret1", "  ", "Please fill in all fields"),
        ("ada@example.com", "secret1", "secret2", "Ada", "Passwords do not match"),
        ("ada@example.com", "abc", "abc", "Ada", "Password must be at least 6 characters long"),
        ("not-an-email", "secret1", "secret1", "Ada", "Please enter a valid email address"),
    ])
    def test_invalid_forms(self, email, password, confirm, name, expected):
        """The first failing rule decides the message."""
        assert validate_sign_up_form(email, password, confirm, name) == expected

    def test_sign_in_form(self):
        """Sign in only needs an email-shaped address and a password."""
        assert validate_sign_in_form("ada@example.com", "x") is None
        assert validate_sign_in_form("ada@example.com", "") == "Please fill in all fields"
        assert validate_sign_in_form("ada", "x") == "Please enter a valid email address"


class TestSignUpAndSignIn:
    def test_sign_up_creates_profile_and_token(self, db):
        """Emails are normalised and the token identifies the new profile."""
        result = AuthService(db).sign_up("  Ada@Example.COM ", "secret1", "Ada Obi")

        assert result.profile.Email == "ada@example.com"
        assert result.profile.FullName == "Ada Obi"
        user = decode_access_token(result.access_token)
        assert user.user_id == result.profile.ProfileId
        assert user.name == "Ada Obi"

    def test_password_is_hashed(self, db):
        """The stored credential is an Argon2 hash, not the password."""
        result = AuthService(db).sign_up("ada@example.com", "secret1", "Ada")
        credential = ProfileRepository(db).get_credential(result.profile.ProfileId)
        assert credential.PasswordHash.startswith("$argon2")
        assert "secret1" not in credential.PasswordHash

    def test_duplicate_email_rejected(self, db):
        """A second account for the same email points the user to sign in."""
        service = AuthService(db)
        service.sign_up("ada@example.com", "secret1", "Ada")
        with pytest.raises(ValidationError, match="already exists"):
            service.sign_up("ADA@example.com", "secret2", "Ada Again")

    def test_short_password_rejected(self, db):
        with pytest.raises(ValidationError, match="at least 6 characters"):
            AuthService(db).sign_up("ada@example.com", "abc", "Ada")

    def test_sign_in_with_correct_password(self, db):
        """Signing in returns a fresh token for the same profile."""
        service = AuthService(db)
        created = service.sign_up("ada@example.com", "secret1", "Ada")

        result = service.sign_in("ada@example.com", "secret1")

        assert result.user.user_id == created.user.user_id
        assert result.access_token != created.access_token

    def test_wrong_password_is_generic(self, db):
        """Wrong passwords and unknown emails share one message."""
        service = AuthService(db)
        service.sign_up("ada@example.com", "secret1", "Ada")

        with pytest.raises(AuthenticationError) as wrong_password:
            service.sign_in("ada@example.com", "nope-nope")
        with pytest.raises(AuthenticationError) as unknown_email:
            service.sign_in("nobody@example.com", "secret1")

        assert wrong_password.value.message == AuthService.INVALID_CREDENTIALS
        assert unknown_email.value.message == AuthService.INVALID_CREDENTIALS

    def test_repeated_failures_are_rate_limited(self, db):
        """After max_sign_in_attempts failures even the right password is refused."""
        service = AuthService(db)
        service.sign_up("ada@example.com", "secret1", "Ada")
        for _ in range(service.settings.max_sign_in_attempts):
            with pytest.raises(AuthenticationError):
                service.sign_in("ada@example.com", "wrong-password")

        with pytest.raises(RateLimitError):
            service.sign_in("ada@example.com", "secret1")


class TestSignOut:
    def test_signed_out_token_is_rejected(self, db):
        """Sign-out revokes the token's jti."""
        service = AuthService(db)
        token = service.sign_up("ada@example.com", "secret1", "Ada").access_token
        assert service.verify_access_token(token).name == "Ada"

        service.sign_out(token)

        with pytest.raises(AuthenticationError, match="signed out"):
            service.verify_access_token(token)

    def test_sign_out_with_garbage_token_is_noop(self, db):
        """Bad tokens are ignored rather than raising."""
        AuthService(db).sign_out("not-a-jwt")

    def test_malformed_token_rejected(self, db):
        with pytest.raises(AuthenticationError, match="Invalid session token"):
            AuthService(db).verify_access_token("not-a-jwt")


class TestPasswordReset:
    def test_reset_flow(self, db):
        """A reset token sets a new password once."""
        service = AuthService(db)
        service.sign_up("ada@example.com", "secret1", "Ada")

        token = service.reset_password("ada@example.com")
        service.confirm_password_reset(token, "new-secret")

        assert service.sign_in("ada@example.com", "new-secret").profile.Email == "ada@example.com"
        with pytest.raises(AuthenticationError):
            service.sign_in("ada@example.com", "secret1")

    def test_reset_token_is_single_use(self, db):
        service = AuthService(db)
        service.sign_up("ada@example.com", "secret1", "Ada")
        token = service.reset_password("ada@example.com")
        service.confirm_password_reset(token, "new-secret")

        with pytest.raises(ValidationError, match="invalid or has expired"):
            service.confirm_password_reset(token, "another-secret")

    def test_unknown_email_returns_none(self, db):
        """Unknown emails don't reveal whether an account exists."""
        assert AuthService(db).reset_password("nobody@example.com") is None

    def test_invalid_email_rejected(self, db):
        with pytest.raises(ValidationError):
            AuthService(db).reset_password("nobody")

    def test_unknown_token_rejected(self, db):
        with pytest.raises(ValidationError, match="invalid or has expired"):
            AuthService(db).confirm_password_reset("made-up", "new-secret")


class TestUsernameAvailability:
    def test_taken_username(self, db, make_profile):
        """Availability checks are case-insensitive."""
        make_profile("ada@example.com", username="chef_ada")
        service = AuthService(db)

        assert not service.check_username_availability("Chef_Ada")
        assert service.check_username_availability("chef_bola")
        assert not service.check_username_availability("  ")
