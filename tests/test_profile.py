import unittest
from unittest import mock

from lecturehub.profile import (
    INVALID_EMAIL,
    MISSING_DETAILS,
    NOT_SIGNED_IN,
    UPDATE_FAILED,
    ProfileValidationError,
    update_profile,
    validate_profile,
)
from lecturehub.remote import BackendError
from lecturehub.session import Session


class TestValidateProfile(unittest.TestCase):
    def test_valid(self) -> None:
        validate_profile("Asha K", "asha@example.com", "secret")

    def test_missing_field(self) -> None:
        for args in (("", "a@b.co", "x"), ("Asha", "  ", "x"), ("Asha", "a@b.co", "")):
            with self.assertRaises(ProfileValidationError) as ctx:
                validate_profile(*args)
            self.assertEqual(str(ctx.exception), MISSING_DETAILS)

    def test_invalid_email(self) -> None:
        for email in ("asha", "asha@example", "as ha@example.com", "@example.com"):
            with self.assertRaises(ProfileValidationError) as ctx:
                validate_profile("Asha", email, "x")
            self.assertEqual(str(ctx.exception), INVALID_EMAIL)


class TestUpdateProfile(unittest.TestCase):
    def test_writes_name_and_email(self) -> None:
        client = mock.Mock()
        session = Session(uid="u1", name="Old Name")

        fields = update_profile(client, session, "Asha K", "asha@example.com", "secret")

        client.update_document.assert_called_once_with(
            "users", "u1", {"fullName": "Asha K", "email": "asha@example.com"}
        )
        self.assertEqual(fields["fullName"], "Asha K")
        # the session is read-only
        self.assertEqual(session.name, "Old Name")

    def test_requires_sign_in(self) -> None:
        client = mock.Mock()
        with self.assertRaises(ProfileValidationError) as ctx:
            update_profile(client, Session(), "Asha", "asha@example.com", "secret")
        self.assertEqual(str(ctx.exception), NOT_SIGNED_IN)
        client.update_document.assert_not_called()

    def test_validation_before_backend(self) -> None:
        client = mock.Mock()
        with self.assertRaises(ProfileValidationError):
            update_profile(client, Session(uid="u1"), "Asha", "bad-email", "secret")
        client.update_document.assert_not_called()

    def test_backend_failure(self) -> None:
        client = mock.Mock()
        client.update_document.side_effect = BackendError("offline")
        with self.assertRaises(BackendError) as ctx:
            update_profile(client, Session(uid="u1"), "Asha", "asha@example.com", "secret")
        self.assertEqual(str(ctx.exception), UPDATE_FAILED)


if __name__ == "__main__":
    unittest.main()
