"""Unit tests for email normalization used at every account write and lookup."""

import unittest

from domain.model.email import normalize_email


class TestNormalizeEmail(unittest.TestCase):

    def test_lowercases_and_trims(self):
        self.assertEqual(normalize_email('  Chef@Example.COM '), 'chef@example.com')

    def test_removes_dots_from_gmail_local_part(self):
        self.assertEqual(normalize_email('a.b.c@gmail.com'), 'abc@gmail.com')

    def test_removes_dots_for_googlemail(self):
        self.assertEqual(normalize_email('Jane.Doe@GoogleMail.com'), 'janedoe@googlemail.com')

    def test_keeps_dots_for_other_domains(self):
        self.assertEqual(normalize_email('first.last@example.com'), 'first.last@example.com')

    def test_domain_dots_untouched(self):
        self.assertEqual(normalize_email('a.b@mail.gmail.com'), 'a.b@mail.gmail.com')

    def test_mixed_case_signup_and_login_spelling_match(self):
        """A.B@GMAIL.com at signup and ab@gmail.com at login are the same account."""
        self.assertEqual(normalize_email('A.B@GMAIL.com'), normalize_email('ab@gmail.com'))

    def test_idempotent(self):
        samples = [
            ' A.B@GMAIL.com', 'x@y.com', 'first.last@Example.org',
            'no-at-sign', '.lead.dot@gmail.com', 'a@b@gmail.com',
        ]
        for email in samples:
            once = normalize_email(email)
            self.assertEqual(normalize_email(once), once, email)

    def test_without_at_sign_is_only_trimmed_and_lowercased(self):
        self.assertEqual(normalize_email(' Not.An.Email '), 'not.an.email')


if __name__ == '__main__':
    unittest.main()
