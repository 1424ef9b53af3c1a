"""Tests for ResendEmailAdapter."""

import unittest
from unittest.mock import patch

from adapter.external import resend_email
from adapter.external.resend_email import ResendEmailAdapter
from domain.model.errors import NotificationError


class TestResendEmailAdapter(unittest.TestCase):

    @patch("adapter.external.resend_email.resend.Emails.send")
    def test_send_builds_text_and_html(self, mock_send):
        adapter = ResendEmailAdapter(sender="Portal <noreply@example.com>")

        adapter.send("cook@example.com", "Your code", "Your verification code is 123456.\n\nBye <3")

        params = mock_send.call_args[0][0]
        self.assertEqual(params["from"], "Portal <noreply@example.com>")
        self.assertEqual(params["to"], "cook@example.com")
        self.assertEqual(params["subject"], "Your code")
        self.assertIn("123456", params["text"])
        self.assertEqual(
            params["html"],
            "<p>Your verification code is 123456.</p><p>Bye &lt;3</p>",
        )

    @patch("adapter.external.resend_email.resend.Emails.send")
    def test_failure_becomes_notification_error(self, mock_send):
        mock_send.side_effect = RuntimeError("invalid api key")

        with self.assertRaises(NotificationError):
            ResendEmailAdapter().send("cook@example.com", "Your code", "body")

    @patch.dict("os.environ", {"RESEND_API_KEY": "re_test_key"})
    def test_init_sets_api_key(self):
        with patch.object(resend_email.resend, "api_key", None):
            resend_email.init_resend()
            self.assertEqual(resend_email.resend.api_key, "re_test_key")


if __name__ == "__main__":
    unittest.main()
