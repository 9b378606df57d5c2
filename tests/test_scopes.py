import unittest

from oauth_proxy.errors import BadRequest
from oauth_proxy.scopes import VALID_SCOPES, scopes_are_valid, validate_scopes


class TestScopes(unittest.TestCase):
    def test_missing_scope_passes(self):
        self.assertTrue(scopes_are_valid(None))
        self.assertTrue(scopes_are_valid(""))

    def test_all_known_scopes_pass(self):
        self.assertTrue(scopes_are_valid(",".join(VALID_SCOPES)))
        self.assertTrue(scopes_are_valid("user-read-email"))

    def test_one_unknown_scope_fails_whole_request(self):
        self.assertFalse(scopes_are_valid("user-read-email,admin"))
        self.assertFalse(scopes_are_valid("admin,user-read-email,user-top-read"))

    def test_matching_is_exact(self):
        self.assertFalse(scopes_are_valid("USER-READ-EMAIL"))
        self.assertFalse(scopes_are_valid("user-read-email, user-top-read"))
        self.assertFalse(scopes_are_valid("user-read-email,"))
        # Spotify itself separates with spaces; this proxy only accepts commas
        self.assertFalse(scopes_are_valid("user-read-email user-top-read"))

    def test_validate_scopes_raises_bad_request(self):
        with self.assertRaises(BadRequest) as ctx:
            validate_scopes("nope")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.message, "Invalid Scopes")
