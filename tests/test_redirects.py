import unittest

from starlette.requests import Request

from oauth_proxy.redirects import (
    encode_uri,
    origin_of,
    redirect_allowed,
    resolve_callback_url,
    to_query_string,
    with_fragment,
)


def make_request(headers: dict, scheme: str = "http", server=("proxy.local", 8000)) -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "scheme": scheme,
        "server": server,
        "path": "/login",
        "root_path": "",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    })


class TestResolveCallbackUrl(unittest.TestCase):
    def test_uses_connection_scheme_and_host_header(self):
        request = make_request({"host": "proxy.local:8000"})
        self.assertEqual(resolve_callback_url(request), "http://proxy.local:8000/spotifyOauthCallback")

    def test_forwarded_headers_take_precedence(self):
        request = make_request({
            "host": "10.0.0.5:8000",
            "x-forwarded-proto": "https",
            "x-forwarded-host": "auth.example.com",
        })
        self.assertEqual(resolve_callback_url(request), "https://auth.example.com/spotifyOauthCallback")

    def test_forwarded_proto_only(self):
        request = make_request({"host": "auth.example.com", "x-forwarded-proto": "https"})
        self.assertEqual(resolve_callback_url(request), "https://auth.example.com/spotifyOauthCallback")

    def test_first_value_of_forwarded_chain_wins(self):
        request = make_request({
            "host": "internal",
            "x-forwarded-proto": "https, http",
            "x-forwarded-host": "auth.example.com, lb.internal",
        })
        self.assertEqual(resolve_callback_url(request), "https://auth.example.com/spotifyOauthCallback")

    def test_forwarded_headers_ignored_when_untrusted(self):
        request = make_request({"host": "proxy.local", "x-forwarded-proto": "https"})
        self.assertEqual(
            resolve_callback_url(request, trust_forwarded=False),
            "http://proxy.local/spotifyOauthCallback",
        )

    def test_same_request_gives_identical_url(self):
        request = make_request({"host": "proxy.local", "x-forwarded-proto": "https"})
        self.assertEqual(resolve_callback_url(request), resolve_callback_url(request))


class TestEncoding(unittest.TestCase):
    def test_encode_uri_keeps_url_structure(self):
        self.assertEqual(encode_uri("https://a.example/cb?x=1#y"), "https://a.example/cb?x=1#y")
        self.assertEqual(encode_uri("https://a.example/my path"), "https://a.example/my%20path")

    def test_query_string_encodes_like_encode_uri_component(self):
        self.assertEqual(
            to_query_string({"scope": "user-read-email user-top-read", "redirect_uri": "http://h/cb"}),
            "scope=user-read-email%20user-top-read&redirect_uri=http%3A%2F%2Fh%2Fcb",
        )

    def test_query_string_stringifies_json_values(self):
        self.assertEqual(
            to_query_string({"expires_in": 3600, "ok": True, "missing": None}),
            "expires_in=3600&ok=true&missing=null",
        )

    def test_query_string_accepts_pairs(self):
        self.assertEqual(to_query_string([("a", "1"), ("a", "2")]), "a=1&a=2")

    def test_with_fragment(self):
        self.assertEqual(
            with_fragment("https://app.example/cb", {"error": "access_denied"}),
            "https://app.example/cb#error=access_denied",
        )


class TestRedirectAllowList(unittest.TestCase):
    def test_origin_of(self):
        self.assertEqual(origin_of("HTTPS://App.Example:8443/cb?x=1"), "https://app.example:8443")
        self.assertEqual(origin_of("/relative/path"), "")

    def test_empty_allow_list_accepts_anything(self):
        self.assertTrue(redirect_allowed("https://evil.example/cb", []))

    def test_allow_list_matches_origin(self):
        allowed = ["https://app.example", "http://localhost:4000"]
        self.assertTrue(redirect_allowed("https://app.example/cb", allowed))
        self.assertTrue(redirect_allowed("http://localhost:4000/", allowed))
        self.assertFalse(redirect_allowed("https://evil.example/cb", allowed))
        self.assertFalse(redirect_allowed("http://app.example/cb", allowed))
