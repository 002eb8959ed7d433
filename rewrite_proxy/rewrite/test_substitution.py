import re

from rewrite_proxy.rewrite.substitution import (
    hostname_pattern,
    rewrite_body,
    rewrite_headers,
    rewrite_text,
    strip_start_anchor,
)


class TestRewriteText:
    def test_replaces_standalone_hostname(self):
        assert (
            rewrite_text("https://github.com/foo", "github.com", "mirror.example")
            == "https://mirror.example/foo"
        )

    def test_subdomain_is_left_alone(self):
        result = rewrite_text(
            "visit api.github.com and github.com", "github.com", "x.example"
        )
        assert result == "visit api.github.com and x.example"

    def test_cookie_domain_suffix_is_left_alone(self):
        cookie = "logged_in=no; domain=.github.com; path=/"
        assert rewrite_text(cookie, "github.com", "x.example") == cookie

    def test_longer_word_is_left_alone(self):
        assert (
            rewrite_text("notgithub.com github.com", "github.com", "x.example")
            == "notgithub.com x.example"
        )

    def test_all_occurrences_are_replaced(self):
        text = "github.com, github.com; github.com"
        assert rewrite_text(text, "github.com", "x") == "x, x; x"

    def test_matching_is_case_sensitive(self):
        assert rewrite_text("GitHub.com", "github.com", "x") == "GitHub.com"

    def test_dots_in_hostname_are_literal(self):
        assert rewrite_text("githubxcom", "github.com", "x") == "githubxcom"

    def test_hostname_with_port_is_rewritten(self):
        assert rewrite_text("github.com:443", "github.com", "x.example") == "x.example:443"

    def test_replacement_is_not_interpreted_as_template(self):
        assert rewrite_text("github.com", "github.com", r"a\1b") == r"a\1b"

    def test_empty_inputs(self):
        assert rewrite_text("", "github.com", "x") == ""
        assert rewrite_text("github.com", "", "x") == "github.com"

    def test_round_trip_restores_original(self):
        original = '{"html_url": "https://github.com/octo", "host": "github.com"}'
        outbound = rewrite_text(original, "github.com", "proxy.example")
        assert "github.com" not in outbound
        assert rewrite_text(outbound, "proxy.example", "github.com") == original

    def test_pattern_has_dot_guard(self):
        assert re.search(hostname_pattern("a.b"), ".a.b") is None
        assert re.search(hostname_pattern("a.b"), " a.b") is not None
        assert r"a\.b" in hostname_pattern("a.b")

    def test_non_ascii_letter_is_a_boundary(self):
        assert rewrite_text("ägithub.com", "github.com", "x") == "äx"
        assert rewrite_text("镜像github.com地址", "github.com", "x") == "镜像x地址"

    def test_ascii_word_characters_still_block(self):
        text = "_github.com github.com_ github.com9"
        assert rewrite_text(text, "github.com", "x") == text


class TestRewriteHeaders:
    def test_values_rewritten_names_untouched(self):
        headers = [
            ("Referer", "https://proxy.example/page"),
            ("proxy.example", "unrelated"),
        ]
        result = rewrite_headers(headers, "proxy.example", "github.com")
        assert result == [
            ("Referer", "https://github.com/page"),
            ("proxy.example", "unrelated"),
        ]

    def test_order_and_multiplicity_preserved(self):
        headers = [
            ("set-cookie", "a=1; domain=github.com"),
            ("x-other", "value"),
            ("set-cookie", "b=2; domain=.github.com"),
        ]
        result = rewrite_headers(headers, "github.com", "mirror.example")
        assert result == [
            ("set-cookie", "a=1; domain=mirror.example"),
            ("x-other", "value"),
            ("set-cookie", "b=2; domain=.github.com"),
        ]

    def test_returns_new_list(self):
        headers = [("location", "https://github.com/")]
        result = rewrite_headers(headers, "github.com", "x")
        assert headers == [("location", "https://github.com/")]
        assert result == [("location", "https://x/")]


class TestRewriteBody:
    def test_without_filter_rewrites_everything(self):
        text = '<a href="https://github.com/a">a</a><a href="https://github.com/b">b</a>'
        result = rewrite_body(text, "github.com", "m.example")
        assert result.count("m.example") == 2

    def test_filter_scopes_rewrite_to_matching_paths(self):
        text = "https://github.com/octo/repo and https://github.com/other/thing"
        result = rewrite_body(
            text, "github.com", "m.example", re.compile(r"^/octo/")
        )
        assert result == "https://m.example/octo/repo and https://github.com/other/thing"

    def test_filter_with_own_groups(self):
        text = "github.com/a/1 github.com/b/2"
        result = rewrite_body(
            text, "github.com", "m.example", re.compile(r"^/(a|c)/")
        )
        assert result == "m.example/a/1 github.com/b/2"

    def test_filter_keeps_dot_guard(self):
        text = "https://api.github.com/octo/x"
        result = rewrite_body(text, "github.com", "m.example", re.compile(r"^/octo"))
        assert result == text

    def test_filter_with_leading_inline_flags(self):
        text = "https://example.org/OCTO/a https://example.org/blog/b"
        result = rewrite_body(
            text, "example.org", "m.example", re.compile(r"(?i)^/octo/")
        )
        assert result == "https://m.example/OCTO/a https://example.org/blog/b"

    def test_strip_start_anchor(self):
        assert strip_start_anchor("^/api/") == "/api/"
        assert strip_start_anchor("/api/^") == "/api/^"
        assert strip_start_anchor("(?i)^/api/") == "/api/"
        assert strip_start_anchor("(?i)(?s)^/api/") == "/api/"
        assert strip_start_anchor("/(?:a|b)/") == "/(?:a|b)/"
