"""Tests for query cache key derivation."""

import string

from querymemo.infrastructure.cache.keys import derive_query_key, namespaced_key


class TestDeriveQueryKey:
    """Keys are deterministic, fixed-length hex and sensitive to every input."""

    def test_deterministic(self) -> None:
        assert derive_query_key("balances by branch", "user-1") == derive_query_key(
            "balances by branch", "user-1"
        )

    def test_fixed_length_lowercase_hex(self) -> None:
        key = derive_query_key("Show balances by branch")
        assert len(key) == 32
        assert set(key) <= set(string.hexdigits.lower())

    def test_long_query_same_length(self) -> None:
        assert len(derive_query_key("x" * 10_000)) == 32

    def test_different_fiscal_year_gives_different_key(self) -> None:
        assert derive_query_key("balances by branch", "") != derive_query_key(
            "balances by branch and fiscal year 2015", ""
        )

    def test_scope_changes_key(self) -> None:
        assert derive_query_key("q", "userA") != derive_query_key("q", "userB")
        assert derive_query_key("q", "userA") != derive_query_key("q")

    def test_separator_in_scope_is_unambiguous(self) -> None:
        assert derive_query_key("c", "a:b") != derive_query_key("b:c", "a")
        assert derive_query_key(":q", "") != derive_query_key("q", ":")

    def test_does_not_trim(self) -> None:
        """Trimming is the caller's job; the deriver is byte-sensitive."""
        assert derive_query_key("q ") != derive_query_key("q")

    def test_case_sensitive(self) -> None:
        assert derive_query_key("Balances") != derive_query_key("balances")

    def test_unicode_query(self) -> None:
        assert derive_query_key("Umsätze nach Filiale") == derive_query_key("Umsätze nach Filiale")
        assert derive_query_key("Umsätze nach Filiale") != derive_query_key("Umsatze nach Filiale")


def test_namespaced_key() -> None:
    assert namespaced_key("query_results", "abc") == "query_results:abc"
