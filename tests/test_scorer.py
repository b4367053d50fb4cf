"""Tests for the similarity scorer."""

import pytest

from gherkin_dictionary.search.scorer import parse_query, round_half_up, score


class TestScore:
    """Tests for each scoring tier."""

    def test_exact_match(self):
        """Test that identical strings score 100."""
        assert score("given a user", "given a user", []) == 100

    def test_containment(self):
        """Test substring containment scoring."""
        # 75 + 4/12 * 25 + 10 = 93.33
        result = score("user", "given a user", [])
        assert result == 93
        assert 50 < result <= 110

    def test_containment_is_not_clamped(self):
        """Test that near-complete containment can exceed 100."""
        # 75 + 14/15 * 25 + 10 = 108.33
        assert score("given a user x", "given a user xy", []) == 108

    def test_parameter_gate(self):
        """Test that a missing parameter zeroes the score."""
        assert score("login", "given a login as admin", ["guest"]) == 0

    def test_parameter_gate_applies_before_exact_match(self):
        """Test that parameters are checked first."""
        assert score("given a user", "given a user", ["admin"]) == 0

    def test_empty_query_with_parameter(self):
        """Test the neutral score plus bonus for parameter-only searches."""
        assert score("", "given a login as admin", ["login"]) == 60

    def test_empty_query_without_parameters(self):
        """Test the neutral score without parameters."""
        assert score("", "given a login as admin", []) == 50

    def test_word_overlap(self):
        """Test partial word overlap in both substring directions."""
        # "user" matches "user", "login" contains "in": 2/5 words
        assert score("user login", "given a user logs in", []) == 50

    def test_no_overlap(self):
        """Test that unrelated text scores 0."""
        assert score("checkout", "given the user", []) == 0

    def test_overlap_at_threshold_boundary(self):
        """Test overlap scores just around the default cutoff."""
        ten_words = "given one alpha beta two gamma delta epsilon zeta kappa"
        fourteen_words = "given one alpha beta two gamma delta six epsilon zeta eta theta iota kappa"

        assert score("one two six", ten_words, []) == 30
        assert score("one two six", fourteen_words, []) == 31

    def test_overlap_with_parameters(self):
        """Test that satisfied parameters keep the overlap score."""
        assert score("user login", 'given a user logs in as "admin"', ["admin"]) > 0

    def test_no_case_folding(self):
        """Test that the scorer leaves case handling to callers."""
        assert score("user", "Given a USER", []) < score("user", "given a user", [])


class TestParseQuery:
    """Tests for literal parameter parsing."""

    def test_parameters_extracted(self):
        """Test that quoted segments become parameters."""
        residual, parameters = parse_query('login as "admin" "main page"')

        assert residual == "login as"
        assert parameters == ["admin", "main page"]

    def test_parameters_only(self):
        """Test a query made of parameters alone."""
        assert parse_query('"admin"') == ("", ["admin"])

    def test_no_parameters(self):
        """Test a plain query."""
        assert parse_query("  login page ") == ("login page", [])

    def test_unbalanced_quote_kept(self):
        """Test that an unmatched quote is left in the residual text."""
        assert parse_query('login "admin') == ('login "admin', [])

    def test_empty_quotes_removed(self):
        """Test that empty quotes are dropped without adding a parameter."""
        assert parse_query('login ""') == ("login", [])


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, 3), (86.5, 87), (2.4, 2), (0.5, 1), (99.49, 99)],
)
def test_round_half_up(value, expected):
    """Test rounding halves upward."""
    assert round_half_up(value) == expected
