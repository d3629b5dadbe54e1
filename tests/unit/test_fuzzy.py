"""Tests for fuzzy matching."""

from core.fuzzy import FuzzyMatcher, fold_case


class TestFuzzyMatcher:
    """Test subsequence scoring."""

    def setup_method(self):
        """Setup test fixtures."""
        self.matcher = FuzzyMatcher()

    def test_empty_pattern_matches_everything(self):
        """Should match any candidate with an empty pattern."""
        assert self.matcher.fuzzy_match("serde", "") == (0, [])
        assert self.matcher.fuzzy_match("", "") == (0, [])

    def test_no_subsequence(self):
        """Should return None when the pattern is not a subsequence."""
        assert self.matcher.fuzzy_match("serde", "sj") is None
        assert self.matcher.fuzzy_match("tokio", "sj") is None
        assert self.matcher.fuzzy_match("abc", "abcd") is None
        assert self.matcher.fuzzy_match("serde", "es") is None

    def test_match_indices(self):
        """Should report the positions of matched characters."""
        score, indices = self.matcher.fuzzy_match("serde_json", "sj")

        assert score > 0
        assert indices == [0, 6]

    def test_contiguous_indices(self):
        """Should report every character of a contiguous match."""
        _, indices = self.matcher.fuzzy_match("tokio", "tok")

        assert indices == [0, 1, 2]

    def test_prefers_word_boundaries(self):
        """Should score a match after a delimiter above one inside a word."""
        boundary, _ = self.matcher.fuzzy_match("ab_cd", "c")
        inner, _ = self.matcher.fuzzy_match("abxcd", "c")

        assert boundary > inner

    def test_consecutive_beats_scattered(self):
        """Should score a contiguous match above a scattered one."""
        contiguous, _ = self.matcher.fuzzy_match("serde", "se")
        scattered, _ = self.matcher.fuzzy_match("base64", "se")

        assert contiguous > scattered

    def test_smart_case(self):
        """Should ignore case unless the pattern has uppercase letters."""
        assert self.matcher.fuzzy_match("Serde", "serde") is not None
        assert self.matcher.fuzzy_match("serde", "Serde") is None
        assert self.matcher.fuzzy_match("Serde", "Serde") is not None

    def test_forced_case_insensitive(self):
        """Should honour an explicit case sensitivity setting."""
        matcher = FuzzyMatcher(case_sensitive=False)

        assert matcher.fuzzy_match("serde", "SERDE") is not None

    def test_camel_case_boundary(self):
        """Should treat camel case humps as word starts."""
        _, indices = self.matcher.fuzzy_match("fooBar", "fB")

        assert indices == [0, 3]

    def test_case_folding_keeps_positions(self):
        """Should report positions in the original text when lowercasing grows a character."""
        _, indices = self.matcher.fuzzy_match("İi", "i")

        assert indices == [1]


class TestFoldCase:
    """Test length-preserving lowercasing."""

    def test_ascii(self):
        """Should lowercase ASCII text."""
        assert fold_case("Serde_JSON") == "serde_json"

    def test_keeps_length(self):
        """Should keep characters whose lowercase form is longer."""
        assert fold_case("İX") == "İx"
