"""Subsequence fuzzy matching used to filter dependencies interactively."""

from rapidfuzz import fuzz
from rapidfuzz.distance import LCSseq

BONUS_BOUNDARY = 8
BONUS_CAMEL = 7
BONUS_CONSECUTIVE = 4
BONUS_FIRST_CHAR_MULTIPLIER = 2

DELIMITERS = "_-./: "


def fold_case(text: str) -> str:
    """Lowercase ``text`` without changing its length."""
    return "".join(char.lower() if len(char.lower()) == 1 else char for char in text)


class FuzzyMatcher:
    """Scores how well a pattern matches a candidate as a subsequence.

    Every pattern character must appear in the candidate in order. The
    alignment comes from the longest common subsequence; the score is the
    rapidfuzz ratio of the two strings plus bonuses for matches at word
    boundaries and for runs of consecutive characters.
    """

    def __init__(self, case_sensitive: bool | None = None):
        """Initialize the matcher.

        Args:
            case_sensitive: Force case sensitivity on or off. By default
                matching is case-insensitive unless the pattern contains an
                uppercase character.
        """
        self.case_sensitive = case_sensitive

    def fuzzy_match(self, choice: str, pattern: str) -> tuple[int, list[int]] | None:
        """Match ``pattern`` against ``choice``.

        Args:
            choice: Candidate text
            pattern: Query typed by the user

        Returns:
            ``(score, indices)`` with the positions of the matched characters
            in ``choice``, or None when ``pattern`` is not a subsequence
        """
        if not pattern:
            return 0, []

        case_sensitive = self.case_sensitive
        if case_sensitive is None:
            case_sensitive = any(char.isupper() for char in pattern)

        text = choice if case_sensitive else fold_case(choice)
        query = pattern if case_sensitive else fold_case(pattern)

        if LCSseq.similarity(query, text) < len(query):
            return None

        indices = []
        for opcode in LCSseq.opcodes(query, text):
            if opcode.tag == "equal":
                indices.extend(range(opcode.dest_start, opcode.dest_end))

        score = round(fuzz.ratio(query, text))
        for position, index in enumerate(indices):
            bonus = self._bonus(choice, index)
            if position == 0:
                bonus *= BONUS_FIRST_CHAR_MULTIPLIER
            elif indices[position - 1] == index - 1:
                bonus += BONUS_CONSECUTIVE
            score += bonus

        return score, indices

    @staticmethod
    def _bonus(choice: str, index: int) -> int:
        """Bonus for a match at ``index`` based on the preceding character."""
        current = choice[index]
        if index == 0 or not current.isalnum():
            return BONUS_BOUNDARY

        previous = choice[index - 1]
        if previous in DELIMITERS or not previous.isalnum():
            return BONUS_BOUNDARY
        if previous.islower() and current.isupper():
            return BONUS_CAMEL
        if previous.isalpha() and current.isdigit():
            return BONUS_CAMEL
        return 0
