"""
Exceptions raised while building match groups from stored records.
"""

from typing import List, Optional


class MatchGroupError(Exception):
    """Base exception for match group construction errors"""

    pass


class MatchRecordDecodeError(MatchGroupError):
    """A JSON-encoded field of a stored record could not be decoded"""

    def __init__(self, field: str, match_id: Optional[str] = None, group_id: Optional[str] = None, reason: str = ""):
        self.field = field
        self.match_id = match_id
        self.group_id = group_id
        self.reason = reason
        message = f"Malformed JSON in field '{field}' of match {match_id or '?'} in group {group_id or '?'}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BracketResetShapeError(MatchGroupError):
    """Bracket reset match opponents do not line up with the grand final"""

    pass


class MatchNotFoundError(MatchGroupError):
    """Requested match is not part of the match group"""

    pass


class MatchGroupValidationError(MatchGroupError):
    """Structural checks failed for a constructed match group"""

    def __init__(self, violations: List[str]):
        self.violations = violations
        super().__init__("\n".join(violations))
