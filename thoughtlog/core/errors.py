"""
Error types
Storage errors (DatabaseError family) and classification errors (SegmentError family)
"""

from typing import Optional


class ThoughtLogError(Exception):
    """Base class for all ThoughtLog errors"""


# ============ Storage errors ============


class DatabaseError(ThoughtLogError):
    """Storage or constraint failure; the enclosing transaction is rolled back"""

    def __init__(
        self,
        message: str,
        code: str = "DATABASE_ERROR",
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause


class NotFoundError(DatabaseError):
    """Lookup or deletion targets a row that does not exist"""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} with id {entity_id} not found", "NOT_FOUND")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(DatabaseError):
    """Malformed or out-of-bounds input, raised before any write"""

    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR")


# ============ Classification errors ============


class SegmentError(ThoughtLogError, ValueError):
    """A classifier fragment or payload could not be used"""


class InvalidSegmentType(SegmentError):
    """Segment type label does not resolve to a known type"""

    def __init__(self, raw_type):
        super().__init__(f"Invalid segment type: {raw_type!r}")
        self.raw_type = raw_type


class EmptySegmentContent(SegmentError):
    """Segment text is empty or whitespace-only"""

    def __init__(self):
        super().__init__("Segment content cannot be empty or whitespace-only")


class InvalidResponseStructure(SegmentError):
    """Decoded classifier payload lacks a well-formed segments list"""


class ResponseParseError(SegmentError):
    """Classifier payload is not decodable"""

    def __init__(self, message: str, response: str = ""):
        super().__init__(message)
        # Keep a bounded excerpt for diagnostics
        self.response = response[:500]
