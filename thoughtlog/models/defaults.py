"""
Default values and limits
Every literal default used by classification and storage lives here
"""

from enum import Enum, IntEnum


class SegmentType(str, Enum):
    """Canonical segment type"""

    TODO = "todo"
    IDEA = "idea"
    LEARNING = "learning"
    ACCOMPLISHMENT = "accomplishment"


class ConfidenceLevel(str, Enum):
    """Coarse confidence bucket"""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class IdeaStatus(str, Enum):
    """Idea lifecycle status"""

    RAW = "raw"
    DEVELOPING = "developing"
    ACTIONABLE = "actionable"
    ARCHIVED = "archived"


class AccomplishmentImpact(str, Enum):
    """Accomplishment impact level"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Priority(IntEnum):
    """Todo priority ordinal (lower is more urgent)"""

    HIGH = 1
    MEDIUM = 2
    LOW = 3


# Synonym table for classifier type labels (keys are lowercase, trimmed)
SEGMENT_TYPE_SYNONYMS = {
    "todo": SegmentType.TODO,
    "todos": SegmentType.TODO,
    "task": SegmentType.TODO,
    "idea": SegmentType.IDEA,
    "ideas": SegmentType.IDEA,
    "learning": SegmentType.LEARNING,
    "learnings": SegmentType.LEARNING,
    "note": SegmentType.LEARNING,
    "accomplishment": SegmentType.ACCOMPLISHMENT,
}

# Display order used when sorting extracted segments by type
SEGMENT_TYPE_ORDER = {
    SegmentType.TODO: 0,
    SegmentType.IDEA: 1,
    SegmentType.LEARNING: 2,
    SegmentType.ACCOMPLISHMENT: 3,
}

PRIORITY_BY_LABEL = {
    "high": Priority.HIGH,
    "medium": Priority.MEDIUM,
    "low": Priority.LOW,
}

# Confidence
DEFAULT_CONFIDENCE = 0.5
HIGH_CONFIDENCE_THRESHOLD = 0.8
MEDIUM_CONFIDENCE_THRESHOLD = 0.5

# Extraction
DEFAULT_MIN_CONFIDENCE = 0.0
DEFAULT_REVIEW_THRESHOLD = 0.5

# Entity defaults
DEFAULT_PRIORITY = Priority.MEDIUM
DEFAULT_IDEA_STATUS = IdeaStatus.RAW
DEFAULT_IMPACT = AccomplishmentImpact.MEDIUM
DEFAULT_TODO_COMPLETED = False

# Text length limits
MAX_TRANSCRIPT_LENGTH = 10000
MAX_SUMMARY_LENGTH = 10000
MAX_TODO_LENGTH = 500
MAX_IDEA_LENGTH = 1000
MAX_LEARNING_LENGTH = 1000
MAX_ACCOMPLISHMENT_LENGTH = 1000

# Pagination
DEFAULT_PAGE_SIZE = 100

# Retry
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 5.0
