"""
Data entity model definitions
Persisted journal entities: a Log owns its todos, ideas, learnings and accomplishments
"""

from typing import List, Optional

from pydantic import Field

from .base import BaseModel
from .defaults import (
    DEFAULT_IDEA_STATUS,
    DEFAULT_IMPACT,
    DEFAULT_PRIORITY,
    DEFAULT_TODO_COMPLETED,
    AccomplishmentImpact,
    IdeaStatus,
)

# ============ Parent ============


class Log(BaseModel):
    """Log model - one journal entry"""

    id: int
    date: str  # YYYY-MM-DD
    audio_path: Optional[str] = None
    transcript: Optional[str] = None
    summary: Optional[str] = None
    pending_analysis: bool = False
    retry_count: int = 0
    last_error: Optional[str] = None
    created_at: str
    updated_at: str


# ============ Children (owned by a Log via log_id) ============


class Todo(BaseModel):
    """Todo model - action item extracted from a log"""

    id: int
    log_id: int
    text: str
    completed: bool = DEFAULT_TODO_COMPLETED
    due_date: Optional[str] = None  # YYYY-MM-DD
    priority: int = int(DEFAULT_PRIORITY)  # 1 = high, 2 = medium, 3 = low
    confidence: Optional[float] = None
    created_at: str
    updated_at: str


class Idea(BaseModel):
    """Idea model - captured idea extracted from a log"""

    id: int
    log_id: int
    text: str
    status: IdeaStatus = DEFAULT_IDEA_STATUS
    tags: List[str] = Field(default_factory=list)
    created_at: str
    updated_at: str


class Learning(BaseModel):
    """Learning model - insight extracted from a log"""

    id: int
    log_id: int
    text: str
    category: Optional[str] = None
    created_at: str


class Accomplishment(BaseModel):
    """Accomplishment model - achievement extracted from a log"""

    id: int
    log_id: int
    text: str
    impact: AccomplishmentImpact = DEFAULT_IMPACT
    created_at: str


class LogWithSegments(Log):
    """Log with all four child collections"""

    todos: List[Todo] = Field(default_factory=list)
    ideas: List[Idea] = Field(default_factory=list)
    learnings: List[Learning] = Field(default_factory=list)
    accomplishments: List[Accomplishment] = Field(default_factory=list)

    @property
    def segment_count(self) -> int:
        return (
            len(self.todos)
            + len(self.ideas)
            + len(self.learnings)
            + len(self.accomplishments)
        )


# ============ Standalone ============


class Summary(BaseModel):
    """Summary model - weekly summary, not owned by any log"""

    id: int
    week_start: str  # YYYY-MM-DD
    week_end: str  # YYYY-MM-DD
    content: str
    highlights: List[str] = Field(default_factory=list)
    generated_at: str
