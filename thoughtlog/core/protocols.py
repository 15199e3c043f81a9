"""
Type protocols for external collaborators

The transcription/classification service is a black box; the retry ledger only
needs something that turns a transcript into a classifier payload.
"""

from typing import Any, Mapping, Protocol, Union


class SegmentAnalyzer(Protocol):
    """Protocol for the external segment classifier"""

    def analyze(self, transcript: str) -> Union[str, Mapping[str, Any]]:
        """Classify a transcript

        Returns an encoded payload or a decoded object with a "segments" list
        """
        ...
