"""
Default GLD document parser.

The ruleset grammar belongs to the game; here the document is only checked
to be a JSON object and wrapped so the rest of the client can hold on to it.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import RulesetParseError


@dataclass
class GameLogicData:
    """
    Parsed Game Logic Data document.

    Holds the decoded JSON object. ``version`` is taken from the document's
    own "version" key when it has one.
    """
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def version(self) -> Optional[Any]:
        return self.data.get('version')

    @property
    def sections(self) -> List[str]:
        return list(self.data.keys())

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


def parse_gld_document(document: str) -> GameLogicData:
    """
    Parse raw GLD text.

    Raises:
        RulesetParseError: If the text is empty, not JSON, or not a JSON object
    """
    if not document or not document.strip():
        raise RulesetParseError("GLD document is empty")
    try:
        data = json.loads(document)
    except json.JSONDecodeError as e:
        raise RulesetParseError(f"GLD document is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise RulesetParseError(f"GLD document must be a JSON object, got {type(data).__name__}")
    return GameLogicData(data)
