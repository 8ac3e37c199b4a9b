"""Well-known agent tool identifiers and the tool-call lookup table."""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class ToolId(str, Enum):
    """Closed set of tool identifiers the envelope builder understands."""

    EXTRACT_ISSUE = "extractIssue"
    ANALYZE_TICKET = "analyzeTicket"
    REQUEST_CLARIFICATION = "requestClarification"
    CREATE_TICKET = "createTicket"
    TRIGGER_WORKFLOW = "triggerWorkflow"


_TOOL_IDS_BY_VALUE = {tool.value: tool for tool in ToolId}


def field(obj: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an attribute-bearing object.

    Returns None for missing keys, missing attributes and None containers, so
    lookups can be chained over loosely-structured agent output.
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    if isinstance(obj, (str, bytes, int, float, bool, list, tuple)):
        return None
    return getattr(obj, name, None)


class ToolCallIndex:
    """Lookup table from ToolId to the first tool-call record that matches it.

    A record matches a tool when either its ``toolName`` or its ``id`` field
    equals the tool identifier. The record sequence is scanned once on
    construction; when several records match the same tool the earliest wins.
    """

    def __init__(self, records: Iterable[Any]):
        self.records: List[Any] = list(records)
        self._by_tool: Dict[ToolId, Any] = {}
        for record in self.records:
            for key in (field(record, "toolName") or field(record, "tool_name"), field(record, "id")):
                tool = _TOOL_IDS_BY_VALUE.get(key) if isinstance(key, str) else None
                if tool is not None and tool not in self._by_tool:
                    self._by_tool[tool] = record

    def find(self, tool: ToolId) -> Optional[Any]:
        return self._by_tool.get(tool)

    def result(self, tool: ToolId) -> Any:
        """Return the ``result`` payload of the record for ``tool``, if any."""
        return field(self.find(tool), "result")

    def call_id(self, tool: ToolId) -> Optional[str]:
        record = self.find(tool)
        call_id = field(record, "toolCallId") or field(record, "tool_call_id")
        return call_id or None

    def __contains__(self, tool: ToolId) -> bool:
        return tool in self._by_tool

    def __len__(self) -> int:
        return len(self.records)


def list_tool_ids() -> List[str]:
    return [tool.value for tool in ToolId]
