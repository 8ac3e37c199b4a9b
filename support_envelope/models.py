"""Data models for the canonical response envelope.

This module defines the structures the envelope builder reads and produces.
All models use Pydantic for validation and serialization. Python attributes
are snake_case; the serialized form uses camelCase so the JSON body matches
what web and chat-bot consumers expect.

Optional fields that were never set are omitted from ``to_dict()`` output,
while fields explicitly set to ``None`` serialize as ``null``. Consumers
branch on that difference, so builders must only pass the fields they have.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger("support-envelope")


class Phase(str, Enum):
    """Where a conversation or ticket stands after one agent turn."""

    CLARIFICATION = "clarification"
    TICKET_DRAFT = "ticketDraft"
    FINAL_TICKET = "finalTicket"
    ANALYSIS_ONLY = "analysisOnly"
    GENERIC = "generic"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class ToolCallRecord(CamelModel):
    """One tool invocation made by the agent during a turn.

    Attributes:
        tool_name: Logical tool identifier (e.g. 'createTicket').
        id: Alternate identifier some producers use instead of tool_name.
        tool_call_id: Opaque correlation id for the invocation.
        result: Tool-specific output payload.
    """

    model_config = ConfigDict(extra="allow")

    tool_name: Optional[str] = None
    id: Optional[str] = None
    tool_call_id: Optional[str] = None
    result: Any = None


class TicketMetadata(CamelModel):
    model_config = ConfigDict(extra="allow")

    confidence: Optional[float] = None
    extracted_from: Optional[str] = None
    processing_timestamp: Optional[str] = None
    conversation_turns: Optional[int] = None


class Ticket(CamelModel):
    """Support ticket in draft or final form.

    A draft is assembled from extraction-tool evidence and has no id. A final
    ticket is produced by the creation tool and carries its assigned id.
    Extra keys emitted by the creation tool (location, urgency, status, ...)
    are preserved as-is.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    severity: Optional[str] = None
    sentiment: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    estimated_resolution_time: Optional[str] = None
    suggested_actions: Optional[List[str]] = None
    metadata: Optional[TicketMetadata] = None


class Analysis(CamelModel):
    """Auxiliary structured analysis (routing, escalation, SLA, automation)."""

    model_config = ConfigDict(extra="allow")

    routing: Any = None
    escalation: Any = None
    sla: Any = None
    automation: Any = None

    @property
    def recommended_team(self) -> Optional[str]:
        if isinstance(self.routing, dict):
            return self.routing.get("recommendedTeam") or None
        return None

    @property
    def escalation_required(self) -> bool:
        if isinstance(self.escalation, dict):
            return bool(self.escalation.get("required"))
        return False


class ClarificationRequest(CamelModel):
    question: Optional[str] = None
    turn: Optional[int] = None
    max_turns: Optional[int] = None


class EnvelopeState(CamelModel):
    phase: Phase
    complete: bool
    needs_clarification: bool
    clarification: Optional[ClarificationRequest] = None


class Display(CamelModel):
    primary_text: str
    secondary_text: Optional[str] = None
    suggested_next: List[str] = []


class SourceRefs(CamelModel):
    """Correlation ids back to the tool calls behind each sub-result."""

    ticket_tool_call_id: Optional[str] = None
    analysis_tool_call_id: Optional[str] = None
    clarification_tool_call_id: Optional[str] = None
    compiled_from_workflow: bool = False


class Usage(CamelModel):
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    usd: Optional[float] = None


class ModelInfo(CamelModel):
    id: Optional[str] = None
    provider: Optional[str] = None
    temperature: Optional[float] = None


class ChannelHints(CamelModel):
    short_message: str
    rich_panel: bool
    can_stream_followups: bool


class RawPayload(CamelModel):
    tool_results: List[Any] = []


class CanonicalEnvelope(CamelModel):
    """Normalized, versioned result of one agent turn.

    The envelope is re-derived from scratch on every call and never mutated
    afterwards. Consumers switch on ``state.phase``; ``complete`` is true only
    for the finalTicket phase.

    Attributes:
        schema_version: Envelope schema version supplied by the caller.
        agent_version: Agent version supplied by the caller.
        run_id: Optional run identifier for correlation.
        state: Phase classification and clarification status.
        ticket: Draft or final ticket, when one was resolved.
        analysis: Auxiliary analysis, when one was resolved.
        display: Human-presentable summary text and suggested next actions.
        source_refs: Tool call ids that produced ticket, analysis, clarification.
        usage: Token and cost accounting, null where unreported.
        model: Model id, provider and temperature used for the turn.
        channel_hints: Presentation guidance derived from the phase.
        raw: Pass-through of the original tool-call list.
    """

    schema_version: str
    agent_version: str
    run_id: Optional[str] = None
    state: EnvelopeState
    ticket: Optional[Ticket] = None
    analysis: Optional[Analysis] = None
    display: Display
    source_refs: SourceRefs
    usage: Usage
    model: ModelInfo
    channel_hints: ChannelHints
    raw: RawPayload

    @property
    def phase(self) -> Phase:
        return self.state.phase

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape, omitting fields that were never set."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_unset=True, warnings=False
        )


def load_lenient(model_class, data: Mapping):
    """Validate ``data`` as ``model_class``, keeping it unvalidated on failure.

    Tool payloads are produced by an LLM and may carry values outside the
    declared types (an unknown priority, a string where a list belongs). Such
    payloads are still carried so the envelope reflects what the tool returned.
    """
    values = {str(key): value for key, value in data.items()}
    try:
        return model_class.model_validate(values)
    except ValidationError as e:
        logger.warning(f"{model_class.__name__} payload failed validation, carrying it unvalidated: {e}")
        return model_class.model_construct(**values)
