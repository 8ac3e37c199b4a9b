"""Canonical envelope builder.

Normalizes the output of one agent turn into a ``CanonicalEnvelope``. Agent
frameworks and workflow engines report tool calls in different places, so the
builder probes a fixed, ordered list of locations and classifies the turn from
which well-known tools ran and what they returned.

The builder is a pure function: no I/O, no clock, no randomness. Malformed or
missing input degrades to absent fields and pushes the classification toward
the generic phase instead of raising.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from .config import EnvelopeConfig
from .models import (
    Analysis,
    CanonicalEnvelope,
    ChannelHints,
    ClarificationRequest,
    Display,
    EnvelopeState,
    ModelInfo,
    Phase,
    RawPayload,
    SourceRefs,
    Ticket,
    Usage,
    load_lenient,
)
from .tools import ToolCallIndex, ToolId, field

logger = logging.getLogger("support-envelope")

SHORT_MESSAGE_LIMIT = 120

# Probe order is part of the contract: the first non-empty sequence wins.
TOOL_RESULT_PROBES: Sequence[Callable[[Any], Any]] = (
    lambda response: field(response, "toolResults"),
    lambda response: field(field(response, "result"), "toolResults"),
    lambda response: field(response, "steps"),
)

SUGGESTED_NEXT: Dict[Phase, List[str]] = {
    Phase.CLARIFICATION: ["request_user_details"],
    Phase.TICKET_DRAFT: ["confirm_ticket", "add_details"],
    Phase.FINAL_TICKET: ["assign_engineer", "notify_customer"],
}


class BuildOptions(BaseModel):
    """Request-scoped options for envelope construction.

    Attributes:
        run_id: Optional run identifier echoed in the envelope.
        agent_version: Agent version echoed in the envelope.
        schema_version: Envelope schema version echoed in the envelope.
        model_id: Model identifier reported in the model block.
        provider: Model provider reported in the model block.
        temperature: Sampling temperature reported in the model block.
        compiled_from_workflow: True when the response came from a multi-step
            workflow rather than a direct agent call.
    """

    model_config = ConfigDict(protected_namespaces=())

    run_id: Optional[str] = None
    agent_version: str
    schema_version: str
    model_id: Optional[str] = None
    provider: Optional[str] = None
    temperature: Optional[float] = None
    compiled_from_workflow: bool = False

    @classmethod
    def from_config(cls, config: Optional[EnvelopeConfig] = None, **overrides) -> "BuildOptions":
        """Create options from configuration defaults, applying ``overrides``.

        Overrides set to None are ignored so callers can forward optional
        request fields without clobbering the configured defaults.
        """
        config = config or EnvelopeConfig()
        values = {
            "agent_version": config.agent_version,
            "schema_version": config.schema_version,
            "model_id": config.model.default_model,
            "provider": config.model.provider,
            "temperature": config.model.temperature,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


def telegram_run_id(update_id: int) -> str:
    return f"telegram_{update_id}"


def _present(**values) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _text(value: Any) -> str:
    if value is None:
        return "unknown"
    return str(getattr(value, "value", value))


def collect_tool_results(response: Any) -> List[Any]:
    """Return the tool-call records of ``response``.

    Tries ``toolResults``, then ``result.toolResults``, then ``steps``; the
    first non-empty list or tuple wins. Returns an empty list when none is
    found.
    """
    for probe in TOOL_RESULT_PROBES:
        records = probe(response)
        if isinstance(records, (list, tuple)) and records:
            return list(records)
    return []


def _resolve_ticket(tools: ToolCallIndex, response: Any) -> Optional[Ticket]:
    candidates = (
        field(tools.result(ToolId.CREATE_TICKET), "ticketData"),
        field(tools.result(ToolId.EXTRACT_ISSUE), "ticket"),
        field(response, "ticketData"),
        field(field(response, "result"), "ticketData"),
    )
    for data in candidates:
        if isinstance(data, Ticket):
            return data
        # An empty mapping is unresolved, so `{}` degrades toward generic.
        if isinstance(data, Mapping) and data:
            return load_lenient(Ticket, data)
    return None


def _resolve_analysis(tools: ToolCallIndex, response: Any) -> Optional[Analysis]:
    candidates = (
        field(tools.result(ToolId.ANALYZE_TICKET), "analysis"),
        field(response, "analysis"),
    )
    for data in candidates:
        if isinstance(data, Analysis):
            return data
        # Same rule as tickets: `{}` does not make a turn analysisOnly.
        if isinstance(data, Mapping) and data:
            return load_lenient(Analysis, data)
    return None


def classify_phase(
    needs_clarification: bool,
    ticket_created: bool,
    ticket: Optional[Ticket],
    analysis: Optional[Analysis],
    conversation_complete: bool = False,
) -> Phase:
    """Decide the envelope phase; the first matching rule wins."""
    if needs_clarification:
        return Phase.CLARIFICATION
    if ticket_created and ticket is not None:
        return Phase.FINAL_TICKET
    if ticket is not None and conversation_complete:
        return Phase.FINAL_TICKET
    if ticket is not None:
        return Phase.TICKET_DRAFT
    if analysis is not None:
        return Phase.ANALYSIS_ONLY
    return Phase.GENERIC


def _primary_text(
    phase: Phase,
    ticket: Optional[Ticket],
    question: Optional[str],
    response_text: Any,
) -> str:
    if phase is Phase.CLARIFICATION:
        return question or "Need more information."
    if phase is Phase.TICKET_DRAFT:
        return f"Draft ticket: {_text(ticket.summary)} (priority: {_text(ticket.priority)})."
    if phase is Phase.FINAL_TICKET:
        return (
            f"Ticket {_text(ticket.id)} created: {_text(ticket.summary)} "
            f"(priority: {_text(ticket.priority)})."
        )
    if phase is Phase.ANALYSIS_ONLY:
        return "Analysis prepared."
    if isinstance(response_text, str) and response_text:
        return response_text
    return "Processing complete."


def _secondary_text(analysis: Optional[Analysis]) -> Optional[str]:
    if analysis is None or not analysis.recommended_team:
        return None
    text = f"Routing → {analysis.recommended_team}"
    if analysis.escalation_required:
        text += " | Escalation required"
    return text


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _token_count(value: Any) -> Optional[int]:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return _optional_int(value)


def _usd(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def build_canonical_envelope(response: Any, options: BuildOptions) -> CanonicalEnvelope:
    """Build the canonical envelope for one agent or workflow response.

    Args:
        response: Agent output as a mapping or attribute-bearing object. Tool
            calls are read from ``toolResults``, ``result.toolResults`` or
            ``steps``; ``text``, ``usage``, ``ticketData``, ``analysis`` and
            ``conversationState`` are optional.
        options: Versions, run id and model settings to echo back.

    Returns:
        CanonicalEnvelope: Fully populated envelope. Never raises for
        malformed input; unreadable fields are treated as absent.
    """
    tool_results = collect_tool_results(response)
    tools = ToolCallIndex(tool_results)

    clarification_result = tools.result(ToolId.REQUEST_CLARIFICATION)
    question = _optional_str(field(clarification_result, "question"))
    needs_clarification = bool(field(clarification_result, "needsClarification") or question)

    ticket = _resolve_ticket(tools, response)
    analysis = _resolve_analysis(tools, response)
    conversation_complete = bool(field(field(response, "conversationState"), "conversationComplete"))

    phase = classify_phase(
        needs_clarification,
        ToolId.CREATE_TICKET in tools,
        ticket,
        analysis,
        conversation_complete,
    )
    logger.debug(f"Classified response as {phase.value} from {len(tools)} tool call(s)")

    primary_text = _primary_text(phase, ticket, question, field(response, "text"))

    state_values = dict(
        phase=phase,
        complete=phase is Phase.FINAL_TICKET,
        needs_clarification=needs_clarification,
    )
    if needs_clarification:
        state_values["clarification"] = ClarificationRequest(
            **_present(
                question=question,
                turn=_optional_int(field(clarification_result, "conversationTurn")),
                max_turns=_optional_int(field(clarification_result, "maxTurns")),
            )
        )

    display_values = dict(primary_text=primary_text, suggested_next=list(SUGGESTED_NEXT.get(phase, [])))
    secondary_text = _secondary_text(analysis)
    if secondary_text is not None:
        display_values["secondary_text"] = secondary_text

    usage = field(response, "usage")

    return CanonicalEnvelope(
        **_present(
            schema_version=options.schema_version,
            agent_version=options.agent_version,
            run_id=options.run_id,
            state=EnvelopeState(**state_values),
            ticket=ticket,
            analysis=analysis,
            display=Display(**display_values),
            source_refs=SourceRefs(
                ticket_tool_call_id=tools.call_id(ToolId.CREATE_TICKET) or tools.call_id(ToolId.EXTRACT_ISSUE),
                analysis_tool_call_id=tools.call_id(ToolId.ANALYZE_TICKET),
                clarification_tool_call_id=tools.call_id(ToolId.REQUEST_CLARIFICATION),
                compiled_from_workflow=options.compiled_from_workflow,
            ),
            usage=Usage(
                input_tokens=_token_count(field(usage, "inputTokens")),
                output_tokens=_token_count(field(usage, "outputTokens")),
                usd=_usd(field(usage, "usd")),
            ),
            model=ModelInfo(
                **_present(
                    id=options.model_id,
                    provider=options.provider,
                    temperature=options.temperature,
                )
            ),
            channel_hints=ChannelHints(
                short_message=primary_text[:SHORT_MESSAGE_LIMIT],
                rich_panel=phase in (Phase.TICKET_DRAFT, Phase.FINAL_TICKET),
                can_stream_followups=phase is Phase.CLARIFICATION,
            ),
            raw=RawPayload(tool_results=tool_results),
        )
    )
