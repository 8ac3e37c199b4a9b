"""Channel reply formatters for canonical envelopes.

Each channel renders an envelope by switching on ``state.phase``. The
templates are deliberately kept per channel: the envelope carries no channel
formatting, so every consumer owns its own wording and markup.
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, Union

from .models import Analysis, CanonicalEnvelope, Phase, Ticket, load_lenient

DEFAULT_GREETING = (
    "I'm here to help you create support tickets. Please describe your issue "
    "and I'll gather the necessary information."
)


def parse_envelope(envelope: Union[CanonicalEnvelope, Dict[str, Any]]) -> CanonicalEnvelope:
    """Load a serialized envelope for rendering.

    The ticket and analysis blocks are loaded leniently, the same way the
    builder resolves them, so any envelope the builder emitted can be rendered
    from its dict form. The rest of the envelope is validated strictly.

    Raises:
        ValidationError: If the envelope outside ticket and analysis is invalid.
    """
    if isinstance(envelope, CanonicalEnvelope):
        return envelope
    if not isinstance(envelope, Mapping):
        return CanonicalEnvelope.model_validate(envelope)

    values = dict(envelope)
    blocks = {
        "ticket": (Ticket, values.pop("ticket", None)),
        "analysis": (Analysis, values.pop("analysis", None)),
    }
    parsed = CanonicalEnvelope.model_validate(values)

    update = {}
    for name, (model_class, data) in blocks.items():
        if isinstance(data, Mapping):
            update[name] = load_lenient(model_class, data)
    return parsed.model_copy(update=update) if update else parsed


def _value(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(getattr(value, "value", value))


def estimated_resolution(ticket: Ticket) -> str:
    """Return the ticket's ETA, falling back to the creation tool's field."""
    extra = ticket.model_extra or {}
    return ticket.estimated_resolution_time or extra.get("estimatedResolution") or "TBD"


def _join(*parts: str) -> str:
    return "\n\n".join(part for part in parts if part)


def format_telegram_reply(envelope: Union[CanonicalEnvelope, Dict[str, Any]]) -> str:
    """Render an envelope as a Telegram Markdown message."""
    envelope = parse_envelope(envelope)
    display = envelope.display
    ticket = envelope.ticket

    if envelope.phase is Phase.FINAL_TICKET and ticket is not None:
        return (
            "✅ *Support Ticket Created!*\n\n"
            f"📋 *Ticket ID:* `{_value(ticket.id)}`\n"
            f"📝 *Summary:* {_value(ticket.summary)}\n"
            f"🔥 *Priority:* {_value(ticket.priority).upper()}\n"
            f"⏰ *Estimated Resolution:* {estimated_resolution(ticket)}\n\n"
            "Your ticket has been logged and our support team will be in touch soon. "
            "Is there anything else I can help you with?"
        )

    if envelope.phase is Phase.CLARIFICATION:
        return _join(
            "🤔 *I need a bit more information:*",
            display.primary_text,
            "Please provide the additional details so I can create an accurate support ticket for you.",
        )

    if envelope.phase is Phase.TICKET_DRAFT:
        return _join(
            "📝 *Draft Ticket Prepared:*",
            display.primary_text,
            display.secondary_text or "",
            "Would you like me to create this ticket, or do you need to add more details?",
        )

    if envelope.phase is Phase.ANALYSIS_ONLY:
        return _join("🔍 *Analysis Complete:*", display.primary_text, display.secondary_text or "")

    return display.primary_text or DEFAULT_GREETING


def format_plain_reply(envelope: Union[CanonicalEnvelope, Dict[str, Any]]) -> str:
    """Render an envelope as unadorned text for web clients and logs."""
    envelope = parse_envelope(envelope)
    display = envelope.display
    ticket = envelope.ticket

    if envelope.phase is Phase.FINAL_TICKET and ticket is not None:
        return "\n".join(
            [
                "Support ticket created.",
                f"Ticket ID: {_value(ticket.id)}",
                f"Summary: {_value(ticket.summary)}",
                f"Priority: {_value(ticket.priority).upper()}",
                f"Estimated Resolution: {estimated_resolution(ticket)}",
            ]
        )

    if envelope.phase is Phase.CLARIFICATION:
        return _join("I need a bit more information:", display.primary_text)

    if envelope.phase is Phase.TICKET_DRAFT:
        return _join(
            display.primary_text,
            display.secondary_text or "",
            "Reply 'confirm' to create this ticket or add more details.",
        )

    if envelope.phase is Phase.ANALYSIS_ONLY:
        return _join(display.primary_text, display.secondary_text or "")

    return display.primary_text or DEFAULT_GREETING


FORMATTERS: Dict[str, Callable[[Any], str]] = {
    "telegram": format_telegram_reply,
    "plain": format_plain_reply,
}


def format_reply(envelope: Union[CanonicalEnvelope, Dict[str, Any]], channel: str = "telegram") -> str:
    """Render ``envelope`` for ``channel``.

    Raises:
        ValueError: If no formatter is registered for the channel.
    """
    try:
        formatter = FORMATTERS[channel]
    except KeyError:
        raise ValueError(
            f"Unknown reply channel: {channel}. Available: {', '.join(sorted(FORMATTERS))}"
        ) from None
    return formatter(envelope)
