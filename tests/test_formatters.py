"""Tests for the channel reply formatters."""

import pytest
from pydantic import ValidationError

from support_envelope.envelope import BuildOptions, build_canonical_envelope
from support_envelope.formatters import (
    DEFAULT_GREETING,
    FORMATTERS,
    format_plain_reply,
    format_reply,
    format_telegram_reply,
    parse_envelope,
)
from support_envelope.samples import SAMPLE_RESPONSES

OPTIONS = BuildOptions(agent_version="0.1.0", schema_version="1.0.0")


def envelope_for(name):
    return build_canonical_envelope(SAMPLE_RESPONSES[name]["response"], OPTIONS)


def test_telegram_final_ticket_confirmation():
    text = format_telegram_reply(envelope_for("finalTicket"))

    assert text.startswith("✅ *Support Ticket Created!*")
    assert "`TICKET-1700000000000-ab12c`" in text
    assert "*Summary:* Login broken for SSO users" in text
    assert "*Priority:* CRITICAL" in text
    assert "*Estimated Resolution:* 2 hours" in text


def test_final_ticket_without_eta_shows_tbd():
    envelope = build_canonical_envelope(
        {"toolResults": [{"toolName": "createTicket", "result": {"ticketData": {"id": "T-1", "summary": "x", "priority": "low"}}}]},
        OPTIONS,
    )

    assert "*Estimated Resolution:* TBD" in format_telegram_reply(envelope)
    assert "Estimated Resolution: TBD" in format_plain_reply(envelope)


def test_telegram_clarification_prompt():
    text = format_telegram_reply(envelope_for("clarification"))

    assert text.startswith("🤔 *I need a bit more information:*")
    assert "What city is the outage affecting?" in text


def test_telegram_draft_preview_includes_routing():
    text = format_telegram_reply(envelope_for("ticketDraft"))

    assert "📝 *Draft Ticket Prepared:*" in text
    assert "Draft ticket: Checkout page times out (priority: high)." in text
    assert "Routing → payments" in text
    assert text.endswith("do you need to add more details?")


def test_telegram_analysis_summary():
    text = format_telegram_reply(envelope_for("analysisOnly"))

    assert text == "🔍 *Analysis Complete:*\n\nAnalysis prepared.\n\nRouting → billing | Escalation required"


def test_generic_reply_uses_primary_text():
    assert format_telegram_reply(envelope_for("generic")) == "Hello, how can I help?"
    assert format_plain_reply(envelope_for("generic")) == "Hello, how can I help?"


def test_generic_reply_falls_back_to_greeting():
    envelope = envelope_for("generic").model_copy(deep=True)
    envelope.display.primary_text = ""

    assert format_telegram_reply(envelope) == DEFAULT_GREETING


def test_plain_final_ticket_has_no_markup():
    text = format_plain_reply(envelope_for("finalTicket"))

    assert "Ticket ID: TICKET-1700000000000-ab12c" in text
    assert "Priority: CRITICAL" in text
    assert "*" not in text


@pytest.mark.parametrize("channel", sorted(FORMATTERS))
@pytest.mark.parametrize("name", sorted(SAMPLE_RESPONSES))
def test_format_reply_accepts_serialized_envelopes(channel, name):
    envelope = envelope_for(name)

    assert format_reply(envelope.to_dict(), channel) == format_reply(envelope, channel)


def test_format_reply_renders_tickets_that_failed_validation():
    """Tickets the builder carried unvalidated still render from the dict form."""
    final = build_canonical_envelope(
        {"toolResults": [{"toolName": "createTicket", "result": {"ticketData": {"id": "T-9", "summary": "Odd", "priority": "urgent"}}}]},
        OPTIONS,
    )
    draft = build_canonical_envelope(
        {"toolResults": [{"toolName": "extractIssue", "result": {"ticket": {"summary": "VPN down", "priority": "high", "tags": "vpn"}}}]},
        OPTIONS,
    )

    text = format_reply(final.to_dict(), "plain")
    assert "Ticket ID: T-9" in text
    assert "Priority: URGENT" in text
    assert text == format_reply(final, "plain")

    text = format_reply(draft.to_dict(), "telegram")
    assert "Draft ticket: VPN down (priority: high)." in text
    assert text == format_reply(draft, "telegram")


def test_parse_envelope_rejects_invalid_envelope_fields():
    data = envelope_for("generic").to_dict()
    data["state"] = "broken"

    with pytest.raises(ValidationError):
        parse_envelope(data)


def test_unknown_channel_is_rejected():
    with pytest.raises(ValueError, match="Unknown reply channel: fax"):
        format_reply(envelope_for("generic"), "fax")
