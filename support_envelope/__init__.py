"""Support Envelope - canonical responses for a conversational ticket agent.

This package turns the loosely-structured output of a support-ticket agent
(free text, tool-call results, usage metrics) into a stable, versioned
envelope that any presentation channel can render by switching on its phase.

Components:
- Envelope builder: classifies a turn as clarification, ticket draft, final
  ticket, analysis only, or generic, and derives display text
- Reply formatters: channel-specific renderings of an envelope
- Envelope server: MCP server exposing the builder to other processes
- Rich CLI for building, formatting and demonstrating envelopes
"""

__version__ = "0.1.0"
