"""Envelope MCP Server exposing canonical envelope construction as tools.

This module implements an MCP server that lets other processes (web API
layers, chat-bot webhooks, future integrations) turn raw agent output into a
canonical envelope and render it for a reply channel without importing the
builder directly.

Tools never raise to the client: failures are reported as ``{"error": ...}``
payloads.
"""

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from support_envelope.config import ConnectionMethod, EnvelopeConfig
from support_envelope.envelope import BuildOptions, build_canonical_envelope
from support_envelope.formatters import FORMATTERS, format_reply as render_reply, parse_envelope
from support_envelope.models import CanonicalEnvelope
from support_envelope.tools import list_tool_ids as known_tool_ids

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("envelope-server")

config = EnvelopeConfig()

# Create FastMCP server instance
mcp = FastMCP(config.server.name)


@mcp.tool()
def build_envelope(
    response: Dict[str, Any],
    run_id: Optional[str] = None,
    model_id: Optional[str] = None,
    temperature: Optional[float] = None,
    compiled_from_workflow: bool = False,
) -> Dict:
    """Build the canonical envelope for one agent or workflow response.

    Args:
        response: Raw agent output containing toolResults, result.toolResults
                  or steps, plus optional text, usage, ticketData, analysis
                  and conversationState.
        run_id: Optional run identifier to echo in the envelope.
        model_id: Model identifier (default: configured MODEL_ID).
        temperature: Sampling temperature (default: configured MODEL_TEMPERATURE).
        compiled_from_workflow: True when the response came from a workflow.

    Returns:
        Dict: Serialized CanonicalEnvelope, or an error payload.
    """
    try:
        options = BuildOptions.from_config(
            config,
            run_id=run_id,
            model_id=model_id,
            temperature=temperature,
            compiled_from_workflow=compiled_from_workflow,
        )
    except ValidationError as e:
        logger.error(f"Invalid build options: {e}")
        return {"error": f"Invalid build options: {e}"}

    envelope = build_canonical_envelope(response, options)
    logger.info(f"Built envelope run_id={run_id} phase={envelope.phase.value}")
    return envelope.to_dict()


@mcp.tool()
def format_reply(envelope: Dict[str, Any], channel: Optional[str] = None) -> Dict:
    """Render a canonical envelope for a reply channel.

    Args:
        envelope: Serialized CanonicalEnvelope (as returned by build_envelope).
        channel: Reply channel name (default: configured REPLY_CHANNEL).

    Returns:
        Dict: channel, phase and rendered text, or an error payload.
    """
    channel = channel or config.default_channel
    try:
        parsed = parse_envelope(envelope)
        text = render_reply(parsed, channel)
    except ValidationError as e:
        logger.error(f"Invalid envelope: {e}")
        return {"error": f"Invalid envelope: {e}"}
    except ValueError as e:
        return {"error": str(e)}

    return {"channel": channel, "phase": parsed.phase.value, "text": text}


@mcp.tool()
def get_envelope_schema() -> Dict:
    """Return the canonical envelope JSON Schema with its versions."""
    return {
        "schemaVersion": config.schema_version,
        "agentVersion": config.agent_version,
        "description": "Canonical envelope schema for support ticket processing",
        "schema": CanonicalEnvelope.model_json_schema(by_alias=True),
    }


@mcp.tool()
def list_tool_ids() -> Dict:
    """List the agent tool identifiers the envelope builder recognizes."""
    return {"tools": [{"id": tool_id} for tool_id in known_tool_ids()]}


@mcp.tool()
def health_check() -> Dict:
    """Report server status, versions and available reply channels."""
    return {
        "status": "healthy",
        "server": config.server.name,
        "agentVersion": config.agent_version,
        "schemaVersion": config.schema_version,
        "channels": sorted(FORMATTERS),
    }


# Main execution
async def main():
    """Main entry point for the envelope server.

    Handles connection setup for both STDIO and SSE protocols.
    """
    import argparse
    import os

    # Set logging level based on environment variable
    log_level = os.getenv("MCP_LOG_LEVEL", "INFO")
    logging.getLogger().setLevel(getattr(logging, log_level))

    parser = argparse.ArgumentParser(description="Envelope MCP Server")
    parser.add_argument(
        "--connection",
        choices=[method.value for method in ConnectionMethod],
        default=ConnectionMethod.STDIO.value,
        help="Connection method (default: stdio)",
    )
    parser.add_argument("--host", default=config.server.host, help="Host for SSE connections")
    parser.add_argument(
        "--port", type=int, default=config.server.port, help="Port for SSE connections"
    )

    args = parser.parse_args()

    if args.connection == ConnectionMethod.STDIO.value:
        await mcp.run_stdio_async()
    elif args.connection == ConnectionMethod.SSE.value:
        mcp.settings.host = args.host
        mcp.settings.port = args.port
        await mcp.run_sse_async()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
