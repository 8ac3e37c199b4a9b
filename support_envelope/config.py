"""Configuration module for envelope versions, model defaults and the MCP server.

This module centralizes the process-wide defaults the support envelope needs:
the schema and agent versions echoed in every envelope, the model settings
reported in the envelope's model block, and the connection settings of the
envelope MCP server. Values are read from environment variables once, when the
configuration objects are created, and are then passed explicitly to the
builder so that envelope construction never reads ambient state.
"""

import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from . import __version__


class ConnectionMethod(Enum):
    """Supported MCP connection methods for the envelope server.

    - STDIO: Process-based communication via standard input/output (default)
    - SSE: HTTP-based Server-Sent Events for network communication
    """

    STDIO = "stdio"
    SSE = "sse"


class ModelConfig(BaseModel):
    """Model settings reported in the envelope's model block.

    Attributes:
        default_model: Model identifier used when a request does not name one.
        provider: Provider identifier (e.g. 'openai').
        temperature: Sampling temperature used for agent calls.
    """

    default_model: str = os.getenv("MODEL_ID", "gpt-4o-mini")
    provider: Optional[str] = os.getenv("MODEL_PROVIDER", "openai")
    temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.3"))


class ServerConfig(BaseModel):
    """Configuration for the envelope MCP server instance.

    Attributes:
        name: Human-readable server name for identification.
        script_path: Path of the server script relative to the project root.
        connection_method: Protocol to use for server communication.
        host: Network host for SSE connections.
        port: Network port for SSE connections.
    """

    name: str = "EnvelopeServer"
    script_path: str = "mcp_servers/envelope_server.py"
    connection_method: ConnectionMethod = ConnectionMethod.STDIO
    host: str = os.getenv("MCP_HOST", "127.0.0.1")
    port: int = int(os.getenv("MCP_PORT", "8010"))


class EnvelopeConfig(BaseModel):
    """Main configuration for envelope construction and delivery.

    Attributes:
        schema_version: Envelope schema version echoed in every envelope.
        agent_version: Agent version echoed in every envelope.
        model: Model settings for the envelope's model block.
        server: Envelope MCP server settings.
        default_channel: Reply formatter used when no channel is requested.
    """

    schema_version: str = os.getenv("SCHEMA_VERSION", "1.0.0")
    agent_version: str = os.getenv("AGENT_VERSION", __version__)
    model: ModelConfig = ModelConfig()
    server: ServerConfig = ServerConfig()
    default_channel: str = os.getenv("REPLY_CHANNEL", "telegram")
