"""Client for the envelope MCP server.

This module provides the EnvelopeClient class, which starts the envelope
server as a subprocess over STDIO and calls its tools. It is what channel
adapters running in other processes use to normalize agent output without
importing the builder.
"""

import json
import sys
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from .config import EnvelopeConfig

PROJECT_ROOT = Path(__file__).parent.parent


class EnvelopeClient:
    """Connects to the envelope MCP server and calls its tools.

    Attributes:
        config: EnvelopeConfig with the server settings.
        session: Active MCP session, or None when not connected.
        running: True while the server subprocess is connected.
    """

    def __init__(self, config: Optional[EnvelopeConfig] = None):
        self.config = config or EnvelopeConfig()
        self.session: Optional[ClientSession] = None
        self.running = False
        self._context_stack: Optional[AsyncExitStack] = None

    async def start(self) -> bool:
        """Start the envelope server over STDIO and initialize the session.

        Returns:
            bool: True if the server started, False otherwise.
        """
        if self.running:
            return True

        server_script = PROJECT_ROOT / self.config.server.script_path
        if not server_script.exists():
            print(f"ERROR: Server script not found: {server_script}")
            return False

        server_params = StdioServerParameters(
            command=sys.executable,
            args=[str(server_script), "--connection", "stdio"],
            env={
                "PYTHONUNBUFFERED": "1",
                "PYTHONPATH": str(PROJECT_ROOT),
                "MCP_LOG_LEVEL": "WARNING",
            },
        )

        self._context_stack = AsyncExitStack()
        try:
            read, write = await self._context_stack.enter_async_context(stdio_client(server_params))
            self.session = await self._context_stack.enter_async_context(ClientSession(read, write))
            await self.session.initialize()
        except Exception as e:
            print(f"ERROR: Envelope server startup failed: {e}")
            await self.stop()
            return False

        self.running = True
        return True

    async def stop(self):
        """Close the session and terminate the server subprocess."""
        if self._context_stack:
            try:
                await self._context_stack.aclose()
            except Exception as e:
                print(f"Warning: Error cleaning up STDIO context: {e}")
            finally:
                self._context_stack = None
        self.session = None
        self.running = False

    async def __aenter__(self) -> "EnvelopeClient":
        if not await self.start():
            raise RuntimeError("Envelope server failed to start")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def _call(self, tool: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        if not self.running or self.session is None:
            raise RuntimeError("Envelope server not running")

        result = await self.session.call_tool(tool, arguments or {})
        if not result.content:
            return None
        return json.loads(result.content[0].text)

    async def build_envelope(
        self,
        response: Dict[str, Any],
        run_id: Optional[str] = None,
        compiled_from_workflow: bool = False,
    ) -> Dict:
        arguments = {"response": response, "compiled_from_workflow": compiled_from_workflow}
        if run_id is not None:
            arguments["run_id"] = run_id
        return await self._call("build_envelope", arguments)

    async def format_reply(self, envelope: Dict[str, Any], channel: Optional[str] = None) -> Dict:
        arguments = {"envelope": envelope}
        if channel is not None:
            arguments["channel"] = channel
        return await self._call("format_reply", arguments)

    async def list_tool_ids(self) -> List[str]:
        manifest = await self._call("list_tool_ids")
        return [tool["id"] for tool in manifest.get("tools", [])]

    async def get_health_status(self) -> Dict:
        return await self._call("health_check")
