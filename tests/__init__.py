"""Test suite for the Support Envelope.

Covers phase classification and display derivation in the envelope builder,
tool-call lookup, reply formatting per channel, configuration, the envelope
MCP server tools, and the CLI.
"""
