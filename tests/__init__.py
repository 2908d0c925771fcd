"""
Test Package for MCP Solana Agents

Integration tests for the agent layer: schema validation and MCP shape
flattening, the tool registry, every built-in Solana tool, agent dispatch,
orchestrator loops, the MCP session and the HTTP front end.

Test Structure:
- integration/: tests per component
- integration/conftest.py: shared fixtures (mocked RPC connection, wallets)
"""

# Test package for mcp-solana-agents
