"""
Integration Tests for MCP Solana Agents

These tests drive tools, agents and the orchestrator through their public
entry points. The Solana RPC client is always an AsyncMock, so no network or
validator is needed; transactions are still built and signed with real
solders keypairs.

Test files:
- conftest.py: fixtures and RPC response helpers
- test_schema.py: validators and MCP shape flattening
- test_registry.py: tool contract and registry
- test_tools.py: balance, token balances, transfer, memo, market analysis
- test_agent.py: JSON command dispatch and MCP start-up
- test_mcp_session.py: FastMCP registration of tools
- test_orchestrator.py: shared registry, periodic jobs
- test_config.py: environment loading
- test_server.py: HTTP endpoints
"""

# Integration tests for mcp-solana-agents
