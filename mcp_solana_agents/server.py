"""
HTTP front end.

    POST /api/analyze-token   {"tokenAddress": "..."}
    GET  /health

Run with `python -m mcp_solana_agents.server` or the `mcp-solana-agents`
console script; settings come from the environment (see `config.py`).
"""

import json

import uvicorn
from mcp.server.fastmcp.utilities.logging import configure_logging, get_logger
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .config import AgentConfig, load_settings
from .orchestrator import Orchestrator
from .tools import default_tools

logger = get_logger(__name__)

ANALYZER_AGENT = "token-analyzer"


def create_app(orchestrator: Orchestrator) -> Starlette:
    async def analyze_token(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            body = None
        token_address = body.get("tokenAddress") if isinstance(body, dict) else None
        if not token_address:
            return JSONResponse({"error": "Token address is required"}, status_code=400)

        logger.info(f"Analyze request for {token_address}")
        try:
            agent = orchestrator.create_agent(
                AgentConfig(name=ANALYZER_AGENT, tools=["analyzeMarket"])
            )
            await agent.initialize()
            result = await agent.execute(json.dumps({
                "tool": "analyzeMarket",
                "params": {"marketAddress": token_address},
            }))
            analysis = json.loads(result)
        except Exception as e:
            logger.exception(f"Analysis failed: {e}")
            return JSONResponse({"success": False, "error": str(e)}, status_code=500)

        if isinstance(analysis, dict) and "error" in analysis:
            logger.error(f"Analysis failed: {analysis['error']}")
            return JSONResponse({"success": False, "error": analysis["error"]}, status_code=500)

        return JSONResponse({"success": True, "analysis": analysis})

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return Starlette(
        routes=[
            Route("/api/analyze-token", analyze_token, methods=["POST"]),
            Route("/health", health, methods=["GET"]),
        ],
        middleware=[Middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])],
    )


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    orchestrator = Orchestrator(settings, tools=default_tools())
    app = create_app(orchestrator)
    logger.info(f"Server running on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
