"""CLI interface for the swap agent.

Build swap transaction plans from the command line.

Usage:
    python -m swap_agent.cli --user 0x... "swap 10 USDC on Ethereum for WETH on Base"
    python -m swap_agent.cli --interactive
    python -m swap_agent.cli --output json "swap 1.5 WETH on Base for USDC on Base"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional

from swap_agent.agent import SwapAgent, build_agent
from swap_agent.cli_output import CLIOutput, OutputFormat
from swap_agent.config import load_settings
from swap_agent.errors import SwapAgentError
from swap_agent.mcp_client import MCPClient
from swap_agent.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def run_single_query(
    agent: SwapAgent,
    query: str,
    user_address: Optional[str],
    output: CLIOutput,
) -> int:
    """Plan a single swap and display the result. Returns the exit code."""
    output.status(f"Processing: {query}")

    try:
        result = await agent.handle(query, user_address)
    except SwapAgentError as exc:
        output.error(str(exc))
        return 1

    output.result(result)
    return 0


async def run_interactive(
    agent: SwapAgent,
    user_address: Optional[str],
    output: CLIOutput,
) -> None:
    """Run interactive REPL session."""
    output.info("Swap Agent CLI - Interactive Mode")
    output.info("Describe a swap, or use /quit to exit, /user <address> to switch wallet")
    output.info("-" * 50)

    while True:
        try:
            query = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            output.info("\nGoodbye!")
            break

        if not query:
            continue

        if query.startswith("/"):
            cmd, _, arg = query.partition(" ")
            cmd = cmd.lower()
            if cmd in ("/quit", "/exit", "/q"):
                output.info("Goodbye!")
                break
            elif cmd in ("/help", "/h"):
                output.info("Commands: /quit, /help, /user <address>, /tokens")
            elif cmd == "/user":
                user_address = arg.strip() or None
                output.info(f"Wallet set to {user_address}")
            elif cmd == "/tokens":
                symbols = agent.planner.resolver.table.symbols()
                output.info("Supported tokens: " + ", ".join(sorted(symbols)))
            else:
                output.warning(f"Unknown command: {query}")
            continue

        try:
            result = await agent.handle(query, user_address)
        except SwapAgentError as exc:
            output.error(str(exc))
            continue
        output.result(result)


async def main() -> int:
    """CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Swap Agent CLI - turn swap requests into transaction plans",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m swap_agent.cli --user 0x... "swap 10 USDC on Ethereum for WETH on Base"
  python -m swap_agent.cli --interactive
  python -m swap_agent.cli --output json "swap 100 DAI for USDC on Ethereum"
        """,
    )

    parser.add_argument(
        "query",
        nargs="?",
        help="Natural language swap request",
    )
    parser.add_argument(
        "-u",
        "--user",
        help="Wallet address the plan is built for (default: USER_ADDRESS)",
    )
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Start interactive REPL mode",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=[fmt.value for fmt in OutputFormat],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug information",
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Read query from stdin",
    )

    args = parser.parse_args()
    output = CLIOutput(format=OutputFormat(args.output), verbose=args.verbose)

    if not args.interactive and not args.query and not args.stdin:
        parser.print_help()
        return 1

    query: Optional[str] = args.query
    if args.stdin:
        query = sys.stdin.read().strip()
        if not query:
            output.error("No query provided via stdin")
            return 1

    try:
        settings = load_settings()
    except RuntimeError as exc:
        output.error(f"Failed to load settings: {exc}")
        output.info("Ensure .env sets QUICKNODE_SUBDOMAIN and QUICKNODE_API_KEY")
        return 1

    log_level = "DEBUG" if args.verbose else settings.log_level
    configure_logging(log_level)

    client = MCPClient("swap", settings.mcp_swap_server_cmd)
    user_address = args.user or settings.user_address

    try:
        agent = build_agent(settings, client)
        output.status("Starting MCP server...")
        await client.start()
        if not client.has_tool(settings.swap_tool_name):
            output.warning(
                f"MCP server does not advertise the '{settings.swap_tool_name}' tool"
            )

        if args.interactive:
            await run_interactive(agent, user_address, output)
            return 0
        return await run_single_query(agent, query or "", user_address, output)
    except (SwapAgentError, FileNotFoundError) as exc:
        output.error(str(exc))
        return 1
    except KeyboardInterrupt:
        output.info("\nInterrupted")
        return 130
    finally:
        output.status("Shutting down MCP server...")
        await client.stop()


def cli_main() -> None:
    """Synchronous wrapper for CLI entry."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli_main()
