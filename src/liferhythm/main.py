"""LifeRhythm agent CLI.

Usage:
    liferhythm "I called for garbage tags Monday, remind me in 7-10 days if they don't arrive"
    liferhythm --interactive
"""

import argparse
import asyncio
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import List

from .agent import LifeRhythmAgent
from .models import AgentResult
from .settings import Settings, get_settings

EXAMPLES = (
    "I called for garbage tags Monday, remind me in 7-10 days if they don't arrive",
    "Paid hydro bill today",
    "What tasks are overdue?",
    "Doctor appointment scheduled for March 5th",
)

USAGE = """
Usage:
  liferhythm "your natural language update"
  liferhythm --interactive

Examples:
  liferhythm "I called for garbage tags Monday, remind me in 7-10 days if they don't arrive"
  liferhythm "Paid hydro bill today"
  liferhythm --interactive

Environment variables:
  MCP_SERVER_PATH      Path to the liferhythm-mcp directory (default: ~/liferhythm-mcp)
  LIFERHYTHM_SHEET_ID  Google Sheets ID (SHEET_ID also accepted; default: built-in)
  PROVIDER             anthropic (default) or openai
  ANTHROPIC_API_KEY    Your Anthropic API key (required for the anthropic provider)
"""


def setup_cli_logging(settings: Settings) -> logging.Logger:
    """Configure and return the package logger."""
    settings.log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("liferhythm")
    if logger.handlers:
        return logger

    logger.setLevel(settings.log_level)
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    fh = RotatingFileHandler(settings.log_dir / "agent.log", maxBytes=5_000_000, backupCount=3)
    fh.setFormatter(fmt)
    logger.addHandler(fh)

    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="liferhythm",
        description="Turn natural-language life updates into LifeRhythm task and reminder actions.",
        add_help=True,
    )
    parser.add_argument("utterance", nargs="*", help="update to process (single-shot mode)")
    parser.add_argument(
        "-i", "--interactive", action="store_true", help="read updates line by line"
    )
    return parser


def format_actions(result: AgentResult, label: str = "Actions taken") -> str:
    return f"[{label}: {', '.join(a.tool for a in result.actions)}]"


async def run_single(agent: LifeRhythmAgent, utterance: str) -> int:
    print(f"> {utterance}\n")
    try:
        result = await agent.process(utterance)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if result.actions:
        print(format_actions(result))
    print(result.response)
    return 0


async def run_interactive(agent: LifeRhythmAgent) -> int:
    print('LifeRhythm Agent ready. Type your update (or "quit" to exit).\n')
    print("Examples:")
    for example in EXAMPLES:
        print(f'  "{example}"')
    print()

    while True:
        try:
            line = (await asyncio.to_thread(input, "You: ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            return 0

        if not line:
            continue
        if line.lower() in ("quit", "exit"):
            print("Goodbye!")
            return 0

        try:
            result = await agent.process(line)
        except Exception as e:
            print(f"\nError: {e}\n", file=sys.stderr)
            continue

        if result.actions:
            print(f"\n{format_actions(result, label='Actions')}")
        print(f"\nAssistant: {result.response}\n")


async def run(argv: List[str], agent: LifeRhythmAgent | None = None) -> int:
    """Parse arguments, connect, dispatch to single-shot or interactive mode."""
    args = build_parser().parse_args(argv)
    utterance = " ".join(args.utterance).strip()

    if not args.interactive and not utterance:
        print(USAGE)
        return 1

    agent = agent or LifeRhythmAgent()

    print("LifeRhythm Agent connecting...")
    try:
        tools = await agent.connect()
    except Exception as e:
        print(f"Failed to connect to MCP server: {e}", file=sys.stderr)
        print(
            f"Make sure {agent.settings.mcp_server_path} exists and has a working MCP server",
            file=sys.stderr,
        )
        await agent.close()
        return 1

    print(f"Connected. {len(tools)} tool(s) available: {', '.join(t.name for t in tools)}\n")

    try:
        if args.interactive:
            return await run_interactive(agent)
        return await run_single(agent, utterance)
    finally:
        await agent.close()


def main() -> None:
    setup_cli_logging(get_settings())
    try:
        code = asyncio.run(run(sys.argv[1:]))
    except Exception as e:
        logging.getLogger("liferhythm").exception("Unhandled error: %s", e)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
