#!/usr/bin/env python3
"""
Oddsy Interactive CLI

Ask the betting analyst from a terminal, either one question at a time
or in an interactive session that keeps the conversation going.
"""

import argparse
import json
import logging
import sys
from typing import Any, Optional

from .agent import build_agent_loop, new_execution_id
from .config import config
from .errors import OddsyError
from .orchestration import AgentLoop, format_outcome
from .tools import ApiKeyConfig, build_registry

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def print_banner() -> None:
    """Print the welcome banner."""
    print(
        """
╔════════════════════════════════════════════════════════════════╗
║                      Oddsy Interactive                          ║
║                                                                 ║
║  Moneyline value picks from live odds, stats and news           ║
╚════════════════════════════════════════════════════════════════╝

Available commands:
  /help     - Show this help message
  /trace    - Show the trace of the last question
  /tools    - List available tools
  /clear    - Clear conversation history
  /quit     - Exit the CLI
"""
    )


def print_tools() -> None:
    """Print the tools available with the configured keys."""
    registry = build_registry(ApiKeyConfig.from_upstream(config.upstream), config.upstream)
    print("\nAvailable Tools:")
    print("─" * 64)
    print(registry.get_tools_summary())
    print()


def print_trace(loop: Optional[AgentLoop]) -> None:
    """Print the trace of the last run."""
    trace = loop.get_trace() if loop else []
    if not trace:
        print("\nNo trace available. Ask a question first.\n")
        return

    print("\n" + "═" * 70)
    print("ORCHESTRATION TRACE")
    print("═" * 70)
    for step in trace:
        print(f"\n┌─ Step {step['step']}" + ("  [FINAL]" if step["is_final"] else ""))
        if step["action"]:
            print(f"│  Action: {step['action']}")
        if step["action_input"]:
            print(f"│  Input: {step['action_input']}")
        if step["observation"]:
            obs = json.dumps(step["observation"], default=str)
            if len(obs) > 200:
                obs = obs[:200] + "..."
            print(f"│  Observation: {obs}")
        if step["final_answer"]:
            print(f"│  Answer: {step['final_answer']}")
        print("└" + "─" * 68)
    print()


def render_response(response: dict[str, Any]) -> str:
    """Human-readable rendering of a run result."""
    if response["type"] == "final":
        data = response["data"]
        game = data.get("game", {})
        pick = data.get("pick", {})
        lines = [
            f"{game.get('away_team')} @ {game.get('home_team')} ({game.get('commence_time', 'TBD')})",
            f"PICK: {pick.get('team')} {pick.get('price')} ({pick.get('bookmaker') or 'best available'})",
            "",
            data.get("narrative", ""),
        ]
        return "\n".join(lines)
    if response["type"] == "answer":
        steps = "".join(f"  · {s}\n" for s in response.get("steps", []))
        return f"{steps}{response['content']}"
    return response["content"]


class InteractiveCLI:
    """Interactive session that keeps the conversation history."""

    def __init__(self):
        self.history: list[dict[str, str]] = []
        self.last_loop: Optional[AgentLoop] = None

    def clear_history(self) -> None:
        self.history = []
        self.last_loop = None
        print("\nConversation history cleared.\n")

    def process_query(self, query: str) -> None:
        self.history.append({"role": "user", "content": query})
        loop = build_agent_loop(execution_id=new_execution_id())
        self.last_loop = loop

        print("\nAnalyzing...\n")
        try:
            response = format_outcome(loop.run(self.history))
        except OddsyError as e:
            self.history.pop()
            print(f"\nError: {e}\n")
            return

        rendered = render_response(response)
        self.history.append({"role": "assistant", "content": rendered})
        print("═" * 70)
        print(rendered)
        print("═" * 70 + "\n")

    def run(self) -> None:
        print_banner()
        while True:
            try:
                user_input = input(">>> ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\nGoodbye!\n")
                break

            if not user_input:
                continue

            command = user_input.lower()
            if command in ("/quit", "/exit", "/q"):
                print("\nGoodbye!\n")
                break
            elif command in ("/help", "/h", "/?"):
                print_banner()
            elif command == "/trace":
                print_trace(self.last_loop)
            elif command == "/tools":
                print_tools()
            elif command == "/clear":
                self.clear_history()
            elif command.startswith("/"):
                print(f"\nUnknown command: {user_input}")
                print("Type /help for available commands.\n")
            else:
                self.process_query(user_input)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Oddsy betting analyst CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                        # Start interactive mode
  %(prog)s "Best NBA moneyline value tonight?"    # Ask one question
  %(prog)s --json "Any NFL underdogs worth it?"   # Print the raw response
""",
    )
    parser.add_argument("question", nargs="?", help="Ask a single question and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--json", action="store_true", help="Output the response as JSON")
    args = parser.parse_args()

    setup_logging(args.verbose)

    if not args.question:
        InteractiveCLI().run()
        return

    loop = build_agent_loop(execution_id=new_execution_id())
    try:
        response = format_outcome(loop.run([{"role": "user", "content": args.question}]))
    except OddsyError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(response, indent=2))
    else:
        print(render_response(response))


if __name__ == "__main__":
    main()
