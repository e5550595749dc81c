#!/usr/bin/env python3
"""Weather Chat Assistant CLI."""

import argparse
import logging
import sys
from config.settings import Settings
from orchestrator import WeatherAssistantOrchestrator


EXIT_COMMANDS = {"quit", "exit", "q"}


def _print_history(orchestrator: WeatherAssistantOrchestrator, session_id: str):
    history = orchestrator.get_conversation_history(session_id)
    if not history:
        print("(no history yet)")
        return
    for turn in history:
        print(f"[{turn['role']}] {turn['content']}")


def run_interactive(orchestrator: WeatherAssistantOrchestrator, session_id: str):
    """Read questions from stdin until the user quits."""
    print("Weather Chat Assistant. Ask about the weather anywhere.")
    print("Commands: /reset (new conversation), /history, quit\n")

    while True:
        try:
            user_input = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not user_input:
            continue
        if user_input.lower() in EXIT_COMMANDS:
            break
        if user_input == "/reset":
            orchestrator.reset_session(session_id)
            session_id = orchestrator.new_session_id()
            print("Started a new conversation.\n")
            continue
        if user_input == "/history":
            _print_history(orchestrator, session_id)
            continue

        answer = orchestrator.chat(session_id, user_input)
        print(f"\nAssistant: {answer}\n")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Weather Chat Assistant - ask about current weather and forecasts"
    )
    parser.add_argument(
        "--question",
        "-q",
        type=str,
        help="Ask a single question and exit (default: interactive chat)"
    )
    parser.add_argument(
        "--session-id",
        type=str,
        help="Conversation ID to continue (default: a new one)"
    )
    parser.add_argument(
        "--provider",
        type=str,
        choices=["openai", "anthropic"],
        help="LLM provider (default: LLM_PROVIDER or openai)"
    )
    parser.add_argument(
        "--model",
        type=str,
        help="Override the provider's default model"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    # Create settings
    settings = Settings(
        llm_provider=args.provider,
        llm_model=args.model,
        verbose=args.verbose,
    )

    # Initialize orchestrator
    orchestrator = WeatherAssistantOrchestrator(settings=settings)
    session_id = args.session_id or orchestrator.new_session_id()

    try:
        if args.question:
            answer = orchestrator.chat(session_id, args.question)
            print("\n" + "="*60)
            print("ANSWER")
            print("="*60 + "\n")
            print(answer)
            print("\n")
        else:
            run_interactive(orchestrator, session_id)
    except Exception as e:
        print(f"Error processing question: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
