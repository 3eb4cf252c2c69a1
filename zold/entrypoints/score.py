"""Score command-line entrypoint.

    zold-score mine --host b2.zold.io --invoice THdonv1E@abcdabcdabcdabcd --rounds 3
    zold-score verify "8 5b332d31 b2.zold.io 1000 THdonv1E abcdabcdabcdabcd 3a934b"
    zold-score show "8 5b332d31 b2.zold.io 1000 THdonv1E abcdabcdabcdabcd 3a934b"
"""

import argparse
import asyncio
import json
import os
import signal
import sys

import bittensor as bt
from dotenv import load_dotenv

from zold.base.config import ScoreSettings, load_settings
from zold.score.errors import ScoreError
from zold.score.farm import ScoreFarm
from zold.score.models import Score
from zold.score.suffix import make_finder
from zold.score.verifier import ScoreVerifier


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="zold-score", description="Zold proof-of-work scores")
    bt.logging.add_args(parser)
    commands = parser.add_subparsers(dest="command", required=True)

    mine = commands.add_parser("mine", help="Calculate a score chain and print it after every round.")
    mine.add_argument("--host", type=str, default=None)
    mine.add_argument("--port", type=int, default=None)
    mine.add_argument("--invoice", type=str, default=None)
    mine.add_argument("--strength", type=int, default=None)
    mine.add_argument("--rounds", type=int, default=None, help="Stop after this many rounds.")
    mine.add_argument("--finder", type=str, default=None, help="Suffix search strategy: counter or random.")

    verify = commands.add_parser("verify", help="Verify a score in canonical text form.")
    verify.add_argument("text", type=str)
    verify.add_argument("--min-strength", type=int, default=None)
    verify.add_argument("--min-value", type=int, default=0)

    show = commands.add_parser("show", help="Print the structured form of a score as JSON.")
    show.add_argument("text", type=str)
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    if getattr(args, "logging.trace", False):
        bt.logging.set_trace(True)
    elif getattr(args, "logging.debug", False):
        bt.logging.set_debug(True)


def _mine(args: argparse.Namespace, settings: ScoreSettings) -> int:
    farm = ScoreFarm(
        host=args.host if args.host is not None else settings.host,
        port=args.port if args.port is not None else settings.port,
        invoice=args.invoice if args.invoice is not None else settings.invoice,
        strength=args.strength if args.strength is not None else settings.strength,
        finder=make_finder(args.finder if args.finder is not None else settings.finder),
        max_value=settings.max_value,
        best_before=settings.best_before,
        on_step=lambda score: print(score.to_text(), flush=True),
    )

    def _signal_handler(sig, frame):
        bt.logging.info({"zold_score": "shutdown_signal_received"})
        farm.stop()

    previous = {
        sig: signal.signal(sig, _signal_handler) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        asyncio.run(farm.run(rounds=args.rounds))
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    return 0


def _verify(args: argparse.Namespace, settings: ScoreSettings) -> int:
    verifier = ScoreVerifier(
        min_strength=args.min_strength if args.min_strength is not None else settings.strength,
        best_before=settings.best_before,
        min_value=args.min_value,
    )
    result = verifier.verify_text(args.text)
    if result:
        print(f"valid {result.score.to_mnemo()}")
        return 0
    for error in result.errors:
        print(error, file=sys.stderr)
    return 1


def _show(args: argparse.Namespace) -> int:
    try:
        score = Score.parse(args.text)
    except ScoreError as e:
        print(str(e), file=sys.stderr)
        return 1
    print(json.dumps(score.to_dict(), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    # Load .env if not in test mode
    if os.environ.get("ZOLD_TEST_MODE") != "true":
        load_dotenv()

    args = build_parser().parse_args(argv)
    _configure_logging(args)

    try:
        settings = load_settings()
    except ValueError as e:
        bt.logging.error({"zold_score": {"event": "bad_settings", "error": str(e)}})
        return 2

    if args.command == "mine":
        try:
            return _mine(args, settings)
        except ScoreError as e:
            bt.logging.error({"zold_score": {"event": "mine_failed", "error": str(e)}})
            return 1
    if args.command == "verify":
        return _verify(args, settings)
    return _show(args)


if __name__ == "__main__":
    sys.exit(main())
