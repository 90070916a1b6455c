#!/usr/bin/env python3

import argparse
import asyncio
import os
import sys

from gld_client.capture import TrailerCapture
from gld_client.config import CONFIG_FILE_NAME, configure_logging, load_config
from gld_client.game_state import GameState
from gld_client.orchestrator import ResolutionOrchestrator, ResolutionOutcome
from gld_client.protocol import ByteCursor
from gld_client.resolver import ModResolver
from gld_client.ruleset_cache import RulesetCache
from gld_client.trailer import TrailerDecoder


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Apply the GLD trailer of a serialized game state"
    )
    parser.add_argument('blob', help='Serialized game-state file')
    parser.add_argument(
        '--offset',
        type=int,
        required=True,
        help='Byte offset where the fixed-format game state ends'
    )
    parser.add_argument('--seed', type=int, required=True, help='Seed of the match')
    parser.add_argument(
        '--config',
        default=CONFIG_FILE_NAME,
        help=f'Config file (default: {CONFIG_FILE_NAME})'
    )
    parser.add_argument('--server-url', default=None, help='Override the configured server URL')
    parser.add_argument(
        '--hash-only',
        action='store_true',
        help='Ignore legacy numeric GLD identifiers'
    )
    parser.add_argument(
        '--capture-dir',
        metavar='DIR',
        nargs='?',
        const='captures',  # Default when --capture-dir provided without arg
        default=None,
        help='Write trailers and fetched documents to DIR (default: captures)'
    )
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    """
    Entry point: read a blob, run the GLD hook on it, report the result.
    """
    args = parse_args(argv)

    config = load_config(args.config)
    configure_logging(args.verbose or config.verbose_logging)

    try:
        with open(args.blob, 'rb') as f:
            blob = f.read()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return os.EX_NOINPUT

    try:
        cursor = ByteCursor(blob, args.offset)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return os.EX_USAGE

    capture_dir = args.capture_dir or config.capture_dir
    capture = TrailerCapture(capture_dir) if capture_dir else None
    if capture:
        print(f"Capture enabled: {capture_dir}/")

    resolver = ModResolver(timeout=config.request_timeout)
    orchestrator = ResolutionOrchestrator(
        cache=RulesetCache(),
        resolver=resolver,
        base_url=args.server_url or config.server_url,
        decoder=TrailerDecoder(accept_numeric=config.accept_numeric_identifiers and not args.hash_only),
        capture=capture,
    )

    game_state = GameState(seed=args.seed)
    try:
        outcome = await orchestrator.process_async(cursor, game_state)
    finally:
        resolver.close()

    print(f"Outcome: {outcome.value}")
    if game_state.has_override:
        ruleset = game_state.override_ruleset
        version = getattr(ruleset, 'version', None)
        sections = getattr(ruleset, 'sections', [])
        print(f"Override ruleset: version={version}, sections={len(sections)}")
    else:
        print("Built-in ruleset in effect")

    if outcome is ResolutionOutcome.RESOLVE_FAILED:
        return 1
    return os.EX_OK


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
