"""
Command-Line Interface for Bulk Graph
=====================================

Usage:
    python -m bulkgraph.cli <command> [options]

Commands:
    status         Show the session on this device
    login          Bind a handle to this device
    queue          List members you can still vote on
    vote           Recognize or skip the next member
    leaderboard    Show the ranked tiers
    passport       Generate your passport card

Examples:
    python -m bulkgraph.cli login @alice
    python -m bulkgraph.cli vote recognize
    python -m bulkgraph.cli vote skip --target sample-3
    python -m bulkgraph.cli leaderboard -q bal --format json
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from bulkgraph.config import MAX_VOTES_PER_USER, STORAGE_PATH, EngineConfig
from bulkgraph.engine import RecognitionEngine
from bulkgraph.leaderboard import LeaderboardTiers
from bulkgraph.models import Candidate, VoteValue
from bulkgraph.utils import LocalStorage


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='bulkgraph',
        description='🌐 Bulk Graph - Social Recognition Network',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  BULK_SUPABASE_URL       Candidate store project URL
  BULK_SUPABASE_ANON_KEY  Candidate store API key
  GEMINI_API_KEY          Generative text API key (optional)
  BULK_MAX_VOTES          Votes allowed per device (default: 10)
        """
    )

    parser.add_argument(
        '--storage',
        type=str,
        default=STORAGE_PATH,
        help=f'Session storage file (default: {STORAGE_PATH})'
    )

    parser.add_argument(
        '--max-votes',
        type=int,
        default=MAX_VOTES_PER_USER,
        help=f'Vote limit for this device (default: {MAX_VOTES_PER_USER})'
    )

    parser.add_argument(
        '--format',
        type=str,
        choices=['simple', 'json'],
        default='simple',
        help='Output format (default: simple)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('status', help='Show the session on this device')

    login = subparsers.add_parser('login', help='Bind a handle to this device')
    login.add_argument('handle', type=str, help='Social handle, with or without @')

    subparsers.add_parser('logout', help='Forget the handle on this device')

    subparsers.add_parser('queue', help='List members you can still vote on')

    vote = subparsers.add_parser('vote', help='Recognize or skip the next member')
    vote.add_argument(
        'value',
        type=str,
        choices=[v.value for v in VoteValue],
        help='recognize or skip'
    )
    vote.add_argument(
        '--target',
        type=str,
        default=None,
        help='Vote on this member id instead of the next random one'
    )

    board = subparsers.add_parser('leaderboard', help='Show the ranked tiers')
    board.add_argument('-q', '--query', type=str, default='', help='Filter by name or handle')

    subparsers.add_parser('passport', help='Generate your passport card')

    return parser


def format_candidate(candidate: Candidate, position: Optional[int] = None) -> str:
    prefix = f"{position:3}. " if position is not None else "     "
    return f"{prefix}{candidate.name} ({candidate.handle})  ★ {candidate.trust_score}  [{candidate.id}]"


def format_leaderboard(tiers: LeaderboardTiers) -> str:
    lines = []
    position = 1
    for label, band in (("💎 Diamond", tiers.diamond), ("🥇 Gold", tiers.gold), ("🥈 Silver", tiers.silver)):
        lines.append(f"{label} ({len(band)})")
        lines.append("-" * 50)
        for candidate in band:
            lines.append(format_candidate(candidate, position))
            position += 1
        lines.append("")
    if tiers.query:
        lines.append(f"{tiers.total_matches} member(s) match '{tiers.query}'")
    return '\n'.join(lines)


def queue_with_target(queue: List[Candidate], target_id: str) -> Optional[List[Candidate]]:
    """Move ``target_id`` to the front of the queue; None if not eligible."""
    for i, candidate in enumerate(queue):
        if candidate.id == target_id:
            return [candidate] + queue[:i] + queue[i + 1:]
    return None


def emit(data, fmt: str, simple: str) -> None:
    if fmt == 'json':
        print(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        print(simple)


def run_command(engine: RecognitionEngine, args) -> int:
    """Dispatch one subcommand. Returns the exit code."""
    session = engine.session

    if args.command == 'status':
        node = engine.my_node()
        data = {
            **session.state.to_dict(),
            "votes_remaining": session.votes_remaining,
            "trust_score": node.trust_score if node else None,
            "directory_size": len(engine.directory),
            "offline": engine.directory.from_fallback,
        }
        simple = '\n'.join([
            f"User:        {session.current_user or '(not logged in)'}",
            f"Fingerprint: {engine.fingerprint}",
            f"Votes:       {session.votes_today}/{session.max_votes}",
            f"Trust:       {node.trust_score if node else '-'}",
            f"Directory:   {len(engine.directory)} members" + (" (sample set)" if engine.directory.from_fallback else ""),
        ])
        emit(data, args.format, simple)
        return 0

    if args.command == 'login':
        result = engine.login(args.handle)
        emit(result.to_dict(), args.format, ("✅ " if result.success else "❌ ") + result.message)
        return 0 if result.success else 1

    if args.command == 'logout':
        engine.logout()
        emit({"success": True}, args.format, "Logged out.")
        return 0

    if not session.is_logged_in:
        print("❌ Error: log in first (bulkgraph login <handle>)", file=sys.stderr)
        return 1

    if args.command == 'queue':
        queue = engine.voting_queue()
        simple = '\n'.join(format_candidate(c) for c in queue) or "Queue mapped: no more nodes in range."
        emit([c.to_dict() for c in queue], args.format, simple)
        return 0

    if args.command == 'vote':
        queue = engine.voting_queue()
        if args.target:
            queue = queue_with_target(queue, args.target)
            if queue is None:
                print(f"❌ Error: {args.target} is not in your voting queue", file=sys.stderr)
                return 1
        target = queue[0] if queue else None
        outcome = engine.vote(VoteValue(args.value), queue=queue)
        if outcome.accepted:
            simple = (
                f"✅ {outcome.value.value.title()}: {target.name} ({target.handle})\n"
                f"   Votes used: {outcome.votes_today}/{session.max_votes}"
            )
            if outcome.trust_synced is False:
                simple += "\n   ⚠️  Trust score not synced with the store"
        else:
            simple = f"Vote not cast: {outcome.reason}"
        emit(outcome.to_dict(), args.format, simple)
        return 0 if outcome.accepted else 1

    if args.command == 'leaderboard':
        tiers = engine.leaderboard(args.query)
        emit(tiers.to_dict(), args.format, format_leaderboard(tiers))
        return 0

    if args.command == 'passport':
        passport = engine.passport()
        simple = '\n'.join([
            f"🪪 {passport.name}  {passport.handle}",
            f"   Trust Index: {passport.trust_score}" + (f"  (rank #{passport.rank})" if passport.rank else ""),
            f"   \"{passport.analysis}\"",
            f"   Share: {passport.share_url}",
        ])
        emit(passport.to_dict(), args.format, simple)
        return 0

    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        engine = RecognitionEngine(
            storage=LocalStorage(args.storage),
            config=EngineConfig(max_votes_per_user=args.max_votes),
        )
        engine.start()
        return run_command(engine, args)

    except Exception as e:
        print(f"❌ Error: {str(e)}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
