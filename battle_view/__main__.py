import argparse
import asyncio
import logging

from dotenv import load_dotenv

from .client import BattleViewClient
from .models import ViewSnapshot
from .render import render_snapshot
from .settings import get_settings

CLEAR_SCREEN = "\033[2J\033[H"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Player view of the current battle")
    parser.add_argument("--url", default=settings.api_base_url, help="Tracker API base URL")
    parser.add_argument("--battle-id", type=int, default=settings.battle_id, help="Follow a specific battle")
    parser.add_argument("--interval", type=float, default=settings.poll_interval, help="Seconds between polls")
    parser.add_argument("--once", action="store_true", help="Print one snapshot and exit")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> None:
    settings = get_settings()

    def show(snapshot: ViewSnapshot) -> None:
        print(CLEAR_SCREEN + render_snapshot(snapshot), flush=True)

    async with BattleViewClient(args.url, timeout=settings.api_timeout) as client:
        if args.once:
            print(render_snapshot(await client.fetch(args.battle_id)))
            return
        await client.poll(show, interval=args.interval, battle_id=args.battle_id)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    get_settings.cache_clear()
    logging.basicConfig(level=logging.WARNING)
    try:
        asyncio.run(run(parse_args(argv)))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
