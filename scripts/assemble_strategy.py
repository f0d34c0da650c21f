from __future__ import annotations

import argparse
import logging
from collections import Counter

from bigmark.cache import make_cache
from bigmark.db.engine import get_sessionmaker, make_engine
from bigmark.workflows import assemble_lottery_strategy, draw_award

logger = logging.getLogger("bigmark.scripts.assemble")


def main(argv: list[str] | None = None) -> int:
    """Assemble strategies from the configured database into the configured cache."""
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("strategy_ids", nargs="+", type=int)
    parser.add_argument("--sample", type=int, default=0, help="draws to print per strategy")
    parser.add_argument("--weight", default=None, help="weight key used for sample draws")
    parser.add_argument("--cache-url", default=None, help="overrides REDIS_URL")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    cache = make_cache(args.cache_url)
    Session = get_sessionmaker(make_engine())

    failed = []
    with Session() as session:
        for strategy_id in args.strategy_ids:
            if not assemble_lottery_strategy(session, strategy_id, cache, use_cache=False):
                failed.append(strategy_id)
                continue
            if args.sample:
                counts = Counter(
                    draw_award(cache, strategy_id, args.weight) for _ in range(args.sample)
                )
                print(f"{strategy_id}: {dict(sorted(counts.items()))}")

    if failed:
        logger.error(f"Assembly failed for strategies {failed}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
