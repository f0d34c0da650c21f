from collections import Counter
from decimal import Decimal

from bigmark.cache import make_cache
from bigmark.db.engine import get_sessionmaker, make_engine
from bigmark.models import Award, Base
from bigmark.workflows import assemble_lottery_strategy, configure_strategy, draw_award

STRATEGY_ID = 100001
ACTIVITY_ID = 100301
WEIGHT_RULE = (
    "4000:102,103,104,105 "
    "5000:102,103,104,105,106,107 "
    "6000:102,103,104,105,106,107,108,109"
)
AWARDS = [
    (101, "random credits", Decimal("80")),
    (102, "5 draws", Decimal("10")),
    (103, "10 draws", Decimal("5")),
    (104, "20 draws", Decimal("2")),
    (105, "pillow", Decimal("1.5")),
    (106, "coffee mug", Decimal("0.8")),
    (107, "earphones", Decimal("0.4")),
    (108, "scooter", Decimal("0.2")),
    (109, "phone", Decimal("0.1")),
]


def main() -> None:
    """Seed the development database with one weighted strategy and assemble it."""
    engine = make_engine()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)
    cache = make_cache()

    with Session.begin() as session:
        session.add_all(
            [
                Award(award_id=award_id, award_key="user_credit_random", award_desc=title)
                for award_id, title, _ in AWARDS
            ]
        )
        configure_strategy(
            session,
            STRATEGY_ID,
            [(award_id, rate) for award_id, _, rate in AWARDS],
            rule_value=WEIGHT_RULE,
            activity_id=ACTIVITY_ID,
            strategy_desc="development strategy",
        )

    with Session() as session:
        ok = assemble_lottery_strategy(session, STRATEGY_ID, cache, use_cache=False)
    print(f"Assembled strategy {STRATEGY_ID}: {ok}")

    for weight_key in (None, "4000", "6000"):
        counts = Counter(draw_award(cache, STRATEGY_ID, weight_key) for _ in range(1000))
        print(f"weight {weight_key or '-'}: {dict(sorted(counts.items()))}")


if __name__ == "__main__":
    main()
