from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import sessionmaker
from lotsettle.db.engine import make_engine
from lotsettle.models import (
    Base,
    Bet,
    BetType,
    Draw,
    DrawStatus,
    DrawTime,
    Ticket,
)
from lotsettle.workflows import (
    record_prize_configuration,
    settle_draw,
    submit_winning_number,
)


def main() -> None:
    """Seed the development database with sample data."""
    engine = make_engine()

    # Drop and recreate all tables with foreign key checks off so SQLite can
    # drop tables in any order.
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)

    today = date.today()
    yesterday = today - timedelta(days=1)

    with Session.begin() as session:
        record_prize_configuration(
            session,
            standard=Decimal("450"),
            rambolito_unique=Decimal("75"),
            rambolito_double=Decimal("150"),
            created_by="seed",
        )

        # Draws: yesterday's slots are drawn, today's are still open
        drawn = {
            slot: Draw(draw_date=yesterday, draw_time=slot, status=DrawStatus.ACTIVE)
            for slot in DrawTime
        }
        open_draws = {
            slot: Draw(draw_date=today, draw_time=slot, status=DrawStatus.PENDING)
            for slot in DrawTime
        }
        session.add_all([*drawn.values(), *open_draws.values()])
        session.flush()

        tickets = [
            Ticket(
                ticket_number="T-0001",
                agent_id=1,
                draw=drawn[DrawTime.TWO_PM],
                bets=[
                    Bet(bet_type=BetType.STANDARD, combination="123", amount=Decimal("100")),
                    Bet(bet_type=BetType.RAMBOLITO, combination="321", amount=Decimal("50")),
                ],
            ),
            Ticket(
                ticket_number="T-0002",
                agent_id=1,
                draw=drawn[DrawTime.TWO_PM],
                bets=[
                    Bet(bet_type=BetType.STANDARD, combination="999", amount=Decimal("20")),
                ],
            ),
            Ticket(
                ticket_number="T-0003",
                agent_id=2,
                draw=drawn[DrawTime.FIVE_PM],
                bets=[
                    Bet(bet_type=BetType.RAMBOLITO, combination="112", amount=Decimal("25")),
                ],
            ),
            Ticket(
                ticket_number="T-0004",
                agent_id=2,
                draw=open_draws[DrawTime.NINE_PM],
                bets=[
                    Bet(bet_type=BetType.STANDARD, combination="456", amount=Decimal("10")),
                ],
            ),
        ]
        session.add_all(tickets)
        session.flush()

        submit_winning_number(session, drawn[DrawTime.TWO_PM], "123")
        submit_winning_number(session, drawn[DrawTime.FIVE_PM], "211")
        submit_winning_number(session, drawn[DrawTime.NINE_PM], "000")
        for draw in drawn.values():
            settle_draw(session, draw)

    print("Development database seeded.")


if __name__ == "__main__":
    main()
