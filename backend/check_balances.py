#!/usr/bin/env python3
"""
Print net balances and suggested settlements for every group (or one group)
"""
import argparse

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import models
from utils.balances import compute_balances
from utils.currency import format_currency
from utils.errors import LedgerError
from utils.settlements import compute_settlements
from utils.snapshots import group_snapshot, load_group_expenses


def report_group(db, group: models.Group) -> None:
    snapshot = group_snapshot(db, group)
    names = {m.id: m.display_name for m in snapshot.members}
    currency = snapshot.default_currency

    print("=" * 80)
    print(f"GROUP {group.id}: {group.name}")
    print("=" * 80)

    try:
        balances = compute_balances(snapshot, load_group_expenses(db, group.id))
    except LedgerError as e:
        print(f"  Cannot compute balances: {e}\n")
        return

    print("Balances:")
    for member_id, amount in balances.items():
        print(f"  {names.get(member_id, f'Member {member_id}')}: {format_currency(amount, currency)}")

    print("Settlements:")
    settlements = compute_settlements(snapshot, balances)
    if not settlements:
        print("  All settled up")
    for s in settlements:
        print(
            f"  {names.get(s.from_user, s.from_user)} -> {names.get(s.to_user, s.to_user)}: "
            f"{format_currency(s.amount, currency)}"
        )
    print()


def main():
    parser = argparse.ArgumentParser(description="Show balances and settlements per group")
    parser.add_argument("--db-path", default="db.sqlite3", help="Path to SQLite database file")
    parser.add_argument("--group-id", type=int, default=None, help="Only report this group")
    args = parser.parse_args()

    engine = create_engine(f"sqlite:///{args.db_path}")
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    try:
        query = db.query(models.Group).order_by(models.Group.id)
        if args.group_id is not None:
            query = query.filter(models.Group.id == args.group_id)
        for group in query.all():
            report_group(db, group)
    finally:
        db.close()


if __name__ == "__main__":
    main()
