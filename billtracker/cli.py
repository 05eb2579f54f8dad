"""Flask CLI commands.
  flask --app manage seed-demo --bills 30
  flask --app manage mark-overdue
"""
from __future__ import annotations
import random
from datetime import date, timedelta

import click
from faker import Faker
from flask import Flask

from .extensions import db
from .models import PAYMENT_METHOD_TYPES, RECURRENCES, Bill, PaymentMethod
from .repositories import CategoryRepository, UserRepository
from .tasks.jobs import mark_overdue_bills

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo12345"


def seed_demo(bills: int = 30, seed: int | None = None) -> str:
    """Create (or top up) the demo user with payment methods and random bills."""
    fake = Faker()
    if seed is not None:
        Faker.seed(seed)
        random.seed(seed)

    users = UserRepository()
    user = users.find_by_email(DEMO_EMAIL)
    if user is None:
        user = users.create_user(DEMO_EMAIL, "Demo User", DEMO_PASSWORD)
        users.flush()

    methods = PaymentMethod.query.filter_by(user_id=user.id).all()
    if not methods:
        for i, kind in enumerate(PAYMENT_METHOD_TYPES[:3]):
            method = PaymentMethod(
                user_id=user.id,
                name=f"{fake.company()} {kind.title()}",
                type=kind,
                details={"last_four": fake.numerify("####")},
                is_default=i == 0,
            )
            db.session.add(method)
            methods.append(method)
        db.session.flush()

    categories = CategoryRepository(user.id).list_ordered()
    today = date.today()
    for _ in range(bills):
        due = today + timedelta(days=random.randint(-60, 45))
        status = "paid" if due < today and random.random() < 0.7 else "unpaid"
        db.session.add(Bill(
            user_id=user.id,
            name=fake.company(),
            amount=round(random.uniform(9.99, 450), 2),
            due_date=due,
            category_id=random.choice(categories).id if categories else None,
            payment_method_id=random.choice(methods).id,
            status=status,
            recurrence=random.choice(RECURRENCES),
            notes=fake.sentence(nb_words=6) if random.random() < 0.3 else None,
        ))
    db.session.commit()
    return user.id


def register_commands(app: Flask) -> None:
    @app.cli.command("seed-demo")
    @click.option("--bills", default=30, show_default=True, help="Number of bills to generate.")
    @click.option("--seed", type=int, default=None, help="Random seed for reproducible data.")
    def seed_demo_command(bills: int, seed: int | None) -> None:
        """Create a demo user with sample bills."""
        seed_demo(bills, seed)
        click.echo(f"Demo data ready: {DEMO_EMAIL} / {DEMO_PASSWORD}")

    @app.cli.command("mark-overdue")
    def mark_overdue_command() -> None:
        """Flag unpaid bills past their due date as overdue."""
        count = mark_overdue_bills()
        click.echo(f"{count} bill(s) marked overdue")
