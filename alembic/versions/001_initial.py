"""Base revision for the billing schema.

stripe_customers and stripe_subscriptions are created from the ORM models by
Base.metadata.create_all in franklin.main before migrations run, so this
revision has nothing to do. Later revisions (the user subscription view)
build on it.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    pass


def downgrade() -> None:
    pass
