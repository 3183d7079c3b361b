"""Create stripe_user_subscriptions view (PostgreSQL only).

One row per signed-in user joining their customer with its cached subscription.
security_invoker makes the view apply the caller's row-level security, so
Supabase clients can read it directly. Other databases skip it; the API reads
through franklin.services.subscription_view instead.

Revision ID: 002_user_subscriptions_view
Revises: 001_initial
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "002_user_subscriptions_view"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name != "postgresql":
        return
    # auth.uid() only exists on Supabase-managed databases
    if bind.execute(sa.text("SELECT to_regprocedure('auth.uid()')")).scalar() is None:
        return
    op.execute(sa.text("""
        CREATE OR REPLACE VIEW public.stripe_user_subscriptions
        WITH (security_invoker = true) AS
        SELECT
            c.customer_id,
            s.subscription_id,
            COALESCE(s.status, 'not_started') AS subscription_status,
            s.price_id,
            s.current_period_start,
            s.current_period_end,
            COALESCE(s.cancel_at_period_end, false) AS cancel_at_period_end,
            s.payment_method_brand,
            s.payment_method_last4,
            s.updated_at
        FROM public.stripe_customers c
        LEFT JOIN public.stripe_subscriptions s
            ON s.customer_id = c.customer_id AND s.deleted_at IS NULL
        WHERE c.user_id = auth.uid()::text
          AND c.deleted_at IS NULL
    """))


def downgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute(sa.text("DROP VIEW IF EXISTS public.stripe_user_subscriptions"))
