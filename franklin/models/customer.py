from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from franklin.db.base import Base


class StripeCustomer(Base):
    __tablename__ = "stripe_customers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, index=True, nullable=False)  # Supabase auth user id (sub claim)
    customer_id = Column(String, unique=True, index=True, nullable=False)  # Stripe cus_... id
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)
