from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from joyeria.db.database import Base
from joyeria.time_utils import utcnow


class PaymentPlan(Base):
    __tablename__ = "payment_plans"

    id = Column(Integer, primary_key=True)
    # One plan per sale, enforced by the database
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, unique=True)
    installment_count = Column(Integer, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    amount_per_installment = Column(Numeric(12, 2), nullable=False)
    start_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    notes = Column(Text)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    sale = relationship("Sale", back_populates="payment_plan")
    installments = relationship(
        "Installment",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="Installment.sequence_number",
    )


class Installment(Base):
    __tablename__ = "installments"

    id = Column(Integer, primary_key=True)
    plan_id = Column(Integer, ForeignKey("payment_plans.id", ondelete="CASCADE"), nullable=False)
    sequence_number = Column(Integer, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    due_date = Column(Date, nullable=False)
    paid_date = Column(Date)
    status = Column(String(20), nullable=False, default="pending")
    payment_method = Column(String(50))
    notes = Column(Text)

    # Relationships
    plan = relationship("PaymentPlan", back_populates="installments")
