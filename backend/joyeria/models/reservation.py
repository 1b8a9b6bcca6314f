from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, DateTime, Index, text
from sqlalchemy.orm import relationship
from joyeria.db.database import Base
from joyeria.time_utils import utcnow, today


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        # At most one active layaway per product
        Index(
            "uq_reservations_active_product",
            "product_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    customer_name = Column(String(255), nullable=False)
    phone = Column(String(50))
    email = Column(String(255))
    deposit_amount = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    reserved_on = Column(Date, default=today)
    due_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    notes = Column(Text)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    product = relationship("Product", back_populates="reservations")
