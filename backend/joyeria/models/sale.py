from sqlalchemy import Column, Integer, String, Numeric, Date, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from joyeria.db.database import Base
from joyeria.time_utils import utcnow, today


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"))
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    profit = Column(Numeric(12, 2), nullable=False)
    customer = Column(String(255))
    payment_method = Column(String(50))
    sale_date = Column(Date, default=today)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    product = relationship("Product", back_populates="sales")
    payment_plan = relationship("PaymentPlan", back_populates="sale", uselist=False)
    user = relationship("User")
