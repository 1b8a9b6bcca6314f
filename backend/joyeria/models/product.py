from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, Date, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from joyeria.db.database import Base
from joyeria.time_utils import utcnow, today


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    purchase_price = Column(Numeric(12, 2), nullable=False)
    sale_price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    available = Column(Boolean, nullable=False, default=True)
    image_url = Column(String(1024))
    category = Column(String(100))
    supplier = Column(String(255))
    purchase_date = Column(Date, default=today)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    # Relationships
    sales = relationship("Sale", back_populates="product")
    reservations = relationship("Reservation", back_populates="product", cascade="all, delete-orphan")
    user = relationship("User")
