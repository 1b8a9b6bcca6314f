from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from joyeria.db.database import Base
from joyeria.time_utils import utcnow, today


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    concept = Column(String(255), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100))
    description = Column(Text)
    expense_date = Column(Date, default=today)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    user = relationship("User")
