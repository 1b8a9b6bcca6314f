from joyeria.models.user import User, SessionToken, LoginEvent
from joyeria.models.product import Product
from joyeria.models.sale import Sale
from joyeria.models.payment_plan import PaymentPlan, Installment
from joyeria.models.reservation import Reservation
from joyeria.models.expense import Expense

__all__ = [
    "User",
    "SessionToken",
    "LoginEvent",
    "Product",
    "Sale",
    "PaymentPlan",
    "Installment",
    "Reservation",
    "Expense",
]
