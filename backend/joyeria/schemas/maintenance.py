from pydantic import BaseModel


class SweepResult(BaseModel):
    installments: int
    plans: int
    reservations: int
