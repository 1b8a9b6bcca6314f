from pydantic import BaseModel


class ExtractRequest(BaseModel):
    text: str | None = None
    type: str = "text"


class ExtractResponse(BaseModel):
    name: str
    category: str | None = None
    description: str | None = None
    purchase_price: float | None = None
    sale_price: float | None = None
    stock: int | None = None
    supplier: str | None = None
