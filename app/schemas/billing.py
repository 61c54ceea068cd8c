from pydantic import BaseModel, Field
from typing import Optional


class CheckoutRequest(BaseModel):
    price_id: Optional[str] = Field(None, alias="priceId")

    class Config:
        populate_by_name = True
