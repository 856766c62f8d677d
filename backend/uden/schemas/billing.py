"""Billing Schemas — order request and checkout redirect."""

from pydantic import BaseModel, Field


class OrderRequest(BaseModel):
    # Product is checked by the workflow so an unknown value gets INVALID_PRODUCT
    product: str = Field(min_length=1, max_length=50)


class OrderResponse(BaseModel):
    url: str
