"""
Pydantic schemas for API requests
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Accepts both camelCase aliases and field names"""
    model_config = ConfigDict(populate_by_name=True)


# Order schemas
class DepositRequest(CamelModel):
    order_id: Optional[str] = Field(None, alias="orderId", description="Existing order; a new one is created when omitted")
    denomination_id: str = Field(..., alias="denominationId")
    qty: int = Field(..., description="Units inserted")


class SelectProductRequest(CamelModel):
    product_id: str = Field(..., alias="productId")


class CancelOrderRequest(CamelModel):
    reason: Optional[str] = None


# Cash schemas
class AdjustStockRequest(CamelModel):
    delta_qty: int = Field(..., alias="deltaQty", description="Signed change in units")


class CalculateChangeRequest(CamelModel):
    amount_to_change: int = Field(..., alias="amountToChange")


class ValidateDenominationRequest(CamelModel):
    denomination_id: str = Field(..., alias="denominationId")
    qty: int


# Product schemas
class CreateProductRequest(CamelModel):
    name: str
    price: int = Field(..., description="Price in minor currency units")
    sku: str


class UpdateProductRequest(CamelModel):
    name: Optional[str] = None
    price: Optional[int] = None
    is_active: Optional[bool] = Field(None, alias="isActive")
