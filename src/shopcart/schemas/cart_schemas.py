from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from shopcart.utils.validators import ValidationUtils


class AddItemCommand(BaseModel):
    """Request to add item to cart"""
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={"example": {"productId": "P1", "quantity": 2}},
    )

    product_id: str = Field(alias="productId", description="Catalog product identifier")
    quantity: StrictInt = Field(default=1, ge=1, description="Units to add")

    @field_validator('product_id')
    @classmethod
    def validate_product_id(cls, v):
        v = v.strip()
        if not ValidationUtils.validate_identifier(v):
            raise ValueError('Invalid product id')
        return v


class UpdateItemCommand(BaseModel):
    """Request to update cart item quantity"""
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"quantity": 3}},
    )

    quantity: StrictInt = Field(ge=0, description="New quantity (0 to remove)")


class ApplyCouponCommand(BaseModel):
    """Request to apply a coupon code"""
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"code": "SAVE10"}},
    )

    code: str = Field(min_length=1, description="Coupon code, case-insensitive")

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v):
        v = ValidationUtils.normalize_coupon_code(v)
        if not ValidationUtils.validate_coupon_code(v):
            raise ValueError('Invalid coupon code format')
        return v
