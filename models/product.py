"""Product candidates returned by the search vendors."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ProductSource = Literal["rakuten", "serpapi"]


class ProductResult(BaseModel):
    """One purchasable product candidate from a search vendor.

    Field names are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    brand: Optional[str] = None
    price: Optional[float] = None
    url: str = ""
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    source: ProductSource
    jan_code: Optional[str] = Field(default=None, alias="janCode")

    @property
    def has_price(self) -> bool:
        """Zero is treated the same as an unknown price."""

        return bool(self.price)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


__all__ = ["ProductResult", "ProductSource"]
