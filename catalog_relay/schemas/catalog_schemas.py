from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ShopifyVariantPayload(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: int
    sku: Optional[str] = None
    price: Optional[str] = None
    option1: Optional[str] = None
    option2: Optional[str] = None
    inventory_quantity: int = 0
    inventory_item_id: Optional[int] = None
    inventory_policy: Optional[str] = None

    @field_validator('sku', 'option1', 'option2', mode='before')
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator('price', mode='before')
    def price_to_str(cls, v):
        if v is None:
            return None
        return str(v)

    @field_validator('inventory_quantity', mode='before')
    def missing_quantity_is_zero(cls, v):
        if v is None or v == '':
            return 0
        return v


class ShopifyImagePayload(BaseModel):
    model_config = ConfigDict(extra='ignore')

    src: Optional[str] = None


class ShopifyProductPayload(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: int
    title: str = ""
    vendor: str = ""
    handle: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    variants: List[ShopifyVariantPayload] = Field(default_factory=list)
    images: List[ShopifyImagePayload] = Field(default_factory=list)
    image: Optional[ShopifyImagePayload] = None

    @field_validator('title', 'vendor', mode='before')
    def none_to_empty(cls, v):
        return v or ""

    @field_validator('tags', mode='before')
    def split_tags(cls, v: Union[str, List[str], None]):
        # The REST API sends tags as one comma separated string
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in v.split(',') if t.strip()]
        return [str(t).strip() for t in v if str(t).strip()]

    @property
    def image_url(self) -> Optional[str]:
        if self.image and self.image.src:
            return self.image.src
        if self.images and self.images[0].src:
            return self.images[0].src
        return None


class QueryItemRequest(BaseModel):
    model_config = ConfigDict(extra='ignore')

    name: Optional[str] = None
    sku: Optional[str] = None

    @field_validator('name', 'sku', mode='before')
    def empty_string_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class MatchAvailabilityRequest(BaseModel):
    items: List[QueryItemRequest] = Field(min_length=1, max_length=5000)
    page_cap: Optional[int] = Field(default=None, ge=1, alias='pageCap')

    model_config = ConfigDict(populate_by_name=True)


class SkuLookupRequest(BaseModel):
    skus: List[str] = Field(default_factory=list)

    @field_validator('skus', mode='before')
    def drop_blank(cls, v):
        if v is None:
            return []
        return [str(s).strip() for s in v if s is not None and str(s).strip()]


class CheckNameRequest(BaseModel):
    name: str = Field(min_length=1)

    @field_validator('name', mode='before')
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v
