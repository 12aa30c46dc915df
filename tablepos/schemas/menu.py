from pydantic import BaseModel, ConfigDict, Field
from typing import Literal

FoodTypeLiteral = Literal["veg", "non-veg"]

class MenuItem(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    name: str
    category: str
    price: float = Field(ge=0, allow_inf_nan=False)
    food_type: FoodTypeLiteral = "veg"

class MenuItemIn(BaseModel):
    # id is optional on create; the server allocates one
    id: str | None = None
    name: str
    category: str
    price: float = Field(ge=0, allow_inf_nan=False)
    food_type: FoodTypeLiteral = "veg"
