from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Literal, Optional

TableStatusLiteral = Literal["vacant", "occupied", "billed"]

class Table(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    name: str
    section: str
    status: TableStatusLiteral = "vacant"
    current_order_id: Optional[str] = None
    order_value: Optional[float] = None
    session_start_time: Optional[datetime] = None

class TableIn(BaseModel):
    id: str | None = None
    name: str
    section: str

class TableSection(BaseModel):
    section: str
    tables: list[Table]
