from pydantic import BaseModel

class Msg(BaseModel):
    message: str

class Ok(BaseModel):
    ok: bool = True
    id: str | None = None
