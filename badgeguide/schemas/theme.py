from typing import Literal
from pydantic import BaseModel

Theme = Literal["light", "dark"]

class ThemeIn(BaseModel):
    theme: Theme

class ThemeOut(BaseModel):
    theme: Theme
    source: Literal["stored", "platform"]
