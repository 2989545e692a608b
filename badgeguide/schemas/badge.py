from typing import Literal, List, Optional
from pydantic import BaseModel, ConfigDict, field_validator

BadgeCategory = Literal["Earnable", "Retired", "Highlight", "Custom"]
BadgeRarity = Literal["Common", "Rare", "Epic", "Legendary"]

class Badge(BaseModel):
    id: str
    name: str
    emoji: str
    description: str
    category: BadgeCategory
    rarity: BadgeRarity
    isOwned: bool
    howToEarn: str
    tiers: List[str]

    model_config = ConfigDict(frozen=True)

    @field_validator("id")
    @classmethod
    def non_blank_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("id vacío")
        return v

class BadgeIn(BaseModel):
    """Formulario de alta manual; los campos vacíos toman valores por defecto."""
    name: Optional[str] = None
    emoji: Optional[str] = None
    description: Optional[str] = None
    rarity: Optional[BadgeRarity] = None
    tiers: Optional[List[str]] = None
    howToEarn: Optional[str] = None

class BadgeListOut(BaseModel):
    total: int
    count: int
    filter: str
    sort: str
    q: str
    badges: List[Badge]
