from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from badgeguide.deps import get_db, get_prefers_color_scheme
from badgeguide.domain.theme import service as theme_service
from badgeguide.schemas.theme import ThemeIn, ThemeOut

router = APIRouter(prefix="/theme", tags=["theme"])

@router.get("", response_model=ThemeOut)
def read_theme(db: Session = Depends(get_db), prefers: str | None = Depends(get_prefers_color_scheme)):
    theme, source = theme_service.get_theme(db, prefers)
    return ThemeOut(theme=theme, source=source)

@router.put("", response_model=ThemeOut)
def put_theme(body: ThemeIn, db: Session = Depends(get_db)):
    return ThemeOut(theme=theme_service.set_theme(db, body.theme), source="stored")

@router.post("/toggle", response_model=ThemeOut)
def toggle(db: Session = Depends(get_db), prefers: str | None = Depends(get_prefers_color_scheme)):
    return ThemeOut(theme=theme_service.toggle_theme(db, prefers), source="stored")
