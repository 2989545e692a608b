import logging
from typing import Optional, Tuple
from sqlalchemy import select
from sqlalchemy.orm import Session

from badgeguide.core.settings import THEME_KEY, THEMES, FALLBACK_THEME
from badgeguide.models.preference import Preference

log = logging.getLogger("theme")

class InvalidTheme(Exception): ...

def platform_theme(prefers_color_scheme: Optional[str]) -> str:
    """Valor de la cabecera Sec-CH-Prefers-Color-Scheme, o el tema por defecto."""
    v = (prefers_color_scheme or "").strip().strip('"').lower()
    return v if v in THEMES else FALLBACK_THEME

def stored_theme(db: Session) -> Optional[str]:
    row = db.execute(select(Preference).where(Preference.key == THEME_KEY)).scalar_one_or_none()
    if row and row.value in THEMES:
        return row.value
    return None

def get_theme(db: Session, prefers_color_scheme: Optional[str] = None) -> Tuple[str, str]:
    """Devuelve (tema, origen) con origen 'stored' | 'platform'."""
    saved = stored_theme(db)
    if saved:
        return saved, "stored"
    return platform_theme(prefers_color_scheme), "platform"

def set_theme(db: Session, theme: str) -> str:
    if theme not in THEMES:
        raise InvalidTheme(theme)
    row = db.get(Preference, THEME_KEY)
    if row:
        row.value = theme
    else:
        row = Preference(key=THEME_KEY, value=theme)
    db.add(row)
    db.commit()
    log.info("theme -> %s", theme)
    return theme

def toggle_theme(db: Session, prefers_color_scheme: Optional[str] = None) -> str:
    current, _ = get_theme(db, prefers_color_scheme)
    return set_theme(db, "light" if current == "dark" else "dark")
