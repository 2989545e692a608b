from fastapi import Depends, HTTPException, Header, status
from typing import Optional
from badgeguide.db import get_db
from badgeguide.domain.pipeline.session import SessionStore, SessionNotFound, WizardSession, store

def get_store() -> SessionStore:
    return store

def get_wizard(session_id: str, sessions: SessionStore = Depends(get_store)) -> WizardSession:
    try:
        return sessions.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sesión no encontrada")

def get_prefers_color_scheme(
    sec_ch_prefers_color_scheme: Optional[str] = Header(default=None),
) -> Optional[str]:
    return sec_ch_prefers_color_scheme

__all__ = ["get_db", "get_store", "get_wizard", "get_prefers_color_scheme"]
