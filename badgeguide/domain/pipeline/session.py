from __future__ import annotations
import logging
import threading
import time
from typing import Callable, Dict, List, Optional
from uuid import uuid4
from pydantic import BaseModel, Field

from badgeguide.core import settings
from badgeguide.schemas.badge import Badge
from badgeguide.schemas.session import AppConfig
from badgeguide.domain.pipeline.steps import GenerationStep, check_transition, is_generating

log = logging.getLogger("sessions")

class SessionNotFound(Exception): ...

class WizardSession(BaseModel):
    """Estado completo de un asistente: config, paso, badges y resultado."""
    id: str = Field(default_factory=lambda: uuid4().hex[:16])
    config: AppConfig = Field(default_factory=AppConfig)
    step: GenerationStep = GenerationStep.IDLE
    badges: List[Badge] = Field(default_factory=list)
    markdown: str = ""
    heroImageUrl: Optional[str] = None
    searchContext: Optional[str] = None
    alert: Optional[str] = None

def advance(session: WizardSession, target: GenerationStep, **changes) -> WizardSession:
    """Devuelve una copia en `target` (validando la tabla) con los cambios aplicados."""
    check_transition(session.step, target)
    return session.model_copy(update={"step": target, **changes})

def with_changes(session: WizardSession, **changes) -> WizardSession:
    return session.model_copy(update=changes)

class SessionStore:
    """
    Sesiones en memoria del proceso; no se persisten.
    Las sesiones paradas caducan tras `ttl_seconds` sin actividad y, si se supera
    `max_sessions`, se descartan las paradas más antiguas. Las que están generando nunca.
    """

    def __init__(self, ttl_seconds: float | None = None, max_sessions: int | None = None,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = settings.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self.max_sessions = settings.MAX_SESSIONS if max_sessions is None else max_sessions
        self._clock = clock
        self._lock = threading.Lock()
        self._items: Dict[str, WizardSession] = {}
        self._touched: Dict[str, float] = {}

    def create(self, config: AppConfig | None = None) -> WizardSession:
        s = WizardSession(config=config or AppConfig())
        with self._lock:
            self._put(s)
            self._prune(keep=s.id)
        return s

    def get(self, session_id: str) -> WizardSession:
        with self._lock:
            s = self._items.get(session_id)
            if s is None:
                raise SessionNotFound(session_id)
            self._touched[session_id] = self._clock()
            return s

    def save(self, session: WizardSession) -> WizardSession:
        with self._lock:
            self._put(session)
        return session

    def update(self, session_id: str, fn: Callable[[WizardSession], WizardSession]) -> WizardSession:
        """Lee, transforma y guarda de forma atómica. Si `fn` lanza, no se guarda nada."""
        with self._lock:
            s = self._items.get(session_id)
            if s is None:
                raise SessionNotFound(session_id)
            new = fn(s)
            self._put(new)
            return new

    def delete(self, session_id: str, check: Callable[[WizardSession], object] | None = None) -> WizardSession:
        """Elimina la sesión; `check` puede lanzar para impedirlo (bajo el mismo lock)."""
        with self._lock:
            s = self._items.get(session_id)
            if s is None:
                raise SessionNotFound(session_id)
            if check is not None:
                check(s)
            self._drop(session_id)
            return s

    def _put(self, session: WizardSession) -> None:
        self._items[session.id] = session
        self._touched[session.id] = self._clock()

    def _drop(self, session_id: str) -> None:
        self._items.pop(session_id, None)
        self._touched.pop(session_id, None)

    def _prune(self, keep: Optional[str] = None) -> List[str]:
        now = self._clock()
        idle = sorted(
            (sid for sid, s in self._items.items() if sid != keep and not is_generating(s.step)),
            key=lambda sid: self._touched[sid],
        )
        evicted = [sid for sid in idle if now - self._touched[sid] > self.ttl_seconds]
        overflow = len(self._items) - len(evicted) - self.max_sessions
        if overflow > 0:
            remaining = [sid for sid in idle if sid not in evicted]
            evicted += remaining[:overflow]
        for sid in evicted:
            self._drop(sid)
        if evicted:
            log.info("sessions evicted: %d (held: %d)", len(evicted), len(self._items))
        return evicted

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

store = SessionStore()
