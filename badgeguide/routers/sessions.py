from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import Optional
import asyncio, logging, threading

from badgeguide.deps import get_store, get_wizard
from badgeguide.domain.pipeline import service as pipeline
from badgeguide.domain.pipeline.session import SessionNotFound, SessionStore, WizardSession, with_changes
from badgeguide.domain.pipeline.steps import InvalidTransition, STATUS_MESSAGES, is_generating, progress_for
from badgeguide.schemas.session import AppConfig, AppConfigUpdate, SessionOut, SessionResultOut

log = logging.getLogger("sessions")
router = APIRouter(prefix="/sessions", tags=["sessions"])

def session_out(s: WizardSession) -> SessionOut:
    return SessionOut(
        id=s.id,
        step=s.step.value,
        statusMessage=STATUS_MESSAGES[s.step],
        progress=progress_for(s.step),
        isGenerating=is_generating(s.step),
        config=s.config,
        badgeCount=len(s.badges),
        ownedCount=sum(1 for b in s.badges if b.isOwned),
        hasMarkdown=bool(s.markdown),
        hasHeroImage=bool(s.heroImageUrl),
        hasSearchContext=bool(s.searchContext),
        alert=s.alert,
    )

# ---------- Worker en segundo plano ----------

def _spawn(target, *args) -> threading.Thread:
    t = threading.Thread(target=target, args=args, daemon=True)
    t.start()
    return t

def _worker(runner, sessions: SessionStore, session_id: str):
    """Ejecuta la corrutina del pipeline publicando cada paso en el store."""
    try:
        asyncio.run(runner(sessions.get(session_id), sessions.save))
    except Exception as e:
        log.exception("pipeline worker failed (%s): %s", session_id, e)

def _claim(sessions: SessionStore, session_id: str, start) -> WizardSession:
    try:
        return sessions.update(session_id, start)
    except (pipeline.PipelineBusy, InvalidTransition) as e:
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))

# ---------- Endpoints ----------

@router.post("", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def create_session(body: Optional[AppConfig] = None, sessions: SessionStore = Depends(get_store)):
    s = sessions.create(body)
    log.info("session created %s", s.id)
    return session_out(s)

@router.get("/{session_id}", response_model=SessionOut)
def get_session(s: WizardSession = Depends(get_wizard)):
    return session_out(s)

@router.get("/{session_id}/result", response_model=SessionResultOut)
def get_result(s: WizardSession = Depends(get_wizard)):
    return SessionResultOut(id=s.id, step=s.step.value, markdown=s.markdown,
                            heroImageUrl=s.heroImageUrl, searchContext=s.searchContext)

@router.patch("/{session_id}/config", response_model=SessionOut)
def update_config(body: AppConfigUpdate, s: WizardSession = Depends(get_wizard),
                  sessions: SessionStore = Depends(get_store)):
    def apply(cur: WizardSession) -> WizardSession:
        if is_generating(cur.step):
            raise pipeline.PipelineBusy(f"generación en curso ({cur.step.value})")
        merged = cur.config.model_copy(update=body.model_dump(exclude_unset=True, exclude_none=True))
        return with_changes(cur, config=AppConfig.model_validate(merged.model_dump()))
    return session_out(_claim(sessions, s.id, apply))

@router.post("/{session_id}/scan", response_model=SessionOut, status_code=status.HTTP_202_ACCEPTED)
def start_scan(s: WizardSession = Depends(get_wizard), sessions: SessionStore = Depends(get_store)):
    claimed = _claim(sessions, s.id, pipeline.start_scan)
    _spawn(_worker, pipeline.run_scan, sessions, claimed.id)
    return session_out(claimed)

@router.post("/{session_id}/generate", response_model=SessionOut, status_code=status.HTTP_202_ACCEPTED)
def start_generation(s: WizardSession = Depends(get_wizard), sessions: SessionStore = Depends(get_store)):
    claimed = _claim(sessions, s.id, pipeline.start_generation)
    _spawn(_worker, pipeline.run_generation, sessions, claimed.id)
    return session_out(claimed)

@router.post("/{session_id}/quick", response_model=SessionOut, status_code=status.HTTP_202_ACCEPTED)
def start_direct(s: WizardSession = Depends(get_wizard), sessions: SessionStore = Depends(get_store)):
    claimed = _claim(sessions, s.id, pipeline.start_direct)
    _spawn(_worker, pipeline.run_direct, sessions, claimed.id)
    return session_out(claimed)

@router.post("/{session_id}/reset", response_model=SessionOut)
def reset_session(s: WizardSession = Depends(get_wizard), sessions: SessionStore = Depends(get_store)):
    return session_out(_claim(sessions, s.id, pipeline.reset))

@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(s: WizardSession = Depends(get_wizard), sessions: SessionStore = Depends(get_store)):
    def idle_only(cur: WizardSession):
        if is_generating(cur.step):
            raise pipeline.PipelineBusy(f"generación en curso ({cur.step.value})")
    try:
        sessions.delete(s.id, idle_only)
    except SessionNotFound:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Sesión no encontrada")
    except pipeline.PipelineBusy as e:
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))
    log.info("session deleted %s", s.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
