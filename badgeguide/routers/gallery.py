from fastapi import APIRouter, Depends, HTTPException, Query, status

from badgeguide.deps import get_store, get_wizard
from badgeguide.domain.gallery import service as gallery
from badgeguide.domain.gallery.service import BadgeNotFound, GalleryUnavailable, OwnershipFilter, SortKey
from badgeguide.domain.pipeline.session import SessionStore, WizardSession
from badgeguide.schemas.badge import Badge, BadgeIn, BadgeListOut

router = APIRouter(prefix="/sessions/{session_id}/badges", tags=["gallery"])

def _errors(fn, *args):
    try:
        return fn(*args)
    except BadgeNotFound:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Badge no encontrado")
    except GalleryUnavailable as e:
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))

@router.get("", response_model=BadgeListOut)
def list_badges(
    filter: OwnershipFilter = Query("all"),
    q: str = Query("", max_length=120),
    sort: SortKey = Query("category"),
    s: WizardSession = Depends(get_wizard),
):
    _errors(gallery.ensure_gallery, s)
    rows = gallery.query_gallery(s.badges, ownership=filter, q=q, sort=sort)
    return BadgeListOut(total=len(s.badges), count=len(rows), filter=filter, sort=sort, q=q, badges=rows)

@router.get("/{badge_id}", response_model=Badge)
def get_badge(badge_id: str, s: WizardSession = Depends(get_wizard)):
    return _errors(gallery.get_badge, s, badge_id)

@router.post("/{badge_id}/toggle", response_model=Badge)
def toggle_badge(badge_id: str, s: WizardSession = Depends(get_wizard),
                 sessions: SessionStore = Depends(get_store)):
    updated = _errors(sessions.update, s.id, lambda cur: gallery.toggle_ownership(cur, badge_id))
    return gallery.get_badge(updated, badge_id)

@router.post("", response_model=Badge, status_code=status.HTTP_201_CREATED)
def add_custom_badge(body: BadgeIn, s: WizardSession = Depends(get_wizard),
                     sessions: SessionStore = Depends(get_store)):
    updated = _errors(sessions.update, s.id, lambda cur: gallery.add_custom_badge(cur, body))
    # el alta manual se antepone a la lista
    return updated.badges[0]
