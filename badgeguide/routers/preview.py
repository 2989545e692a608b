from typing import Literal
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from sqlalchemy.orm import Session

from badgeguide.core.render import preview_page
from badgeguide.deps import get_db, get_prefers_color_scheme, get_wizard
from badgeguide.domain.pipeline.session import WizardSession
from badgeguide.domain.theme.service import get_theme

router = APIRouter(prefix="/sessions/{session_id}", tags=["preview"])

@router.get("/preview")
def preview(
    view: Literal["preview", "code"] = Query("preview"),
    s: WizardSession = Depends(get_wizard),
    db: Session = Depends(get_db),
    prefers: str | None = Depends(get_prefers_color_scheme),
):
    """`preview` devuelve HTML renderizado; `code` el markdown crudo."""
    if view == "code":
        return PlainTextResponse(s.markdown, media_type="text/markdown; charset=utf-8")
    theme, _ = get_theme(db, prefers)
    return HTMLResponse(preview_page(s.markdown, dark=(theme == "dark"), title=s.config.repoName))

@router.get("/readme.md")
def download_readme(s: WizardSession = Depends(get_wizard)):
    return Response(
        content=s.markdown,
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="README.md"'},
    )
