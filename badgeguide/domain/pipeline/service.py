"""
Pipeline de generación del README.

Dos flujos sobre un WizardSession explícito:
  - escaneo -> galería -> generación  (start_scan/run_scan, start_generation/run_generation)
  - directo con contexto de búsqueda  (start_direct/run_direct)

Las funciones start_* son puras: validan y devuelven la sesión en su primer paso
de ejecución, para que el router la guarde antes de lanzar el trabajo en segundo plano.
Las run_* son corrutinas que publican cada transición mediante `publish`.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Callable, Optional

from badgeguide.ai import gemini
from badgeguide.ai.prompts import GENERAL_SEARCH_PROMPT, NO_SEARCH_CONTEXT, build_user_search_prompt
from badgeguide.core import settings
from badgeguide.domain.pipeline.session import WizardSession, advance, with_changes
from badgeguide.domain.pipeline.steps import GenerationStep, is_generating

log = logging.getLogger("pipeline")

S = GenerationStep
Publish = Callable[[WizardSession], object]

SCAN_FAILED_ALERT = "Failed to scan badges. Please try again."

class PipelineBusy(Exception): ...

def error_markdown(message: str) -> str:
    return f"# Error \n\n Something went wrong during generation. Please try again.\n\nDetails: {message}"

def _noop(_session: WizardSession) -> None:
    return None

def _ensure_idle_like(session: WizardSession) -> None:
    if is_generating(session.step):
        raise PipelineBusy(f"generación en curso ({session.step.value})")

# --------------------------
# Transiciones puras
# --------------------------

def start_scan(session: WizardSession) -> WizardSession:
    _ensure_idle_like(session)
    if session.step is S.GALLERY:
        raise PipelineBusy("el escaneo ya terminó; continúa desde la galería")
    return advance(session, S.SEARCHING, alert=None)

def start_generation(session: WizardSession) -> WizardSession:
    """Desde GALLERY: DRAWING si hay imagen hero, si no THINKING."""
    if session.step is not S.GALLERY:
        raise PipelineBusy(f"la generación requiere la galería (paso actual: {session.step.value})")
    first = S.DRAWING if session.config.includeHeroImage else S.THINKING
    return advance(session, first, heroImageUrl=None)

def start_direct(session: WizardSession) -> WizardSession:
    _ensure_idle_like(session)
    if session.step is S.GALLERY:
        raise PipelineBusy("hay una galería abierta; usa la generación desde la galería")
    cfg = session.config
    if cfg.includeSearchData:
        first = S.SEARCHING
    elif cfg.includeHeroImage:
        first = S.DRAWING
    else:
        first = S.THINKING
    return advance(session, first, alert=None, heroImageUrl=None, searchContext=None)

def reset(session: WizardSession) -> WizardSession:
    _ensure_idle_like(session)
    if session.step is S.IDLE:
        return with_changes(session, badges=[], markdown="", heroImageUrl=None, searchContext=None, alert=None)
    return advance(session, S.IDLE, badges=[], markdown="", heroImageUrl=None, searchContext=None, alert=None)

def fail(session: WizardSession, exc: BaseException) -> WizardSession:
    """Cualquier fallo de generación termina en DONE con el mensaje de error como resultado."""
    return advance(session, S.DONE, markdown=error_markdown(str(exc)))

# --------------------------
# Corrutinas
# --------------------------

async def run_scan(session: WizardSession, publish: Publish = _noop) -> WizardSession:
    try:
        badges = await asyncio.to_thread(gemini.fetch_badge_library, session.config.githubUsername)
        session = advance(session, S.GALLERY, badges=list(badges))
    except Exception as e:
        log.exception("Scan failed: %s", e)
        session = advance(session, S.IDLE, badges=[], alert=SCAN_FAILED_ALERT)
    publish(session)
    return session

async def _draw_then_write(session: WizardSession, publish: Publish,
                           draft: Callable[[Optional[str]], str]) -> WizardSession:
    """Tramo común: DRAWING? -> THINKING -> pausa -> WRITING -> DONE."""
    try:
        hero = None
        if session.step is S.DRAWING:
            hero = await asyncio.to_thread(gemini.generate_readme_hero)
            session = advance(session, S.THINKING, heroImageUrl=hero)
            publish(session)

        await asyncio.sleep(settings.PACING_DELAY_SECONDS)
        session = advance(session, S.WRITING)
        publish(session)

        text = await asyncio.to_thread(draft, hero)
        session = advance(session, S.DONE, markdown=text)
    except Exception as e:
        log.exception("Generation failed: %s", e)
        session = fail(session, e)
    publish(session)
    return session

async def run_generation(session: WizardSession, publish: Publish = _noop) -> WizardSession:
    badges = list(session.badges)
    repo_name = session.config.repoName
    return await _draw_then_write(
        session, publish,
        lambda hero: gemini.generate_readme_text(badges, repo_name, hero),
    )

async def gather_search_context(username: str) -> str:
    """Búsqueda general y (si hay usuario) específica, en paralelo."""
    general_task = asyncio.to_thread(gemini.search_badge_context, GENERAL_SEARCH_PROMPT)
    if not username:
        return await general_task
    general, user = await asyncio.gather(
        general_task,
        asyncio.to_thread(gemini.search_badge_context, build_user_search_prompt(username)),
    )
    return f"{general}\n\nUSER-SPECIFIC CONTEXT ({username}):\n{user}"

async def run_direct(session: WizardSession, publish: Publish = _noop) -> WizardSession:
    cfg = session.config
    try:
        if session.step is S.SEARCHING:
            context = await gather_search_context(cfg.githubUsername)
            session = advance(session, S.DRAWING if cfg.includeHeroImage else S.THINKING,
                              searchContext=context)
            publish(session)
        else:
            context = NO_SEARCH_CONTEXT
            session = with_changes(session, searchContext=context)
    except Exception as e:
        log.exception("Search step failed: %s", e)
        session = fail(session, e)
        publish(session)
        return session

    return await _draw_then_write(
        session, publish,
        lambda hero: gemini.generate_readme_from_context(cfg, context, hero),
    )

# --------------------------
# Atajos (start + run)
# --------------------------

async def scan(session: WizardSession, publish: Publish = _noop) -> WizardSession:
    session = start_scan(session)
    publish(session)
    return await run_scan(session, publish)

async def generate(session: WizardSession, publish: Publish = _noop) -> WizardSession:
    session = start_generation(session)
    publish(session)
    return await run_generation(session, publish)

async def generate_direct(session: WizardSession, publish: Publish = _noop) -> WizardSession:
    session = start_direct(session)
    publish(session)
    return await run_direct(session, publish)
