from typing import Iterable, List, Literal
from uuid import uuid4

from badgeguide.schemas.badge import Badge, BadgeIn
from badgeguide.domain.pipeline.session import WizardSession, with_changes
from badgeguide.domain.pipeline.steps import GenerationStep

class BadgeNotFound(Exception): ...
class GalleryUnavailable(Exception): ...

OwnershipFilter = Literal["all", "owned", "unowned"]
SortKey = Literal["name", "category", "rarity"]

RARITY_ORDER = {"Common": 1, "Rare": 2, "Epic": 3, "Legendary": 4}

CUSTOM_DEFAULTS = {
    "name": "Custom Badge",
    "emoji": "✨",
    "description": "Custom description",
    "rarity": "Common",
    "tiers": ["Single Tier"],
    "howToEarn": "Custom strategy",
}

# --------------------------
# Proyección (pura)
# --------------------------

def filter_badges(badges: Iterable[Badge], ownership: OwnershipFilter = "all", q: str = "") -> List[Badge]:
    out = list(badges)
    if ownership == "owned":
        out = [b for b in out if b.isOwned]
    elif ownership == "unowned":
        out = [b for b in out if not b.isOwned]
    term = (q or "").strip().lower()
    if term:
        out = [b for b in out if term in b.name.lower() or term in b.description.lower()]
    return out

def sort_badges(badges: Iterable[Badge], key: SortKey = "category") -> List[Badge]:
    """Orden estable: los empates conservan el orden previo."""
    if key == "name":
        return sorted(badges, key=lambda b: b.name.casefold())
    if key == "category":
        return sorted(badges, key=lambda b: b.category)
    if key == "rarity":
        # descendente: Legendary primero
        return sorted(badges, key=lambda b: -RARITY_ORDER.get(b.rarity, 0))
    return list(badges)

def query_gallery(badges: Iterable[Badge], *, ownership: OwnershipFilter = "all",
                  q: str = "", sort: SortKey = "category") -> List[Badge]:
    return sort_badges(filter_badges(badges, ownership, q), sort)

# --------------------------
# Operaciones sobre la sesión
# --------------------------

def ensure_gallery(session: WizardSession) -> WizardSession:
    if not session.badges:
        raise GalleryUnavailable("todavía no hay badges; ejecuta el escaneo primero")
    return session

def ensure_editable(session: WizardSession) -> WizardSession:
    ensure_gallery(session)
    if session.step is not GenerationStep.GALLERY:
        raise GalleryUnavailable(f"la galería solo se edita en GALLERY (paso actual: {session.step.value})")
    return session

def get_badge(session: WizardSession, badge_id: str) -> Badge:
    ensure_gallery(session)
    for b in session.badges:
        if b.id == badge_id:
            return b
    raise BadgeNotFound(badge_id)

def toggle_ownership(session: WizardSession, badge_id: str) -> WizardSession:
    ensure_editable(session)
    get_badge(session, badge_id)
    badges = [b.model_copy(update={"isOwned": not b.isOwned}) if b.id == badge_id else b
              for b in session.badges]
    return with_changes(session, badges=badges)

def new_custom_id(existing: Iterable[str]) -> str:
    taken = set(existing)
    while True:
        candidate = f"custom-{uuid4().hex[:12]}"
        if candidate not in taken:
            return candidate

def build_custom_badge(draft: BadgeIn, existing_ids: Iterable[str]) -> Badge:
    """Siempre Custom y siempre en posesión del usuario."""
    def pick(field: str):
        value = getattr(draft, field)
        if isinstance(value, str):
            value = value.strip()
        if field == "tiers" and value is not None:
            value = [t.strip() for t in value if t and t.strip()]
        return value or CUSTOM_DEFAULTS[field]

    return Badge(
        id=new_custom_id(existing_ids),
        name=pick("name"),
        emoji=pick("emoji"),
        description=pick("description"),
        category="Custom",
        rarity=pick("rarity"),
        tiers=pick("tiers"),
        howToEarn=pick("howToEarn"),
        isOwned=True,
    )

def add_custom_badge(session: WizardSession, draft: BadgeIn) -> WizardSession:
    ensure_editable(session)
    badge = build_custom_badge(draft, (b.id for b in session.badges))
    return with_changes(session, badges=[badge, *session.badges])
