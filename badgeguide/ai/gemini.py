# badgeguide/ai/gemini.py
import os, json, re, logging
from typing import List, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

from badgeguide.schemas.badge import Badge
from badgeguide.schemas.session import AppConfig
from badgeguide.ai import prompts

load_dotenv()

# ------------------ Config ------------------
GEMINI_API_KEY  = os.getenv("GEMINI_API_KEY", "").strip()
MODEL_NAME      = os.getenv("MODEL_NAME", "gemini-2.5-flash").strip()
TEXT_MODEL      = os.getenv("GEMINI_TEXT_MODEL", "gemini-3-pro-preview").strip()
IMAGE_MODEL     = os.getenv("GEMINI_IMAGE_MODEL", "gemini-3-pro-image-preview").strip()
TIMEOUT         = int(os.getenv("GEMINI_TIMEOUT", "120"))
HTTP_RETRIES    = int(os.getenv("GEMINI_HTTP_RETRIES", "0"))
THINKING_BUDGET = int(os.getenv("THINKING_BUDGET", "16000"))
AI_ENABLED      = bool(GEMINI_API_KEY) and bool(MODEL_NAME)

BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

SEARCH_UNAVAILABLE = "Search data unavailable."
EMPTY_README = "# Error generating content"

log = logging.getLogger("gemini")
log.info("[gemini] MODEL=%r TEXT=%r IMAGE=%r AI_ENABLED=%s", MODEL_NAME, TEXT_MODEL, IMAGE_MODEL, AI_ENABLED)

class GeminiError(RuntimeError): ...
class GenerationError(RuntimeError): ...

FALLBACK_BADGES: List[Badge] = [
    Badge(id="galaxy-brain", name="Galaxy Brain", emoji="🧠", description="Participate in discussions.",
          category="Earnable", rarity="Rare", howToEarn="Get 2 accepted answers in discussions.",
          tiers=["Bronze", "Silver", "Gold"], isOwned=False),
    Badge(id="pull-shark", name="Pull Shark", emoji="🦈", description="Merge pull requests.",
          category="Earnable", rarity="Common", howToEarn="Merge 2 pull requests.",
          tiers=["Bronze", "Silver", "Gold"], isOwned=False),
]

_badge_list = TypeAdapter(List[Badge])

def ensure_ai_ready():
    if not GEMINI_API_KEY:
        raise GeminiError("GEMINI_API_KEY no está definido (AI_DISABLED).")
    if not MODEL_NAME:
        raise GeminiError("MODEL_NAME no está definido (AI_DISABLED).")

# Session HTTP; reintentos solo si GEMINI_HTTP_RETRIES > 0
_session = requests.Session()
_session.mount(
    "https://",
    HTTPAdapter(
        max_retries=Retry(
            total=HTTP_RETRIES,
            backoff_factor=1.2,
            status_forcelist=(408, 409, 429, 500, 502, 503, 504),
            allowed_methods=frozenset(["POST"]),
            raise_on_status=False,
        )
    ),
)

def _post_genai(model: str, payload: dict, timeout: int = TIMEOUT) -> dict:
    """model es el id (p.ej. 'gemini-2.5-flash'), NO una URL."""
    ensure_ai_ready()
    if model.startswith("http"):
        parts = model.split("/models/")
        model = parts[-1].split(":")[0] if len(parts) > 1 else model
    url = f"{BASE_URL}/{model}:generateContent"
    resp = _session.post(url, params={"key": GEMINI_API_KEY}, json=payload, timeout=timeout)
    if resp.status_code != 200:
        raise GeminiError(f"[gemini] non-200: {resp.status_code} body={resp.text[:400]}")
    return resp.json()

def _parts(data: dict) -> list:
    if not isinstance(data, dict):
        return []
    cands = data.get("candidates") or []
    if not cands:
        return []
    parts = ((cands[0] or {}).get("content") or {}).get("parts") or []
    return [p for p in parts if isinstance(p, dict)]

def _text_of(data: dict) -> str:
    # Concatena todos los .text por si vinieran fragmentados (las partes 'thought' se ignoran)
    return "".join(p.get("text", "") for p in _parts(data) if not p.get("thought")).strip()

def _parse_json_text(text: str):
    """Parsea JSON tolerando cercas ``` y texto alrededor del bloque."""
    t = text.strip()
    if t.startswith("```"):
        t = t.strip("`").strip()
        if t.lower().startswith("json"):
            t = t[4:].strip()
    try:
        return json.loads(t)
    except ValueError:
        pass
    first = min([i for i in [t.find("{"), t.find("[")] if i != -1], default=-1)
    last = max(t.rfind("}"), t.rfind("]"))
    if first != -1 and last > first:
        return json.loads(t[first:last + 1])
    raise GeminiError(f"No se pudo parsear JSON de Gemini (recortado): {t[:400]}")

def _validate_catalog(raw) -> List[Badge]:
    """Valida contra el esquema; descarta ids repetidos (gana el primero)."""
    badges = _badge_list.validate_python(raw)
    seen, out = set(), []
    for b in badges:
        if b.id in seen:
            log.warning("[gemini] badge duplicado descartado: %s", b.id)
            continue
        seen.add(b.id)
        out.append(b)
    if not out:
        raise GeminiError("catálogo vacío")
    return out

# ------------------ Catálogo ------------------
def fetch_badge_library(username: str = "") -> List[Badge]:
    """
    Pide el catálogo de badges en modo JSON con esquema fijo.
    Si el usuario viene informado, el modelo estima `isOwned`.
    Cualquier fallo (HTTP, texto vacío, JSON o esquema inválido) devuelve FALLBACK_BADGES.
    """
    payload = {
        "contents": [{"parts": [{"text": prompts.build_catalog_prompt(username)}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": prompts.BADGE_CATALOG_SCHEMA,
        },
    }
    try:
        data = _post_genai(MODEL_NAME, payload)
        text = _text_of(data)
        if not text:
            raise GeminiError("Empty response from AI")
        badges = _validate_catalog(_parse_json_text(text))
        log.info("[gemini] catálogo con %d badges", len(badges))
        return badges
    except (requests.RequestException, GeminiError, ValidationError, ValueError) as e:
        log.error("Badge Library Fetch Failed: %s", e)
        return [b.model_copy() for b in FALLBACK_BADGES]

# ------------------ Búsqueda ------------------
def search_badge_context(prompt_text: str) -> str:
    """Petición con grounding de Google Search. Devuelve prosa o SEARCH_UNAVAILABLE."""
    payload = {
        "contents": [{"parts": [{"text": prompt_text}]}],
        "tools": [{"google_search": {}}],
    }
    try:
        text = _text_of(_post_genai(MODEL_NAME, payload))
        return text or SEARCH_UNAVAILABLE
    except (requests.RequestException, GeminiError, ValueError) as e:
        log.warning("[gemini] search exception: %s", e)
        return SEARCH_UNAVAILABLE

# ------------------ Redacción ------------------
def _draft(prompt_text: str) -> str:
    payload = {
        "contents": [{"parts": [{"text": prompt_text}]}],
        "generationConfig": {"thinkingConfig": {"thinkingBudget": THINKING_BUDGET}},
    }
    try:
        data = _post_genai(TEXT_MODEL, payload)
    except (requests.RequestException, GeminiError, ValueError) as e:
        log.error("Text generation failed: %s", e)
        raise GenerationError("Failed to generate markdown content.") from e
    return _strip_markdown_fence(_text_of(data)) or EMPTY_README

_FENCE_RE = re.compile(r"^```(?:markdown|md)?\s*\n(.*)\n```\s*$", re.S | re.I)

def _strip_markdown_fence(text: str) -> str:
    # a veces el modelo envuelve todo en ```markdown a pesar de la instrucción
    m = _FENCE_RE.match(text or "")
    return m.group(1).strip() if m else (text or "")

def generate_readme_text(badges: List[Badge], repo_name: str, hero_image_url: Optional[str]) -> str:
    return _draft(prompts.build_readme_prompt(badges, repo_name, hero_image_url))

def generate_readme_from_context(config: AppConfig, context: str, hero_image_url: Optional[str]) -> str:
    return _draft(prompts.build_context_readme_prompt(
        config.repoName, config.githubUsername, context, hero_image_url))

# ------------------ Imagen ------------------
def generate_readme_hero() -> Optional[str]:
    """Imagen hero 16:9 como data URI, o None si falla o no viene parte de imagen."""
    payload = {
        "contents": [{"parts": [{"text": prompts.HERO_IMAGE_PROMPT}]}],
        "generationConfig": {
            "responseModalities": ["TEXT", "IMAGE"],
            "imageConfig": {"aspectRatio": "16:9", "imageSize": "2K"},
        },
    }
    try:
        data = _post_genai(IMAGE_MODEL, payload)
        for p in _parts(data):
            inline = p.get("inlineData") or p.get("inline_data")
            if inline and inline.get("data"):
                mime = inline.get("mimeType") or inline.get("mime_type") or "image/png"
                return f"data:{mime};base64,{inline['data']}"
        return None
    except (requests.RequestException, GeminiError, ValueError) as e:
        log.error("Image generation failed: %s", e)
        return None
