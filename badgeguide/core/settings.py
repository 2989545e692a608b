import os
from dotenv import load_dotenv

load_dotenv()

# === Servidor ===
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

def cors_origins_list() -> list[str]:
    origins = CORS_ORIGINS
    return [o.strip() for o in origins.split(",") if o.strip()] if origins else ["http://localhost:5173"]

# === Pipeline ===
# Pausa artificial entre THINKING y WRITING
PACING_DELAY_SECONDS = float(os.getenv("PACING_DELAY_SECONDS", "0.5"))

DEFAULT_REPO_NAME = "The Ultimate Guide to GitHub Achievements & Profile Badges 🏆"

# === Tema ===
THEME_KEY = "theme"
THEMES = ("light", "dark")
# Si el cliente no envía preferencia de esquema
FALLBACK_THEME = "dark"

# === Sesiones en memoria ===
# Se descartan las sesiones paradas sin actividad durante este tiempo
SESSION_TTL_SECONDS = float(os.getenv("SESSION_TTL_SECONDS", "3600"))
# Tope de sesiones retenidas; al superarlo se descartan las paradas más antiguas
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "200"))
