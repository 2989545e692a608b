import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from badgeguide.db import Base, engine
from badgeguide.core.settings import LOG_LEVEL, cors_origins_list
from badgeguide.models import preference  # registra la tabla en Base.metadata

from badgeguide.routers import sessions as sessions_router
from badgeguide.routers import gallery as gallery_router
from badgeguide.routers import preview as preview_router
from badgeguide.routers import theme as theme_router

load_dotenv()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Badge Guide API")

# ==== CORS ====
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==== Routers ====
app.include_router(sessions_router.router)
app.include_router(gallery_router.router)
app.include_router(preview_router.router)
app.include_router(theme_router.router)

@app.get("/health")
def health():
    return {"status": "ok"}
