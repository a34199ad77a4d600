import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import engine, Base

# Import all models to ensure they're registered with SQLAlchemy
from .auth.models import User
from .group.models import PlayerGroup
from .battle.models import Battle
from .encounter.models import Encounter, EncounterCombatant

# Import routers
from .auth.router import router as auth_router
from .group.router import router as group_router
from .battle.router import router as battle_router
from .battle.router import public_router
from .encounter.router import router as encounter_router
from .statblock.router import router as import_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.app_name,
    description="""
## Initiative Tracker API

Runs the dungeon master's side of a tabletop fight and serves a read-only view to the players.

- **Battles**: Turn order sorted by initiative, with a manual tie-break, round counting and a lair action entry
- **Encounters**: Monsters with HP, temp HP, spell slots, recharge abilities, limited uses and legendary pips
- **Import**: Parse stat block CSV exports into creature templates and drop them into an encounter
- **Groups**: Reusable player rosters that join a battle in one call
- **Public**: Redacted turn order for the player screen, no login required

### Running a fight
1. Create a battle with `POST /battles/` (optionally from a group)
2. Add monsters with `POST /battles/{id}/characters` or send them from an encounter
3. Set initiatives, then step through turns with `POST /battles/{id}/next`
4. Reveal NPCs to the players with `POST /battles/{id}/characters/{char_id}/reveal`
5. End with `POST /battles/{id}/end`
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Player view is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(group_router)
app.include_router(battle_router)
app.include_router(public_router)
app.include_router(encounter_router)
app.include_router(import_router)


@app.get("/", tags=["root"])
def root():
    """API root - returns basic info."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health", tags=["root"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
