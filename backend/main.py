from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import USE_SUPABASE, init_db
from .routers import (
    quest_trail,  # Lesson states, XP and streaks
    passions,     # Onboarding interest tags
    projects,     # Project hub with XP bonuses
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # SQLite is the fallback store even when Supabase is configured
    init_db()
    print(f"[startup] Quest Trail backend ready (supabase={USE_SUPABASE})")
    yield


app = FastAPI(title="Quest Trail", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quest_trail.router)
app.include_router(passions.router)
app.include_router(projects.router)


@app.get("/")
async def root():
    return {"message": "Quest Trail backend is running"}


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}
