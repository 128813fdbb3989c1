"""Passion (interest tag) catalog and lookups."""
from typing import List, Optional

from backend.models.passions import PassionOption
from backend.progress_db import load_passions
from backend.services.path_generator import limit_passions

PASSION_OPTIONS = [
    PassionOption(id="tech", label="Technology"),
    PassionOption(id="business", label="Business"),
    PassionOption(id="art", label="Art & Design"),
    PassionOption(id="environment", label="Environment"),
    PassionOption(id="education", label="Education"),
    PassionOption(id="health", label="Health & Fitness"),
    PassionOption(id="social", label="Social Impact"),
    PassionOption(id="finance", label="Finance"),
    PassionOption(id="gaming", label="Gaming"),
    PassionOption(id="music", label="Music & Audio"),
    PassionOption(id="writing", label="Writing"),
    PassionOption(id="fashion", label="Fashion"),
]

DEFAULT_PASSIONS = ["Technology", "Business"]

_LABELS = {p.id: p.label for p in PASSION_OPTIONS}


def passion_label(passion_id: str) -> str:
    """Human label for a catalog id; free-text passions are returned as-is."""
    return _LABELS.get(passion_id, passion_id)


def clean_passions(passions: List[str]) -> List[str]:
    return limit_passions(passions)


async def get_user_passions(user_id: str) -> List[str]:
    stored: Optional[List[str]] = await load_passions(user_id)
    if stored:
        return stored
    return list(DEFAULT_PASSIONS)
