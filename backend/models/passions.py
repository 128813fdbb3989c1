"""Models for interest tag ("passion") selection."""
from typing import List

from pydantic import BaseModel


class PassionOption(BaseModel):
    id: str
    label: str


class PassionsResponse(BaseModel):
    passions: List[str]


class SavePassionsRequest(BaseModel):
    passions: List[str]
