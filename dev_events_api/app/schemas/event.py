"""
Pydantic models for event data.

``SanitizedEvent`` is the fully validated record produced by the
submission validator; it is only ever built from values that already
passed every check.  ``EventRead`` adds the persistence fields
(``id``, ``slug`` and timestamps) for responses, and the ``*Response``
models wrap results in the ``{"message": ..., ...}`` envelope returned
by the API.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


EventMode = Literal["online", "offline", "hybrid"]


class SanitizedEvent(BaseModel):
    title: str = Field(..., examples=["PyCon Hackathon"])
    description: str = Field(..., examples=["A weekend of building things with Python"])
    overview: str = Field(..., examples=["Teams of up to four compete for prizes"])
    venue: str = Field(..., examples=["Main Hall"])
    location: str = Field(..., examples=["Berlin, Germany"])
    date: str = Field(..., examples=["2024-03-15"])
    time: str = Field(..., examples=["14:30"])
    mode: EventMode = Field(..., examples=["offline"])
    audience: str = Field(..., examples=["Developers"])
    agenda: List[str] = Field(..., examples=[["Opening", "Hacking", "Demos"]])
    organizer: str = Field(..., examples=["Python Software Foundation"])
    tags: List[str] = Field(..., examples=[["Python", "AI"]])
    image: str = Field(..., examples=["https://res.cloudinary.com/demo/image/upload/event.png"])


class EventRead(SanitizedEvent):
    """Schema for reading a stored event from the API."""

    id: int
    slug: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class EventResponse(BaseModel):
    message: str
    event: EventRead


class EventListResponse(BaseModel):
    message: str
    events: List[EventRead]
