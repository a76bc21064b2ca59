# drama_api/models.py
import math
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")

def later_than(previous: Optional[str]) -> str:
    """Current timestamp, bumped past `previous` so updated_at always moves forward."""
    now = datetime.now(timezone.utc)
    try:
        prev = datetime.fromisoformat(previous) if previous else None
    except (TypeError, ValueError):
        prev = None
    if prev is not None and prev.tzinfo is not None and now <= prev:
        now = prev + timedelta(microseconds=1)
    return now.isoformat(timespec="microseconds")

def new_id(taken: Iterable[str] = ()) -> str:
    """12 url-safe characters, regenerated on the (unlikely) clash with `taken`."""
    taken = set(taken)
    nid = secrets.token_urlsafe(9)
    while nid in taken:
        nid = secrets.token_urlsafe(9)
    return nid

def to_number(value: Any) -> Optional[float]:
    """Best-effort numeric coercion; None when the value is not a finite number."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip()) if value.strip() else 0.0
        except ValueError:
            return None
    else:
        return None
    return num if math.isfinite(num) else None

def _as_int_if_whole(num: float):
    return int(num) if num.is_integer() else num

def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) and value else default

def _seq(value: Any) -> list:
    return list(value) if isinstance(value, list) else []

@dataclass
class Episode:
    number: int
    title: str = ""
    stream_url: str = ""
    subtitle_url: str = ""

    @classmethod
    def from_payload(cls, raw: Dict[str, Any], position: int) -> "Episode":
        num = to_number(raw.get("number"))
        return cls(
            number=int(num) if num else position,
            title=_text(raw.get("title")),
            stream_url=_text(raw.get("stream_url")),
            subtitle_url=_text(raw.get("subtitle_url")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "title": self.title,
            "stream_url": self.stream_url,
            "subtitle_url": self.subtitle_url,
        }

@dataclass
class Drama:
    id: str
    title: str = "Untitled"
    original_title: str = ""
    year: Optional[int] = None  # None -> key omitted from the stored record
    country: str = "China"
    genres: List[str] = field(default_factory=list)
    status: str = "Ongoing"
    rating: float = 0
    poster_url: str = ""
    banner_url: str = ""
    description: str = ""
    cast: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    episodes: List[Episode] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_payload(cls, payload: Any, drama_id: str, stamp: str) -> "Drama":
        """
        Normalize an untrusted payload. Every field has a default, so this never
        rejects input; wrong-typed values fall back to the field default.
        """
        if not isinstance(payload, dict):
            payload = {}
        title = payload.get("title")
        title = title.strip() if isinstance(title, str) else ""
        year = to_number(payload.get("year"))
        rating = to_number(payload.get("rating"))
        episodes = [
            Episode.from_payload(ep, i + 1)
            for i, ep in enumerate(_seq(payload.get("episodes")))
            if isinstance(ep, dict)
        ]
        return cls(
            id=drama_id,
            title=title or "Untitled",
            original_title=_text(payload.get("original_title")),
            year=int(year) if year else None,
            country=_text(payload.get("country"), "China"),
            genres=_seq(payload.get("genres")),
            status=_text(payload.get("status"), "Ongoing"),
            rating=_as_int_if_whole(rating) if rating else 0,
            poster_url=_text(payload.get("poster_url")),
            banner_url=_text(payload.get("banner_url")),
            description=_text(payload.get("description")),
            cast=_seq(payload.get("cast")),
            tags=_seq(payload.get("tags")),
            episodes=episodes,
            created_at=stamp,
            updated_at=stamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "title": self.title, "original_title": self.original_title}
        if self.year is not None:
            out["year"] = self.year
        out.update({
            "country": self.country,
            "genres": list(self.genres),
            "status": self.status,
            "rating": self.rating,
            "poster_url": self.poster_url,
            "banner_url": self.banner_url,
            "description": self.description,
            "cast": list(self.cast),
            "tags": list(self.tags),
            "episodes": [ep.to_dict() for ep in self.episodes],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        })
        return out
