# drama_api/factory.py
"""
Record factory: turns untrusted payloads into catalog records.

Nothing here rejects input. Malformed fields are normalized to their
defaults (see Drama.from_payload).
"""
from typing import Any, Dict, Iterable, List, Optional

from drama_api.models import Drama, Episode, later_than, new_id, now_iso, to_number

PROTECTED_FIELDS = ("id", "created_at")

DEFAULT_SEED_COUNT = 6
SEED_MAX_COUNT = 500

SAMPLE_POSTER = "https://images.unsplash.com/photo-1520975682031-6ca0b2d0f33b?q=80&w=800&auto=format&fit=crop"
SAMPLE_BANNER = "https://images.unsplash.com/photo-1517816630740-0b93f606a0d4?q=80&w=1600&auto=format&fit=crop"

def build_drama(payload: Any, taken_ids: Iterable[str] = ()) -> Dict[str, Any]:
    stamp = now_iso()
    return Drama.from_payload(payload, new_id(taken_ids), stamp).to_dict()

def merge_drama(existing: Dict[str, Any], payload: Any) -> Dict[str, Any]:
    """
    Shallow merge: payload keys overwrite existing ones. `id` and `created_at`
    are never taken from the payload; `updated_at` is always refreshed.
    """
    changes = {k: v for k, v in payload.items() if k not in PROTECTED_FIELDS} if isinstance(payload, dict) else {}
    merged = {**existing, **changes}
    merged["updated_at"] = later_than(existing.get("updated_at"))
    return merged

def sample_dramas(count: int, taken_ids: Iterable[str] = ()) -> List[Dict[str, Any]]:
    taken = set(taken_ids)
    out = []
    for i in range(count):
        stamp = now_iso()
        d = Drama(
            id=new_id(taken),
            title=f"Sample C-Drama {i + 1}",
            year=2024,
            genres=["Romance", "Historical"],
            status="Ongoing" if i % 2 == 0 else "Completed",
            rating=8.2,
            poster_url=SAMPLE_POSTER,
            banner_url=SAMPLE_BANNER,
            description="Lorem ipsum dolor sit amet, a short synopsis for sample content.",
            cast=["Lead A", "Lead B"],
            tags=["sub indo", "1080p"],
            episodes=[
                Episode(1, "Episode 1", "https://example.com/stream1"),
                Episode(2, "Episode 2", "https://example.com/stream2"),
            ],
            created_at=stamp,
            updated_at=stamp,
        )
        taken.add(d.id)
        out.append(d.to_dict())
    return out

def parse_seed_count(raw: Optional[str]) -> int:
    """absent/blank -> 6, non-numeric or negative -> 0, decimals truncate, capped at SEED_MAX_COUNT."""
    if raw is None or not str(raw).strip():
        return DEFAULT_SEED_COUNT
    num = to_number(raw)
    if num is None or num < 0:
        return 0
    return min(int(num), SEED_MAX_COUNT)
