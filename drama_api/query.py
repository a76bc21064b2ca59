# drama_api/query.py
import math
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Dict, List, Mapping, Optional

from drama_api.models import to_number

DEFAULT_SORT = "updated_at:desc"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 24

# a missing year always passes min_year but counts as this for max_year
MISSING_YEAR_CEILING = 9999

@dataclass
class DramaQuery:
    search: str = ""
    genre: Optional[str] = None
    status: Optional[str] = None
    min_year: Optional[float] = None
    max_year: Optional[float] = None
    sort: str = DEFAULT_SORT
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "DramaQuery":
        """Build from query-string args; blank or unparseable values fall back to defaults."""
        def text(name):
            value = args.get(name)
            return value if value else None

        def number(name):
            value = args.get(name)
            return to_number(value) if value else None

        def positive_int(name, default):
            num = number(name)
            return int(num) if num is not None and num >= 1 else default

        return cls(
            search=args.get("search") or "",
            genre=text("genre"),
            status=text("status"),
            min_year=number("min_year"),
            max_year=number("max_year"),
            sort=args.get("sort") or DEFAULT_SORT,
            page=positive_int("page", DEFAULT_PAGE),
            limit=positive_int("limit", DEFAULT_LIMIT),
        )

def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""

def _year(drama: Dict[str, Any]) -> Optional[float]:
    # numeric strings stored through a shallow-merge update still count as years
    year = to_number(drama.get("year"))
    return year if year else None

def _genres(drama: Dict[str, Any]) -> List[str]:
    genres = drama.get("genres")
    return [g for g in genres if isinstance(g, str)] if isinstance(genres, list) else []

def filter_dramas(dramas: List[Dict[str, Any]], q: DramaQuery) -> List[Dict[str, Any]]:
    """Apply search, genre, status, min_year and max_year, in that order."""
    res = list(dramas)
    if q.search:
        needle = q.search.lower()
        res = [d for d in res if needle in _lower(d.get("title")) or needle in _lower(d.get("description"))]
    if q.genre:
        g = q.genre.lower()
        res = [d for d in res if any(x.lower() == g for x in _genres(d))]
    if q.status:
        s = q.status.lower()
        res = [d for d in res if _lower(d.get("status")) == s]
    if q.min_year is not None:
        res = [d for d in res if _year(d) is None or _year(d) >= q.min_year]
    if q.max_year is not None:
        res = [d for d in res if (_year(d) or MISSING_YEAR_CEILING) <= q.max_year]
    return res

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float))

def compare_values(a: Any, b: Any) -> int:
    """Numbers numerically, strings lexicographically, anything else by its str() form."""
    a = 0 if a is None else a
    b = 0 if b is None else b
    if not ((_is_number(a) and _is_number(b)) or (isinstance(a, str) and isinstance(b, str))):
        a, b = str(a), str(b)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0

def sort_dramas(dramas: List[Dict[str, Any]], sort: str = DEFAULT_SORT) -> List[Dict[str, Any]]:
    field, _, direction = (sort or DEFAULT_SORT).partition(":")
    sign = -1 if direction == "desc" else 1
    return sorted(dramas, key=cmp_to_key(lambda x, y: sign * compare_values(x.get(field), y.get(field))))

def paginate(items: List[Any], page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Dict[str, Any]:
    start = (page - 1) * limit
    return {
        "items": items[start:start + limit],
        "page": page,
        "limit": limit,
        "total": len(items),
        "pages": math.ceil(len(items) / limit),
    }

def run_query(dramas: List[Dict[str, Any]], q: DramaQuery) -> Dict[str, Any]:
    return paginate(sort_dramas(filter_dramas(dramas, q), q.sort), q.page, q.limit)
