"""Map raw category rows onto the single SearchResult shape."""
import logging
from typing import Any, Dict, Iterable, List, Optional

from sermon_buddy.core.content import church_details_from_row, location_subtitle
from sermon_buddy.modules.search.engine import CATEGORY_ORDER, CategoryOutcome
from sermon_buddy.modules.search.schemas import SearchResult, SearchResultKind

logger = logging.getLogger(__name__)


def normalize_person(row: Dict[str, Any]) -> SearchResult:
    return SearchResult(
        kind=SearchResultKind.USER,
        id=row["id"],
        title=row.get("full_name") or row["username"],
        subtitle=f"@{row['username']}",
        avatar_url=row.get("avatar_url"),
    )


def normalize_church(row: Dict[str, Any]) -> SearchResult:
    details = church_details_from_row(row)
    return SearchResult(
        kind=SearchResultKind.CHURCH,
        id=row["id"],
        title=row["name"],
        subtitle=location_subtitle(details),
        avatar_url=row.get("image_url"),
        details=details,
    )


def normalize_sermon(row: Dict[str, Any]) -> Optional[SearchResult]:
    """None when the note has no joined author"""
    author = row.get("profiles")
    if not author or not author.get("username"):
        logger.debug(f"Dropping sermon {row.get('id')} without an author")
        return None
    return SearchResult(
        kind=SearchResultKind.SERMON,
        id=row["id"],
        title=row["title"],
        subtitle=f"by @{author['username']}",
    )


_NORMALIZERS = {
    SearchResultKind.USER: normalize_person,
    SearchResultKind.CHURCH: normalize_church,
    SearchResultKind.SERMON: normalize_sermon,
}


def normalize(outcomes: Iterable[CategoryOutcome]) -> List[SearchResult]:
    """Concatenate successful categories in fixed user, church, sermon order"""
    by_kind = {outcome.kind: outcome for outcome in outcomes}
    results = []
    for kind in CATEGORY_ORDER:
        outcome = by_kind.get(kind)
        if outcome is None or not outcome.ok:
            continue
        for row in outcome.rows:
            result = _NORMALIZERS[kind](row)
            if result is not None:
                results.append(result)
    return results
