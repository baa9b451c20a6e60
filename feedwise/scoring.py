"""
Relevance scoring and display ordering for articles.

Scores are recomputed from current state on every request and never treated
as stored facts, so tag or article changes can't leave stale rankings behind.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from functools import cmp_to_key
from typing import Iterable

from .database.models import DBArticle, DBTag
from .dates import ensure_utc

TAG_MATCH_BONUS = 0.25
READ_PENALTY = 0.20
SAVED_BONUS = 0.10

# (max age in whole days, bonus), checked in order
RECENCY_BONUSES = ((1, 0.30), (3, 0.20), (7, 0.10))

# Score gaps at or below this are treated as noise and ordered by date
AUTHORITATIVE_GAP = 0.3


@dataclass
class ScoredArticle:
    article: DBArticle
    score: float


def age_in_days(published_at: datetime, now: datetime) -> int:
    """Whole days elapsed since publication (negative for future dates)."""
    seconds = (ensure_utc(now) - ensure_utc(published_at)).total_seconds()
    return math.floor(seconds / 86400)


def recency_bonus(published_at: datetime, now: datetime) -> float:
    days = age_in_days(published_at, now)
    for max_days, bonus in RECENCY_BONUSES:
        if days < max_days:
            return bonus
    return 0.0


def score_article(article: DBArticle, tag_names: Iterable[str], now: datetime) -> float:
    """
    Compute a relevance score in [0, 1].

    +0.25 for each owner tag the article carries (matches compound),
    a recency bonus, -0.20 if read and +0.10 if saved, then clamped.
    """
    article_tags = set(article.tags)
    score = sum(TAG_MATCH_BONUS for name in set(tag_names) if name in article_tags)
    score += recency_bonus(article.published_at, now)
    if article.is_read:
        score -= READ_PENALTY
    if article.is_saved:
        score += SAVED_BONUS
    return min(1.0, max(0.0, score))


def compare_ranked(a: ScoredArticle, b: ScoredArticle) -> int:
    """Higher score first when the gap is authoritative, otherwise newer first."""
    gap = a.score - b.score
    if abs(gap) > AUTHORITATIVE_GAP:
        return -1 if gap > 0 else 1

    a_date = ensure_utc(a.article.published_at)
    b_date = ensure_utc(b.article.published_at)
    if a_date == b_date:
        return 0
    return -1 if a_date > b_date else 1


def rank_articles(
    articles: Iterable[DBArticle],
    tags: Iterable[DBTag | str],
    now: datetime,
) -> list[ScoredArticle]:
    """Score every article against the owner's tags and return display order."""
    tag_names = {t if isinstance(t, str) else t.name for t in tags}
    scored = [ScoredArticle(a, score_article(a, tag_names, now)) for a in articles]
    return sorted(scored, key=cmp_to_key(compare_ranked))
