"""
Summarizer - extractive article summarization.

Features:
- Brief-article passthrough for short bodies
- Sentence scoring (position, length, title keywords, discourse markers,
  questions, information density)
- TF-IDF centrality blended into the score on the primary path
- Heuristic-only fallback when the primary path fails
- Markdown-style rendering with topic, key points, entities and context

Never raises on content: the worst case is a degraded summary.
"""

import asyncio
import logging
import math
import re
from dataclasses import dataclass

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer

from .exceptions import SummaryGenerationDegraded

logger = logging.getLogger(__name__)

DEFAULT_MIN_LENGTH = 200
FALLBACK_SENTENCE_COUNT = 5
MAX_ENTITIES = 10

STOPWORDS = {"the", "a", "an", "and", "or", "but", "for", "nor", "on", "at", "to", "from", "by"}

SUMMARY_PHRASES = (
    "in summary", "to summarize", "in conclusion", "therefore", "as a result",
    "consequently", "the key", "important", "significant", "notably",
    "essentially", "critically", "fundamental", "primarily", "research shows",
    "study found", "according to",
)

CONCLUSION_MARKERS = ("in conclusion", "to conclude", "finally", "to summarize", "in summary")

SENTENCE_SPLIT = re.compile(r"(?<=[.?!])\s+")
ENTITY_PATTERN = re.compile(r"\b[A-Z][a-zA-Z]*(?:\s+[A-Z][a-zA-Z]*)*\b")
TOPIC_PREFIX = re.compile(r"^(in this article|here|today|we will discuss|let's talk about)", re.IGNORECASE)

STATISTIC = re.compile(r"\d+(\.\d+)?(%|percent|million|billion|thousand)", re.IGNORECASE)
NUMBER = re.compile(r"\d+")
COMPARISON = re.compile(r"more than|less than|compared to|versus|vs\.|greater than|better than", re.IGNORECASE)
QUOTED = re.compile(r"\"[^\"]*\"|'[^']*'")
DATE_MENTION = re.compile(
    r"\b(19|20)\d{2}\b|\b(january|february|march|april|may|june|july|august|"
    r"september|october|november|december)\b",
    re.IGNORECASE,
)
CAUSE_EFFECT = re.compile(r"because|due to|as a result of|caused by|lead to|resulting in", re.IGNORECASE)


@dataclass
class Summary:
    """Rendered summary text; degraded when the fallback path produced it."""
    text: str
    degraded: bool = False


# ─────────────────────────────────────────────────────────────
# Text helpers
# ─────────────────────────────────────────────────────────────

def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def split_sentences(text: str) -> list[str]:
    """Split on sentence-ending punctuation followed by whitespace; drop short fragments."""
    return [s.strip() for s in SENTENCE_SPLIT.split(text) if len(s.strip()) > 10]


def information_density(text: str) -> int:
    score = 0
    if STATISTIC.search(text):
        score += 3
    elif NUMBER.search(text):
        score += 1
    if COMPARISON.search(text):
        score += 2
    if QUOTED.search(text):
        score += 2
    if DATE_MENTION.search(text):
        score += 2
    if CAUSE_EFFECT.search(text):
        score += 2
    return score


def heuristic_scores(sentences: list[str], title: str) -> list[int]:
    """Score each sentence on position, length, keywords, phrases, questions and density."""
    title_words = [w for w in title.lower().split() if len(w) > 3]
    stems = [w[:-2] for w in title_words if len(w) > 5]
    total = len(sentences)
    scores = []

    for index, sentence in enumerate(sentences):
        text = sentence.lower()

        if index == 0 or index == total - 1:
            position = 3
        elif index < total / 3:
            position = 2
        else:
            position = 1

        length = len(sentence)
        if 60 < length < 200:
            length_score = 3
        elif 40 < length <= 60:
            length_score = 2
        else:
            length_score = 1

        keyword = 0
        for word in title_words:
            if word in text:
                keyword += 2
            elif any(stem in text for stem in stems):
                keyword += 1

        phrase = 3 if any(p in text for p in SUMMARY_PHRASES) else 0
        question = 2 if "?" in text else 0

        scores.append(position + length_score + keyword + phrase + question + information_density(text))

    return scores


def tfidf_centrality(sentences: list[str]) -> np.ndarray:
    """
    How strongly each sentence overlaps the rest of the document, scaled to [0, 1].

    Raises ValueError when no sentence has any non-stopword term.
    """
    vectorizer = TfidfVectorizer(stop_words="english")
    matrix = vectorizer.fit_transform(sentences)
    similarity = (matrix @ matrix.T).toarray()
    np.fill_diagonal(similarity, 0.0)
    centrality = similarity.sum(axis=1)
    peak = centrality.max()
    if peak <= 0:
        return np.zeros(len(sentences))
    return centrality / peak


def select_sentences(sentences: list[str], scores, count: int) -> list[str]:
    """Take the top-scoring sentences, then restore document order."""
    ranked = sorted(range(len(sentences)), key=lambda i: scores[i], reverse=True)
    return [sentences[i] for i in sorted(ranked[:count])]


def extract_main_topic(title: str, content: str) -> str:
    if title and title.strip():
        return title.strip()

    first = content.split(".")[0]
    if len(first) > 10:
        topic = TOPIC_PREFIX.sub("", first).strip()
        if len(topic) > 100:
            topic = topic[:97] + "..."
        return topic

    return "Unable to determine main topic"


def extract_entities(content: str, title: str) -> list[str]:
    """Capitalized phrases from the body plus long title words, first 10."""
    candidates = ENTITY_PATTERN.findall(content)
    candidates += [w for w in (title or "").split() if len(w) > 3]

    entities: list[str] = []
    for entity in candidates:
        if entity.lower() in STOPWORDS or len(entity) <= 3 or entity in entities:
            continue
        entities.append(entity)
        if len(entities) == MAX_ENTITIES:
            break
    return entities


def find_conclusion(sentences: list[str]) -> str | None:
    """Return the first of the last five sentences that reads as a conclusion."""
    for sentence in sentences[-5:]:
        lowered = sentence.lower()
        if any(marker in lowered for marker in CONCLUSION_MARKERS):
            return _terminated(sentence)
    return None


def _terminated(sentence: str) -> str:
    sentence = sentence.strip()
    return sentence if sentence[-1:] in (".", "!", "?") else sentence + "."


def render(title: str, topic: str, points: list[str], entities: list[str], context: str) -> str:
    parts = [
        f"## {title or 'Article'} Summary",
        f"**Main Topic**: {topic}",
        "**Key Points**:",
        "\n\n".join(f"• {p}" for p in points),
    ]
    if entities:
        parts.append(f"**Key Entities**: {', '.join(entities)}")
    parts.append(f"**Context**: {context}")
    return "\n\n".join(parts)


# ─────────────────────────────────────────────────────────────
# Summarizer
# ─────────────────────────────────────────────────────────────

class Summarizer:
    """Extractive summarizer with a heuristic fallback."""

    def __init__(self, min_length: int = DEFAULT_MIN_LENGTH):
        self.min_length = min_length

    def summarize(self, title: str, body: str) -> Summary:
        """
        Summarize an article body.

        Args:
            title: Article title (may be empty)
            body: Plain-text article body

        Returns:
            Summary; degraded is True when the fallback path was used or the
            body was empty
        """
        title = (title or "").strip()
        body = body or ""

        if not body.strip():
            logger.info(f"No content to summarize for '{title or 'untitled'}'")
            return Summary(text=self._empty_summary(title), degraded=True)

        if len(body) < self.min_length:
            prefix = f"{title} - " if title else ""
            return Summary(text=f"• Brief Article: {prefix}{normalize_whitespace(body)}")

        content = normalize_whitespace(body)

        try:
            return Summary(text=self._primary(title, content))
        except Exception as e:
            degraded = SummaryGenerationDegraded(f"Primary summarizer failed for '{title}': {e}")
            logger.warning(degraded.context())

        return Summary(text=self._fallback(title, content), degraded=True)

    async def summarize_async(self, title: str, body: str) -> Summary:
        """Run summarize() in the default executor; it is CPU-bound."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.summarize, title, body)

    def _primary(self, title: str, content: str) -> str:
        sentences = split_sentences(content)
        if not sentences:
            raise ValueError("no sentences found")

        count = min(8, max(4, math.ceil(len(content) / 400)))
        if len(sentences) <= 4:
            points = sentences
        else:
            heuristic = np.array(heuristic_scores(sentences, title), dtype=float)
            centrality = tfidf_centrality(sentences)
            # Centrality is worth as much as a top position or length score
            blended = heuristic + 3.0 * centrality
            points = select_sentences(sentences, blended, count)

        word_count = len(content.split())
        context = find_conclusion(sentences) or (
            f"This is a {'lengthy' if word_count > 1000 else 'brief'} {word_count} "
            f"word article focused on {title or 'the topic'}."
        )

        return render(
            title,
            extract_main_topic(title, content),
            [_terminated(p) for p in points],
            extract_entities(content, title),
            context,
        )

    def _fallback(self, title: str, content: str) -> str:
        sentences = split_sentences(content)
        if len(sentences) <= 4:
            points = sentences or [content[:200]]
        else:
            points = select_sentences(
                sentences, heuristic_scores(sentences, title), FALLBACK_SENTENCE_COUNT
            )

        context = find_conclusion(sentences) or (
            f"This {'in-depth' if len(sentences) > 15 else 'brief'} article covers "
            f"{title or 'the above topics'}."
        )

        return render(
            title,
            extract_main_topic(title, content),
            points,
            extract_entities(content, title),
            context,
        )

    def _empty_summary(self, title: str) -> str:
        return render(
            title,
            title or "Unable to determine main topic",
            ["No content available to summarize."],
            [],
            "This article has no text content.",
        )
