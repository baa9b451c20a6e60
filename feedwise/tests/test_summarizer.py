"""
Tests for the extractive summarizer.
"""

import pytest

import feedwise.summarizer as summarizer_module
from feedwise.summarizer import (
    Summarizer,
    extract_entities,
    extract_main_topic,
    information_density,
    select_sentences,
    split_sentences,
)

TITLE = "Free-threaded Python"

SENTENCES = [
    "Python 3.13 ships with an experimental free-threaded build that removes the global interpreter lock.",
    "The Steering Council approved the change after years of debate in the community.",
    "Benchmarks show single-threaded code runs about 10% slower in the new mode.",
    "Library authors must audit their C extensions because many rely on the lock for safety.",
    "Some maintainers have already published compatible wheels on the package index.",
    "Others are waiting to see whether the build becomes the default in a later release.",
    "Why does this matter for everyday developers?",
    "Parallel workloads such as data processing can now use every core without multiprocessing.",
    "In conclusion, the free-threaded build is a significant step for Python performance.",
]
ARTICLE = "\n".join(SENTENCES)
ARTICLE_WITHOUT_CONCLUSION = "  ".join(SENTENCES[:-1])


def key_points(text: str) -> list[str]:
    section = text.split("**Key Points**:\n\n", 1)[1]
    section = section.split("\n\n**Key Entities**", 1)[0].split("\n\n**Context**", 1)[0]
    return [line[2:] for line in section.split("\n\n")]


def context_line(text: str) -> str:
    return text.rsplit("**Context**: ", 1)[1]


class TestBriefAndEmpty:
    """Short-circuit paths."""

    def test_brief_article_passthrough(self):
        result = Summarizer().summarize("Short news", "Just a quick update.")
        assert result.text == "• Brief Article: Short news - Just a quick update."
        assert result.degraded is False

    def test_brief_article_is_single_line(self):
        body = "First line of a short post.\n\nSecond line\twith a tab.\n"
        result = Summarizer().summarize("Short news", body)
        assert result.text == "• Brief Article: Short news - First line of a short post. Second line with a tab."

    def test_brief_article_without_title(self):
        result = Summarizer().summarize("", "Just a quick update.")
        assert result.text == "• Brief Article: Just a quick update."

    def test_min_length_is_configurable(self):
        result = Summarizer(min_length=10).summarize("T", "Just a quick update here.")
        assert not result.text.startswith("• Brief Article")

    @pytest.mark.parametrize("body", ["", "   ", "\n\t \n", None])
    def test_empty_body_is_degraded_not_an_error(self, body):
        result = Summarizer().summarize("Empty", body)
        assert result.degraded is True
        assert result.text.strip()
        assert result.text.startswith("## Empty Summary")


class TestPrimaryPath:
    """TF-IDF blended selection."""

    def test_sections_rendered(self):
        result = Summarizer().summarize(TITLE, ARTICLE)
        assert result.degraded is False
        assert result.text.startswith(f"## {TITLE} Summary\n\n**Main Topic**: {TITLE}\n\n**Key Points**:\n\n")
        assert "**Key Entities**: " in result.text
        assert "**Context**: " in result.text

    def test_selects_adaptive_count_in_document_order(self):
        result = Summarizer().summarize(TITLE, ARTICLE)
        points = key_points(result.text)

        # ~770 chars -> clamp(ceil(len / 400), 4, 8) == 4
        assert len(points) == 4
        positions = [SENTENCES.index(p) for p in points]
        assert positions == sorted(positions)

    def test_conclusion_sentence_used_as_context(self):
        result = Summarizer().summarize(TITLE, ARTICLE)
        assert context_line(result.text) == SENTENCES[-1]

    def test_context_synthesized_without_conclusion(self):
        result = Summarizer().summarize(TITLE, ARTICLE_WITHOUT_CONCLUSION)
        words = len(ARTICLE_WITHOUT_CONCLUSION.split())
        assert context_line(result.text) == f"This is a brief {words} word article focused on {TITLE}."

    def test_few_sentences_are_all_kept(self):
        body = " ".join(SENTENCES[:3])
        result = Summarizer().summarize(TITLE, body)
        assert key_points(result.text) == SENTENCES[:3]

    @pytest.mark.asyncio
    async def test_summarize_async(self):
        result = await Summarizer().summarize_async(TITLE, ARTICLE)
        assert result.text.startswith(f"## {TITLE} Summary")


class TestFallbackPath:
    """Heuristic-only path when the primary path fails."""

    @pytest.fixture(autouse=True)
    def broken_primary(self, monkeypatch):
        def explode(sentences):
            raise ValueError("empty vocabulary")
        monkeypatch.setattr(summarizer_module, "tfidf_centrality", explode)

    def test_degrades_instead_of_raising(self):
        result = Summarizer().summarize(TITLE, ARTICLE)
        assert result.degraded is True
        assert result.text.startswith(f"## {TITLE} Summary")

    def test_keeps_five_sentences(self):
        result = Summarizer().summarize(TITLE, ARTICLE)
        points = key_points(result.text)
        assert len(points) == 5
        positions = [SENTENCES.index(p) for p in points]
        assert positions == sorted(positions)

    def test_fallback_context_line(self):
        result = Summarizer().summarize(TITLE, ARTICLE_WITHOUT_CONCLUSION)
        assert context_line(result.text) == f"This brief article covers {TITLE}."

    def test_fallback_context_without_title(self):
        result = Summarizer().summarize("", ARTICLE_WITHOUT_CONCLUSION)
        assert context_line(result.text) == "This brief article covers the above topics."
        assert result.text.startswith("## Article Summary")


class TestHelpers:
    """Sentence, topic and entity helpers."""

    def test_split_drops_short_fragments(self):
        text = "Short. This sentence is long enough! Is this one too? ok."
        assert split_sentences(text) == ["This sentence is long enough!", "Is this one too?"]

    def test_select_restores_document_order(self):
        assert select_sentences(["a", "b", "c", "d"], [1, 5, 3, 4], 2) == ["b", "d"]

    def test_information_density(self):
        assert information_density("sales grew 15% in 2023 because demand rose") == 7
        assert information_density("there were 3 options") == 1
        assert information_density('he said "fine" versus no') == 4
        assert information_density("nothing to see") == 0

    def test_main_topic_prefers_title(self):
        assert extract_main_topic("My Title", "Anything.") == "My Title"

    def test_main_topic_strips_lead_in(self):
        content = "In this article we explore caching strategies. More follows."
        assert extract_main_topic("", content) == "we explore caching strategies"

    def test_main_topic_truncated(self):
        topic = extract_main_topic("", "word " * 40)
        assert len(topic) == 100
        assert topic.endswith("...")

    def test_main_topic_unavailable(self):
        assert extract_main_topic("", "Hi. there") == "Unable to determine main topic"

    def test_entities_from_content_and_title(self):
        entities = extract_entities("The Quick Fox met Alice and Bob in Paris.", "Travel notes")
        assert entities == ["The Quick Fox", "Alice", "Paris", "Travel", "notes"]

    def test_entities_skip_stopwords(self):
        assert extract_entities("From here. By then, Over There.", "") == ["Over There"]

    def test_entities_capped_at_ten(self):
        names = ["Alpha", "Bravo", "Charlie", "Delta", "Echo", "Foxtrot",
                 "Golf", "Hotel", "India", "Juliet", "Kilo", "Lima"]
        assert extract_entities(" and ".join(names), "") == names[:10]
