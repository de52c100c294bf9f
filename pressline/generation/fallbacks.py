"""Rule-based generators used when AI output is missing or invalid.

Every function here is deterministic and makes no external calls. The body
generator always produces at least two ``## `` headings, one bulleted list
and three bold phrases, the same contract AI bodies are validated against.
"""

import re
from collections import Counter
from typing import Dict, List, Optional, Sequence

from ..config import FallbackConfig
from .models import GeneratedMetadata

TITLE_MAX_CHARS = 80
SUMMARY_MAX_CHARS = 250
SOCIAL_MAX_CHARS = 500
MIN_TITLE_SENTENCE_CHARS = 20

# Word prefixes per topic, English and Spanish
TOPIC_KEYWORDS: Dict[str, Sequence[str]] = {
    "sport": ("deport", "sport", "fútbol", "futbol", "football", "soccer", "tenis", "tennis", "torneo", "tournament"),
    "economy": ("econom", "inflaci", "inflation", "mercado", "market", "dólar", "dolar", "finanz", "financ"),
    "politics": ("polític", "politic", "gobierno", "government", "elecci", "election", "congres", "senad", "senat"),
    "entertainment": ("entreten", "entertain", "espectácul", "espectacul", "celebr", "artista", "película", "film"),
    "technology": ("tecnolog", "technolog", "software", "inteligencia artificial", "artificial intelligence", "digital"),
    "health": ("salud", "health", "hospital", "médic", "medic", "vacun", "vaccin", "enfermedad", "disease"),
    "agriculture": ("agro", "agricult", "cosecha", "harvest", "ganader", "livestock", "cultivo", "crop"),
    "culture": ("cultura", "culture", "museo", "museum", "teatro", "theat", "literatur", "música", "music"),
}

TOPIC_EMOJI: Dict[str, str] = {
    "sport": "⚽",
    "economy": "💰",
    "politics": "🏛",
    "entertainment": "🎬",
    "technology": "💻",
    "health": "🏥",
    "agriculture": "🌾",
    "culture": "🎭",
}
DEFAULT_EMOJI = "📰"

_TOPIC_PATTERNS = {
    topic: re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + ")", re.IGNORECASE)
    for topic, keywords in TOPIC_KEYWORDS.items()
}

REPORTING_VERBS = {
    "said", "says", "according", "reported", "reports", "told", "added", "explained", "stated",
    "dijo", "según", "segun", "afirmó", "afirmo", "informó", "informo", "explicó", "explico",
    "señaló", "senalo", "agregó", "agrego", "indicó", "indico", "sostuvo", "aseguró", "aseguro",
}

STOP_WORDS = {
    # English
    "about", "after", "also", "among", "been", "before", "being", "between", "both", "could",
    "does", "during", "each", "even", "from", "have", "having", "here", "into", "just", "last",
    "like", "made", "make", "many", "more", "most", "much", "must", "news", "only", "other",
    "over", "said", "same", "says", "should", "since", "some", "such", "than", "that", "their",
    "them", "then", "there", "these", "they", "this", "those", "through", "under", "until",
    "very", "were", "what", "when", "where", "which", "while", "will", "with", "within",
    "would", "year", "years", "your",
    # Spanish
    "ante", "antes", "aquí", "años", "bajo", "cada", "como", "con", "contra", "cual", "cuando",
    "desde", "donde", "durante", "ella", "ellas", "ellos", "entre", "esta", "estaba", "estado",
    "estas", "este", "esto", "estos", "está", "están", "fue", "fueron", "hace", "hacia", "hasta",
    "había", "han", "hay", "más", "mismo", "muy", "nos", "nuestra", "nuestro", "otra", "otras",
    "otro", "otros", "para", "pero", "poco", "por", "porque", "puede", "pueden", "que", "quien",
    "según", "será", "sido", "sobre", "solo", "sólo", "también", "tanto", "tiene", "tienen",
    "toda", "todas", "todo", "todos", "tras", "una", "unas", "uno", "unos", "vez", "dijo",
}

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_FRAGMENT_SPLIT_RE = re.compile(r"[.!?;:]+")
_TOKEN_RE = re.compile(r"[^\W\d_]+")


def split_paragraphs(text: str) -> List[str]:
    """Paragraphs separated by blank lines."""
    return [p.strip() for p in re.split(r"\n\s*\n", text or "") if p.strip()]


def split_lines(text: str) -> List[str]:
    """Non-empty lines."""
    return [line.strip() for line in re.split(r"\n+", text or "") if line.strip()]


def split_sentences(text: str) -> List[str]:
    """Sentences, split after terminal punctuation."""
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(" ".join((text or "").split())) if s.strip()]


def truncate(text: str, limit: int, ellipsis: str = "") -> str:
    """Cut text to at most ``limit`` characters, preferring a word boundary."""
    text = text.strip()
    if len(text) <= limit:
        return text
    room = max(limit - len(ellipsis), 0)
    cut = text[:room]
    space = cut.rfind(" ")
    if space > room // 2:
        cut = cut[:space]
    return cut.rstrip(" ,;:-") + ellipsis


def detect_category(text: str, default: str = "news") -> str:
    """Topic id with the most keyword hits; ``default`` when nothing matches."""
    best, best_hits = default, 0
    for topic, pattern in _TOPIC_PATTERNS.items():
        hits = len(pattern.findall(text or ""))
        if hits > best_hits:
            best, best_hits = topic, hits
    return best


def _starts_with_reporting_verb(paragraph: str) -> bool:
    words = paragraph.split()
    if not words:
        return False
    return words[0].lower().strip(".,;:\"'«»“”") in REPORTING_VERBS


class FallbackGenerators:
    """Deterministic producers of metadata, body, tags and social text."""

    def __init__(self, config: Optional[FallbackConfig] = None, labels: Optional[Dict[str, str]] = None) -> None:
        """
        Initialize fallback generators.

        Args:
            config: Fixed phrases and defaults
            labels: Category id to destination label lookup
        """
        self.config = config or FallbackConfig()
        self.labels = dict(labels or {})
        phrase_words = " ".join(
            [
                self.config.first_heading,
                self.config.second_heading,
                self.config.list_intro,
                self.config.image_label,
                *self.config.list_labels,
            ]
        )
        self._template_words = {w.lower() for w in _TOKEN_RE.findall(phrase_words)}

    def label_for(self, category: str) -> str:
        """Destination label for a category id."""
        return self.labels.get(category) or category.capitalize()

    def detect_category(self, text: str) -> str:
        return detect_category(text, self.config.default_category)

    def metadata(self, text: str, title_max_chars: int = TITLE_MAX_CHARS) -> GeneratedMetadata:
        """Title from the first substantial sentence, summary from a later paragraph."""
        paragraphs = split_lines(text)

        title = ""
        for sentence in split_sentences(text):
            if len(sentence) >= MIN_TITLE_SENTENCE_CHARS:
                title = sentence
                break
        if not title and paragraphs:
            title = paragraphs[0]
        title = truncate(title.rstrip(".") or self.config.default_title, title_max_chars)

        later = paragraphs[1:]
        preferred = [p for p in later if not _starts_with_reporting_verb(p)]
        summary_source = (preferred or later or paragraphs or [""])[0]
        summary = truncate(summary_source, SUMMARY_MAX_CHARS, "...")

        category = self.detect_category(text)
        return GeneratedMetadata(
            title=title,
            summary=summary or self.config.default_summary,
            overline=self.label_for(category),
            category=category,
        )

    def _fragments(self, source: str, text: str) -> List[str]:
        fragments: List[str] = []
        for chunk in (source, text):
            for fragment in _FRAGMENT_SPLIT_RE.split(" ".join(chunk.split())):
                fragment = fragment.strip(" ,-")
                if len(fragment) > 5 and fragment not in fragments:
                    fragments.append(fragment)
                if len(fragments) == 3:
                    return fragments
        while len(fragments) < 3:
            fragments.append(truncate(" ".join(text.split()), 80) or self.config.default_summary)
        return fragments

    def _bullet_list(self, source: str, text: str) -> str:
        items = [
            f"- **{label}:** {truncate(fragment, 120)}"
            for label, fragment in zip(self.config.list_labels[:3], self._fragments(source, text))
        ]
        return f"{self.config.list_intro}\n\n" + "\n".join(items)

    def caption_line(self, caption: str) -> str:
        return f"**{self.config.image_label}:** {caption}"

    def body(self, text: str, captions: Sequence[str] = ()) -> str:
        """
        Markdown body with two headings, a bulleted list and interleaved captions.

        Headings go before the paragraphs at roughly one and two thirds; the
        list follows the first heading's paragraph. Captions are inserted
        every ``n // (captions + 1)`` paragraphs, leftovers at the end.
        """
        paragraphs = split_paragraphs(text)
        if len(paragraphs) < 3:
            sentences = split_sentences(" ".join(paragraphs))
            if len(sentences) >= 3:
                size = -(-len(sentences) // 3)
                paragraphs = [" ".join(sentences[i : i + size]) for i in range(0, len(sentences), size)]
        if not paragraphs:
            paragraphs = [self.config.default_summary]

        n = len(paragraphs)
        first = n // 3
        second = max((2 * n) // 3, first + 1)
        bullets = self._bullet_list(paragraphs[first], text)
        pending = [self.caption_line(c) for c in captions if c and c.strip()]
        interval = max(n // (len(pending) + 1), 1)

        blocks: List[str] = []
        for index, paragraph in enumerate(paragraphs):
            if index == first:
                blocks.append(f"## {self.config.first_heading}")
            elif index == second:
                blocks.append(f"## {self.config.second_heading}")
            blocks.append(paragraph)
            if index == first and second < n:
                blocks.append(bullets)
            if pending and (index + 1) % interval == 0:
                blocks.append(pending.pop(0))

        if second >= n:
            blocks.append(f"## {self.config.second_heading}")
            blocks.append(bullets)
        blocks.extend(pending)
        return "\n\n".join(blocks)

    def tags(self, title: str, summary: str, body: str, count: Optional[int] = None) -> str:
        """Most frequent non-stop-word tokens, capitalized and comma-joined."""
        count = count or self.config.tag_count
        tokens = _TOKEN_RE.findall(" ".join((title, summary, body)).lower())
        candidates = [
            t for t in tokens if len(t) >= 4 and t not in STOP_WORDS and t not in self._template_words
        ]
        if not candidates:
            return self.label_for(self.config.default_category)

        counts = Counter(candidates)
        first_seen: Dict[str, int] = {}
        for index, token in enumerate(candidates):
            first_seen.setdefault(token, index)
        ranked = sorted(counts, key=lambda t: (-counts[t], first_seen[t]))
        return ", ".join(token.capitalize() for token in ranked[:count])

    def social_text(
        self,
        title: str,
        summary: str,
        tags: str,
        category: Optional[str] = None,
        max_chars: int = SOCIAL_MAX_CHARS,
    ) -> str:
        """Emoji + truncated summary + hashtags, never longer than ``max_chars``."""
        category = category or self.detect_category(" ".join((title, summary)))
        emoji = TOPIC_EMOJI.get(category, DEFAULT_EMOJI)

        hashtags = []
        for tag in tags.split(",")[:3]:
            cleaned = "".join(part.capitalize() for part in _TOKEN_RE.findall(tag))
            if cleaned:
                hashtags.append(f"#{cleaned}")
        tail = " ".join(hashtags)

        budget = max_chars - len(emoji) - 1 - (len(tail) + 2 if tail else 0)
        if budget < 40:
            tail = ""
            budget = max_chars - len(emoji) - 1

        text = f"{emoji} {truncate(summary or title, budget, '...')}"
        if tail:
            text = f"{text}\n\n{tail}"
        return text[:max_chars]
