"""Prompt builders for each enrichment stage."""

from typing import Sequence

MAX_PROMPT_TEXT_CHARS = 5000
MAX_SIMPLE_PROMPT_TEXT_CHARS = 3000

FORBIDDEN_PHRASES = ("in summary", "in conclusion", "to sum up", "markdown")


def _captions_block(captions: Sequence[str], image_label: str) -> str:
    if not captions:
        return ""
    lines = "\n\n".join(f"**{image_label}:** {caption}" for caption in captions)
    return (
        "The following image descriptions were extracted from the original article. "
        "Insert each one, unchanged, at the most appropriate place in the text:\n\n"
        f"{lines}\n"
    )


def build_body_prompt(
    text: str,
    captions: Sequence[str],
    language: str,
    min_words: int,
    max_words: int,
    image_label: str = "Image",
) -> str:
    """Full rewrite prompt for the article body."""
    forbidden = ", ".join(f'"{p}"' for p in FORBIDDEN_PHRASES)
    return f"""Rewrite the following news article in {language}, following these rules:

1. Language: a neutral, professional journalistic register. No opinions or value judgements.
2. Clarity: short, direct sentences that a general audience can follow.
3. Structure:
   - REQUIRED: split the text into sections with at least 2 subheadings written as "## Subheading".
   - Short, well organized paragraphs.
   - Do not add a closing summary or conclusion section.
4. Formatting:
   - REQUIRED: at least one bulleted list using exactly this format:
     - First item
     - Second item
     - Third item
   - REQUIRED: use **bold** for important information at least 3 times.
   - Quotes go on their own line as "> Quoted text".
   - Sequences of steps go in a numbered list.
5. Length: between {min_words} and {max_words} words.
6. Do not include a main title (# Title); start directly with the body.
7. Never use these phrases: {forbidden}.
8. Return only the rewritten article, without code fences.

{_captions_block(captions, image_label)}
Original text: "{text[:MAX_PROMPT_TEXT_CHARS]}"
"""


def build_simple_body_prompt(
    text: str,
    captions: Sequence[str],
    language: str,
    image_label: str = "Image",
) -> str:
    """Shorter rewrite prompt used after the full prompt fails."""
    return f"""Rewrite this text in {language} with a clear structure.
IMPORTANT: use these formatting elements:
1. At least two subheadings written as "## Subheading"
2. REQUIRED: at least one bulleted list in exactly this format:
   - First item
   - Second item
   - Third item
3. **Bold** to highlight important information (at least 3 times)
4. Quotes formatted as "> Quoted text"

{_captions_block(captions, image_label)}
Original text: "{text[:MAX_SIMPLE_PROMPT_TEXT_CHARS]}"
"""


def build_metadata_prompt(text: str, language: str, title_max_chars: int) -> str:
    """Prompt asking for title, summary and overline as JSON."""
    return f"""Extracted text: "{text[:MAX_PROMPT_TEXT_CHARS]}"

Based on the text above, write in {language}:
1. A concise, engaging title of at most {title_max_chars} characters. Do not use title case:
   capitalize only the first word and proper nouns.
2. A summary of 40 to 50 words capturing the key points, in sentence case.
3. A short overline of at most 4 words giving context for the article, in sentence case.

Return only JSON in this format:
{{
  "title": "Generated title",
  "summary": "Generated 40-50 word summary",
  "overline": "Generated overline"
}}
"""


def build_tags_prompt(title: str, summary: str, body: str, count: int = 5) -> str:
    """Prompt asking for comma-separated tags."""
    return f"""Suggest {count} short topic tags for this article.

Title: {title}
Summary: {summary}
Article: "{body[:2000]}"

Rules:
- Each tag is one to three words, capitalized.
- Use the language of the article.
- Return only the tags on a single line, separated by commas.
"""


def build_social_prompt(title: str, summary: str, tags: str, language: str, max_chars: int) -> str:
    """Prompt asking for a social media post."""
    return f"""Write a social media post in {language} about this news article.

Title: {title}
Summary: {summary}
Tags: {tags}

Rules:
- Between 250 and {max_chars} characters in total.
- Informative prose, no exclamation marks, do not address the reader directly.
- Start with one relevant emoji and end with 2 or 3 hashtags built from the tags.
- Return only the post text.
"""
