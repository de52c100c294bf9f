"""Main-text, captioned-image and embed extraction from article markup."""

import re
from typing import Dict, List, Optional, Tuple

import trafilatura
from bs4 import BeautifulSoup, Tag

from .models import EmbedLinks, ExtractedImage, ExtractionResult

# Host labels / path fragments of ad, tracking and icon images
_BLOCKED_IMAGE_PATTERNS = (
    re.compile(r"(^|[/.])ads?\.", re.IGNORECASE),
    re.compile(r"(^|[/.])pixel\.", re.IGNORECASE),
    re.compile(r"analytics", re.IGNORECASE),
    re.compile(r"/icons?/", re.IGNORECASE),
    re.compile(r"/social/", re.IGNORECASE),
)

MIN_IMAGE_DIMENSION = 100

_CAPTION_TAGS = ("em", "small")

_YOUTUBE_RE = re.compile(r"(?:youtube(?:-nocookie)?\.com/(?:embed/|watch\?v=)|youtu\.be/)([\w-]{6,})")
_TWITTER_RE = re.compile(r"https?://(?:www\.)?(?:twitter|x)\.com/\w+/status/(\d+)")
_INSTAGRAM_RE = re.compile(r"instagram\.com/(p|reel)/([\w-]+)")
_FACEBOOK_RE = re.compile(r"https?://(?:www\.)?facebook\.com/[^\s\"'<>]+/(?:posts|videos)/[\w.]+")


def _image_src(img: Tag) -> str:
    return (img.get("src") or img.get("data-src") or "").strip()


def _dimension(value: Optional[str]) -> int:
    """Leading integer of a width/height attribute, 0 when absent."""
    if not value:
        return 0
    match = re.match(r"\s*(\d+)", str(value))
    return int(match.group(1)) if match else 0


def is_acceptable_image(url: str, width: Optional[str] = None, height: Optional[str] = None) -> bool:
    """Reject SVGs, data URIs, ad/tracking/icon URLs and icon-sized images."""
    if not url or url.startswith("data:"):
        return False
    if ".svg" in url.lower():
        return False
    if any(pattern.search(url) for pattern in _BLOCKED_IMAGE_PATTERNS):
        return False
    for dim in (_dimension(width), _dimension(height)):
        if 0 < dim < MIN_IMAGE_DIMENSION:
            return False
    return True


def _is_caption_element(element: Optional[Tag]) -> bool:
    if not isinstance(element, Tag):
        return False
    if element.name in _CAPTION_TAGS:
        return True
    return element.name == "span" and "caption" in (element.get("class") or [])


def _adjacent_caption(img: Tag) -> str:
    """Caption from the image's next sibling, or its parent's next sibling."""
    sibling = img.find_next_sibling()
    if _is_caption_element(sibling):
        return sibling.get_text(" ", strip=True)
    parent = img.parent
    if isinstance(parent, Tag):
        parent_sibling = parent.find_next_sibling()
        if _is_caption_element(parent_sibling):
            return parent_sibling.get_text(" ", strip=True)
    return ""


def extract_images(html: str) -> List[ExtractedImage]:
    """
    Find captioned images in document order.

    Figures with a ``figcaption`` are collected first; standalone images
    qualify only with an adjacent caption element. URLs already found are
    skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    positions: Dict[int, int] = {id(img): index for index, img in enumerate(soup.find_all("img"))}
    found: List[Tuple[int, ExtractedImage]] = []
    seen = set()

    for figure in soup.find_all("figure"):
        img = figure.find("img")
        caption_el = figure.find("figcaption")
        if img is None or caption_el is None:
            continue
        url = _image_src(img)
        caption = caption_el.get_text(" ", strip=True)
        if not url or not caption or url in seen:
            continue
        if not is_acceptable_image(url, img.get("width"), img.get("height")):
            continue
        seen.add(url)
        found.append(
            (positions[id(img)], ExtractedImage(url=url, alt_text=img.get("alt") or "Image", caption=caption))
        )

    for img in soup.find_all("img"):
        if img.find_parent("figure") is not None:
            continue
        url = _image_src(img)
        if not url or url in seen:
            continue
        if not is_acceptable_image(url, img.get("width"), img.get("height")):
            continue
        caption = _adjacent_caption(img)
        if not caption:
            continue
        seen.add(url)
        found.append(
            (positions[id(img)], ExtractedImage(url=url, alt_text=img.get("alt") or "Image", caption=caption))
        )

    found.sort(key=lambda pair: pair[0])
    return [image for _, image in found]


def extract_embeds(html: str) -> EmbedLinks:
    """First YouTube, X/Twitter, Instagram and Facebook embed links in the markup."""
    youtube = _YOUTUBE_RE.search(html)
    twitter = _TWITTER_RE.search(html)
    instagram = _INSTAGRAM_RE.search(html)
    facebook = _FACEBOOK_RE.search(html)
    return EmbedLinks(
        youtube=f"https://www.youtube.com/watch?v={youtube.group(1)}" if youtube else None,
        twitter=twitter.group(0) if twitter else None,
        instagram=f"https://www.instagram.com/{instagram.group(1)}/{instagram.group(2)}/" if instagram else None,
        facebook=facebook.group(0) if facebook else None,
    )


def extract_text(html: str, url: Optional[str] = None) -> str:
    """Primary article text; empty string when nothing usable is found."""
    if not html or not html.strip():
        return ""
    try:
        extracted = trafilatura.extract(
            html,
            url=url,
            include_comments=False,
            include_tables=False,
            include_images=False,
            deduplicate=True,
        )
    except Exception:
        extracted = None
    if extracted and extracted.strip():
        return extracted.strip()
    return extract_paragraphs(html)


def extract_paragraphs(html: str) -> str:
    """Paragraph text of the article (or whole page), one paragraph per block."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "nav", "header", "footer", "aside", "form"]):
        tag.decompose()

    root = soup.find("article") or soup.find("main") or soup.body or soup
    paragraphs = []
    for p in root.find_all("p"):
        text = re.sub(r"\s+", " ", p.get_text(" ", strip=True)).strip()
        if text:
            paragraphs.append(text)
    return "\n\n".join(paragraphs)


class ContentExtractor:
    """Turn raw markup into an ExtractionResult."""

    def extract(self, html: str, url: Optional[str] = None) -> ExtractionResult:
        """Extract text, captioned images and embeds; never raises on bad markup."""
        if not html:
            return ExtractionResult()

        try:
            images = extract_images(html)
        except Exception:
            images = []

        return ExtractionResult(
            plain_text=extract_text(html, url),
            images=images,
            embeds=extract_embeds(html),
        )
