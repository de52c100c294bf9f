from pressline.ingestion import ContentExtractor, extract_embeds, extract_images
from pressline.ingestion import extractor
from pressline.ingestion.extractor import extract_paragraphs, extract_text, is_acceptable_image


def test_images_keep_document_order_across_passes() -> None:
    html = """
    <article>
      <p><img src="https://cdn.example.com/a.jpg"><em>Caption A</em></p>
      <figure>
        <img src="https://cdn.example.com/b.jpg" alt="B">
        <figcaption>Caption B</figcaption>
      </figure>
      <div><img src="https://cdn.example.com/c.jpg"></div>
      <small>Caption C</small>
    </article>
    """

    images = extract_images(html)

    assert [image.url for image in images] == [
        "https://cdn.example.com/a.jpg",
        "https://cdn.example.com/b.jpg",
        "https://cdn.example.com/c.jpg",
    ]
    assert [image.caption for image in images] == ["Caption A", "Caption B", "Caption C"]
    assert images[1].alt_text == "B"
    assert images[0].alt_text == "Image"


def test_figures_without_caption_and_uncaptioned_images_are_ignored() -> None:
    html = """
    <figure><img src="https://cdn.example.com/nocap.jpg"></figure>
    <p><img src="https://cdn.example.com/plain.jpg"></p>
    <p>Some text</p>
    """

    assert extract_images(html) == []


def test_filtered_images() -> None:
    html = """
    <figure><img src="https://cdn.example.com/logo.svg"><figcaption>Logo</figcaption></figure>
    <figure><img src="data:image/png;base64,AAAA"><figcaption>Inline</figcaption></figure>
    <figure><img src="https://ads.example.com/banner.jpg"><figcaption>Ad</figcaption></figure>
    <figure><img src="https://cdn.example.com/icons/share.png"><figcaption>Share</figcaption></figure>
    <figure><img src="https://cdn.example.com/thumb.jpg" width="50"><figcaption>Thumb</figcaption></figure>
    <figure><img src="https://cdn.example.com/photo.jpg" width="800" height="600"><figcaption>Photo</figcaption></figure>
    """

    images = extract_images(html)

    assert [image.caption for image in images] == ["Photo"]


def test_duplicate_urls_are_kept_once() -> None:
    html = """
    <figure><img src="https://cdn.example.com/a.jpg"><figcaption>First</figcaption></figure>
    <p><img src="https://cdn.example.com/a.jpg"><em>Again</em></p>
    """

    images = extract_images(html)

    assert len(images) == 1
    assert images[0].caption == "First"


def test_lazy_loaded_source_and_caption_span() -> None:
    html = '<p><img data-src="https://cdn.example.com/lazy.jpg"><span class="caption">Lazy</span></p>'

    images = extract_images(html)

    assert images[0].url == "https://cdn.example.com/lazy.jpg"
    assert images[0].caption == "Lazy"


def test_is_acceptable_image() -> None:
    assert is_acceptable_image("https://upload.example.com/photo.jpg")
    assert is_acceptable_image("https://cdn.example.com/photo.jpg", "640", "480")
    assert not is_acceptable_image("https://ad.doubleclick.example.com/x.jpg")
    assert not is_acceptable_image("https://cdn.example.com/pixel.gif")
    assert not is_acceptable_image("https://cdn.example.com/analytics/beacon.png")
    assert not is_acceptable_image("https://cdn.example.com/social/fb.png")
    assert not is_acceptable_image("https://cdn.example.com/photo.jpg", "99", None)
    assert not is_acceptable_image("")


def test_extract_embeds() -> None:
    html = """
    <iframe src="https://www.youtube.com/embed/dQw4w9WgXcQ"></iframe>
    <blockquote><a href="https://twitter.com/newsroom/status/1234567890">tweet</a></blockquote>
    <blockquote class="instagram-media" data-instgrm-permalink="https://www.instagram.com/p/AbC123/"></blockquote>
    <a href="https://www.facebook.com/newsroom/posts/98765">post</a>
    """

    embeds = extract_embeds(html)

    assert embeds.youtube == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    assert embeds.twitter == "https://twitter.com/newsroom/status/1234567890"
    assert embeds.instagram == "https://www.instagram.com/p/AbC123/"
    assert embeds.facebook == "https://www.facebook.com/newsroom/posts/98765"
    assert not embeds.is_empty()


def test_no_embeds() -> None:
    assert extract_embeds("<p>Plain article</p>").is_empty()


def test_extractor_on_empty_markup_returns_empty_result() -> None:
    result = ContentExtractor().extract("")

    assert result.plain_text == ""
    assert result.images == []
    assert result.embeds.is_empty()


def test_extractor_never_raises_on_garbage() -> None:
    result = ContentExtractor().extract("<<<>>> not really html &&&")

    assert isinstance(result.plain_text, str)
    assert result.images == []


PARAGRAPH_PAGE = """
<html><body>
  <nav><p>Home | Sections</p></nav>
  <article>
    <p>The  ministry announced
       a new irrigation plan.</p>
    <script>var tracking = 1;</script>
    <p>Twelve districts are included.</p>
    <p>   </p>
  </article>
  <footer><p>All rights reserved</p></footer>
</body></html>
"""


def test_extract_paragraphs_reads_article_paragraphs() -> None:
    text = extract_paragraphs(PARAGRAPH_PAGE)

    assert text == "The ministry announced a new irrigation plan.\n\nTwelve districts are included."


def test_extract_text_falls_back_to_paragraphs(monkeypatch) -> None:
    monkeypatch.setattr(extractor.trafilatura, "extract", lambda *args, **kwargs: None)

    assert extract_text(PARAGRAPH_PAGE).startswith("The ministry announced")


def test_extract_text_prefers_trafilatura_output(monkeypatch) -> None:
    monkeypatch.setattr(extractor.trafilatura, "extract", lambda *args, **kwargs: "  Main text.  ")

    assert extract_text(PARAGRAPH_PAGE) == "Main text."
