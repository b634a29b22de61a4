"""Markdown export for sanitized markup."""


def to_markdown(
    html: str,
    include_links: bool = True,
    include_images: bool = True,
    body_width: int = 0,
) -> str:
    """Convert cleaned markup to Markdown with html2text."""
    if not html.strip():
        return ""

    import html2text

    h = html2text.HTML2Text()
    h.ignore_links = not include_links
    h.ignore_images = not include_images
    h.body_width = body_width
    h.unicode_snob = True
    h.skip_internal_links = True
    h.ignore_emphasis = False

    return h.handle(html).strip()
