from bs4 import BeautifulSoup

from mediabox.services.paths import PathTranslator


def _rewrite_images(html: str | None, translate) -> str | None:
    if html is None:
        return None
    soup = BeautifulSoup(html, "html.parser")
    for img in soup.find_all("img"):
        src = img.get("src")
        if src:
            img["src"] = translate(src)
    return str(soup)


def to_storage(html: str | None, paths: PathTranslator) -> str | None:
    """Replace media box URLs in ``<img src>`` with storage paths before saving."""
    return _rewrite_images(html, paths.path_from_url_or_value)


def to_display(html: str | None, paths: PathTranslator) -> str | None:
    """Replace stored media box paths in ``<img src>`` with URLs for rendering."""
    return _rewrite_images(html, paths.url_from_path_or_value)
