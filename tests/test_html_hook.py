from __future__ import annotations

import base64

from bs4 import BeautifulSoup

from conftest import image_bytes
from mediabox.hooks.html import to_display, to_storage


def _sources(html: str) -> list[str]:
    return [img.get("src") for img in BeautifulSoup(html, "html.parser").find_all("img")]


def test_to_storage_replaces_our_urls(boxes, box) -> None:
    content = boxes.upload(box, image_bytes(), filename="a.png")
    html = (
        f'<p>Hello <img src="{boxes.url_of(content)}" alt="ours"></p>'
        '<img src="https://elsewhere.example.org/cat.png">'
    )
    stored = to_storage(html, boxes.paths)
    assert _sources(stored) == [boxes.path_of(content), "https://elsewhere.example.org/cat.png"]
    assert "Hello" in stored


def test_to_display_replaces_our_paths(boxes, box) -> None:
    content = boxes.upload(box, image_bytes(), filename="a.png")
    html = f'<div><img src="{boxes.path_of(content)}"><img src="/static/logo.png"></div>'
    shown = to_display(html, boxes.paths)
    assert _sources(shown) == [boxes.url_of(content), "/static/logo.png"]


def test_round_trip_and_passthrough(boxes, box) -> None:
    content = boxes.upload(box, image_bytes(), filename="a.png")
    inline = "data:image/png;base64," + base64.b64encode(image_bytes()).decode("ascii")
    html = f'<img src="{boxes.url_of(content)}"><img src="{inline}"><img>'
    back = to_display(to_storage(html, boxes.paths), boxes.paths)
    assert _sources(back) == [boxes.url_of(content), inline, None]


def test_none_passes_through(boxes) -> None:
    assert to_storage(None, boxes.paths) is None
    assert to_display(None, boxes.paths) is None
