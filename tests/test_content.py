import pytest

from conftest import BASE, story_page
from story_mdx.content import (
    discover_branches,
    extract_meta,
    header_html,
    is_by_author,
    parse_html,
)
from story_mdx.errors import StructureError


def test_is_by_author_ignores_case():
    assert is_by_author("<p>By JANE doe</p>", "Jane Doe")
    assert not is_by_author("<p>By Someone Else</p>", "Jane Doe")


def test_is_by_author_treats_special_characters_literally():
    assert is_by_author("<p>By J.R. Smith*</p>", "j.r. smith*")
    assert not is_by_author("<p>By JxR Smith</p>", "J.R. Smith")


def test_header_html_missing_region_is_empty():
    assert header_html(parse_html("<html><body><p>nothing</p></body></html>")) == ""


def test_extract_meta_reads_title_chapter_and_meta_tags():
    soup = parse_html(
        story_page(
            title="The Cave of \"Echoes\"",
            chapter=12,
            body="<p>Drip.</p>",
            meta={
                "og:description": "A spooky tale",
                "article:published_time": "2023-01-02",
                "article:tag": "horror",
            },
        )
    )
    meta = extract_meta(soup)

    assert meta.title == 'The Cave of "Echoes"'
    assert meta.slug == "the-cave-of-echoes"
    assert meta.chapter == "12"
    assert meta.file_name == "ch-12-the-cave-of-echoes"
    assert meta.description == "A spooky tale"
    assert meta.pub_date == "2023-01-02"
    assert meta.updated_date is None
    assert meta.tag == "horror"
    assert meta.content == "<p>Drip.</p>"


def test_extract_meta_without_chapter_uses_plain_slug():
    meta = extract_meta(parse_html(story_page(title="Prologue", chapter=None)))
    assert meta.chapter is None
    assert meta.file_name == "prologue"


def test_extract_meta_untitled_fallback():
    meta = extract_meta(parse_html(story_page(title=None)))
    assert meta.title.startswith("Untitled ")
    assert meta.title.split(" ", 1)[1].isdigit()
    assert meta.slug.startswith("untitled-")


def test_extract_meta_is_idempotent():
    soup = parse_html(story_page(title="Fork in the Road", chapter=3))
    assert extract_meta(soup).file_name == extract_meta(soup).file_name


@pytest.mark.parametrize(
    "html",
    [
        '<div class="chapter-content"><p>x</p></div>',
        '<div class="chapter-header"><h1>x</h1></div>',
    ],
)
def test_extract_meta_requires_header_and_content(html):
    with pytest.raises(StructureError):
        extract_meta(parse_html(html))


def test_discover_branches_filters_and_keeps_order():
    soup = parse_html(
        story_page(
            links=[
                "/story/chapter/2",
                "https://stories.example.com/story/chapter/new?parent=1",
                "/about",
                "chapter/3",
                "/story/chapter/2",
            ]
        )
    )
    branches = discover_branches(soup, f"{BASE}/story/chapter/1")
    assert branches == [
        f"{BASE}/story/chapter/2",
        f"{BASE}/story/chapter/chapter/3",
        f"{BASE}/story/chapter/2",
    ]


def test_discover_branches_ignores_links_outside_listing_and_without_href():
    html = """
    <div class="chapter-content"><a href="/story/chapter/9">inline</a></div>
    <div class="question-content"><a>no href</a><a href="/story/chapter/4">ok</a></div>
    """
    assert discover_branches(parse_html(html), BASE) == [f"{BASE}/story/chapter/4"]
