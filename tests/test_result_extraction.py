import itertools

import pytest

from serpbot.search.layouts import BING_LAYOUT, BlockStrategy, SerpLayout, TitleProbe
from serpbot.search.parser import Candidate, MarkupParseError, extract_search_results


class Recorder:
    def __init__(self) -> None:
        self.saved = []
        self.prefixes: list[str] = []
        self._seq = itertools.count(1)

    def generate_id(self, prefix: str) -> str:
        self.prefixes.append(prefix)
        return f"{prefix}_{next(self._seq)}"

    def save(self, record) -> None:
        self.saved.append(record)


def _extract(markup, num_results: int = 5, **kwargs):
    recorder = Recorder()
    results = extract_search_results(
        markup,
        num_results,
        recorder.generate_id,
        recorder.save,
        clock=lambda: 1000.0,
        **kwargs,
    )
    return results, recorder


def _page(*blocks: str) -> str:
    return f'<html><body><ol id="b_results">{"".join(blocks)}</ol></body></html>'


STANDARD_PAGE = _page(
    '<li class="b_algo"><h2><a href="https://example.com/a?utm_source=x">Title A</a></h2>'
    '<div class="b_caption"><p>Snippet A</p></div></li>',
    '<li class="b_ad"><h2><a href="https://ads.example.com/">Sponsored</a></h2></li>',
    '<li class="b_algo"><div class="b_tpcn"><a class="tilk" href="/relative/b">'
    '<div class="tptt">Title B</div></a></div><div class="b_lineclamp2">Snippet B</div></li>',
    '<li class="b_algo"><h2><a href="https://example.org/c">Title C</a></h2>'
    '<div class="b_caption"><p>Snippet C</p></div></li>',
)


def test_extracts_standard_blocks_in_document_order() -> None:
    results, recorder = _extract(STANDARD_PAGE, 5)

    assert [(r.title, r.link, r.snippet) for r in results] == [
        ("Title A", "https://example.com/a", "Snippet A"),
        ("Title B", "https://cn.bing.com/relative/b", "Snippet B"),
        ("Title C", "https://example.org/c", "Snippet C"),
    ]
    assert [r.id for r in results] == ["result_1", "result_2", "result_3"]
    assert recorder.saved == results
    assert all(r.timestamp == 1000.0 for r in results)


def test_stops_at_requested_count() -> None:
    results, recorder = _extract(STANDARD_PAGE, 2)

    assert [r.title for r in results] == ["Title A", "Title B"]
    assert len(recorder.saved) == 2


def test_zero_results_requested_returns_empty() -> None:
    results, recorder = _extract(STANDARD_PAGE, 0)

    assert results == []
    assert recorder.saved == []
    assert recorder.prefixes == []


def test_ad_block_with_result_class_is_skipped() -> None:
    markup = _page(
        '<li class="b_algo b_ad"><h2><a href="https://ads.example.com/">Ad</a></h2></li>',
        '<li class="b_algo"><h2><a href="https://example.com/">Organic</a></h2></li>',
    )
    results, _ = _extract(markup)

    assert [r.title for r in results] == ["Organic"]


def test_redirect_link_becomes_empty_and_block_is_not_repeated() -> None:
    markup = _page(
        '<li class="b_algo"><h2><a href="/ck/a?!&amp;&amp;p=abc">Wrapped</a></h2>'
        '<div class="b_caption"><p>Wrapped snippet</p></div></li>',
    )
    results, _ = _extract(markup)

    assert len(results) == 1
    assert results[0].title == "Wrapped"
    assert results[0].link == ""
    assert results[0].snippet == "Wrapped snippet"


def test_duplicate_links_are_kept_once() -> None:
    markup = _page(
        '<li class="b_algo"><h2><a href="https://example.com/same">First</a></h2></li>',
        '<li class="b_algo"><h2><a href="https://example.com/same?ref=dup">Second</a></h2></li>',
    )
    results, _ = _extract(markup)

    assert [r.title for r in results] == ["First"]


def test_missing_title_falls_back_to_host() -> None:
    markup = _page(
        '<li class="b_algo"><a target="_blank" href="https://host.example.net/x"></a>'
        '<div class="b_caption"><p>Only a snippet</p></div></li>',
    )
    results, _ = _extract(markup)

    assert results[0].title == "Result from host.example.net"
    assert results[0].link == "https://host.example.net/x"
    assert results[0].snippet == "Only a snippet"


def test_text_only_block_uses_its_text() -> None:
    markup = _page('<li class="b_algo"><span>Just some text here</span></li>')
    results, _ = _extract(markup)

    assert len(results) == 1
    assert results[0].title == "Just some text here"
    assert results[0].link == ""
    assert results[0].snippet == "Just some text here"


def test_empty_block_is_rejected() -> None:
    markup = _page(
        '<li class="b_algo"></li>',
        '<li class="b_algo"><h2><a href="https://example.com/">Kept</a></h2></li>',
    )
    results, _ = _extract(markup)

    assert [r.title for r in results] == ["Kept"]


def test_missing_snippet_is_filled_from_host() -> None:
    markup = _page('<li class="b_algo"><h2><a href="https://example.com/x">Title</a></h2></li>')
    results, _ = _extract(markup)

    assert results[0].snippet == "Result from example.com"


def test_block_text_snippet_drops_title_and_is_truncated() -> None:
    body = "x" * 300
    markup = _page(
        '<li class="b_algo"><h2><a href="https://example.com/long">Long Title</a></h2> '
        f"<span>{body}</span></li>",
    )
    results, _ = _extract(markup)

    snippet = results[0].snippet
    assert not snippet.startswith("Long Title")
    assert snippet == "x" * 200 + "..."


def test_answer_and_top_blocks_are_extracted() -> None:
    markup = (
        '<html><body><ol id="b_topw"><li class="b_ans"><h2><a href="https://top.example.com/">'
        "Top answer</a></h2></li></ol>"
        '<ol id="b_results"><li class="b_ans"><h2><a href="https://answer.example.com/">'
        "Answer</a></h2></li></ol></body></html>"
    )
    results, _ = _extract(markup)

    assert [r.title for r in results] == ["Answer", "Top answer"]


FALLBACK_PAGE = (
    '<html><body><div id="b_results">'
    '<a href="#top">Top of page</a>'
    '<a href="javascript:void(0)">Script link</a>'
    '<a href="/search?q=next&amp;first=11">Next page</a>'
    '<a href="https://www.bing.com/ck/a?u=a1">Tracked click</a>'
    '<div class="b_algo"><h2>Site A heading</h2>'
    '<a href="https://site-a.example.com/page?utm_medium=x">Site A</a>'
    '<div class="b_caption">Site A caption</div></div>'
    '<div class="b_algo"><h2>Site B heading</h2><a href="https://site-b.example.com/">B</a></div>'
    '<a href="https://site-c.example.com/">c</a>'
    '<a href="https://site-a.example.com/page">Site A again</a>'
    "</div></body></html>"
)


def test_falls_back_to_result_links_when_no_block_matches() -> None:
    results, recorder = _extract(FALLBACK_PAGE, 10)

    assert [(r.title, r.link, r.snippet) for r in results] == [
        ("Site A", "https://site-a.example.com/page", "Site A caption"),
        ("Site B heading", "https://site-b.example.com/", "Result from site-b.example.com"),
        ("Result 7", "https://site-c.example.com/", "Result from site-c.example.com"),
    ]
    assert set(recorder.prefixes) == {"result"}
    assert recorder.saved == results


def test_link_fallback_respects_requested_count() -> None:
    results, _ = _extract(FALLBACK_PAGE, 2)

    assert [r.link for r in results] == [
        "https://site-a.example.com/page",
        "https://site-b.example.com/",
    ]


def test_page_without_results_returns_empty_list() -> None:
    results, recorder = _extract("<html><body><p>Nothing here</p></body></html>")

    assert results == []
    assert recorder.saved == []


def test_extraction_is_deterministic() -> None:
    first, _ = _extract(STANDARD_PAGE)
    second, _ = _extract(STANDARD_PAGE)

    assert [(r.id, r.title, r.link, r.snippet) for r in first] == [
        (r.id, r.title, r.link, r.snippet) for r in second
    ]


def test_accepts_bytes_markup() -> None:
    results, _ = _extract(STANDARD_PAGE.encode("utf-8"))
    assert len(results) == 3


def test_non_text_markup_raises() -> None:
    with pytest.raises(MarkupParseError):
        _extract(None)


def test_layout_origin_is_used_for_relative_links() -> None:
    layout = BING_LAYOUT.with_origin("https://www.bing.com/")
    results, _ = _extract(STANDARD_PAGE, layout=layout)

    assert results[1].link == "https://www.bing.com/relative/b"


def test_custom_strategy_extractor() -> None:
    def card_extractor(block, layout, position) -> Candidate:
        return Candidate(
            title=block["data-title"],
            link=block["data-url"],
            snippet=f"card {position}",
        )

    layout = SerpLayout(
        name="cards",
        origin="https://search.example.com",
        site_domain="search.example.com",
        strategies=(BlockStrategy("card", "div.card", extractor=card_extractor),),
        title_probes=(TitleProbe("heading", anchor="h2 a"),),
    )
    markup = (
        '<div class="card" data-title="One" data-url="/one"></div>'
        '<div class="card" data-title="Two" data-url="https://two.example.com/"></div>'
    )
    results, _ = _extract(markup, layout=layout)

    assert [(r.title, r.link, r.snippet) for r in results] == [
        ("One", "https://search.example.com/one", "card 1"),
        ("Two", "https://two.example.com/", "card 2"),
    ]


def test_pagination_and_message_blocks_are_skipped() -> None:
    markup = _page(
        '<li class="b_algo b_pag"><h2><a href="https://example.com/page2">Next page</a></h2></li>',
        '<li class="b_algo b_msg"><h2><a href="https://example.com/hint">Did you mean</a></h2></li>',
        '<li class="b_algo"><h2><a href="https://example.com/x">Organic</a></h2></li>',
    )
    results, _ = _extract(markup)

    assert [(r.title, r.link) for r in results] == [("Organic", "https://example.com/x")]


def test_link_read_from_redirecturl_attribute() -> None:
    markup = _page(
        '<li class="b_algo"><a class="tilk" redirecturl="https://r.example.com/">'
        '<div class="tptt">Card</div></a></li>',
    )
    results, _ = _extract(markup)

    assert [(r.title, r.link) for r in results] == [("Card", "https://r.example.com/")]


def test_prominent_anchor_prefers_nested_title_and_data_h_link() -> None:
    markup = _page(
        '<li class="b_algo"><a target="_blank" data-h="https://d.example.com/x">'
        '<span class="icon">Site icon</span><strong>Strong</strong></a>'
        '<div class="b_caption"><p>Strong snippet</p></div></li>',
    )
    results, _ = _extract(markup)

    assert [(r.title, r.link, r.snippet) for r in results] == [
        ("Strong", "https://d.example.com/x", "Strong snippet")
    ]


def test_bare_heading_without_anchor() -> None:
    markup = _page(
        '<li class="b_algo"><h2>Bare heading</h2><div class="b_caption"><p>S</p></div></li>',
    )
    results, _ = _extract(markup)

    assert [(r.title, r.link, r.snippet) for r in results] == [("Bare heading", "", "S")]


def test_absolute_engine_click_link_is_dropped_from_block() -> None:
    markup = _page(
        '<li class="b_algo"><h2><a href="https://www.bing.com/ck/a?u=a1">Tracked</a></h2>'
        '<div class="b_caption"><p>Tracked snippet</p></div></li>',
        '<li class="b_algo"><h2><a href="https://cn.bing.com/search?q=more">Related</a></h2>'
        '<div class="b_caption"><p>Related searches</p></div></li>',
    )
    results, _ = _extract(markup)

    assert [(r.title, r.link) for r in results] == [("Tracked", ""), ("Related", "")]
