"""Result page layouts: ordered block strategies and field probes per engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bs4 import Tag

    from serpbot.search.parser import Candidate

BlockExtractor = Callable[["Tag", "SerpLayout", int], "Candidate"]


@dataclass(frozen=True, slots=True)
class BlockStrategy:
    """
    Container pattern wrapping one result in one template variant.

    Strategies are tried in list order; a custom extractor replaces the
    layout's default title/link/snippet resolution for that variant.
    """

    name: str
    selector: str
    extractor: BlockExtractor | None = None


@dataclass(frozen=True, slots=True)
class TitleProbe:
    """One way of finding a result's title text and link inside a block."""

    name: str
    anchor: str | None = None
    title: str | None = None
    scope: str | None = None
    nested_title: str | None = None


@dataclass(frozen=True, slots=True)
class SerpLayout:
    name: str
    origin: str
    site_domain: str
    strategies: tuple[BlockStrategy, ...]
    title_probes: tuple[TitleProbe, ...]
    link_attrs: tuple[str, ...] = ("href",)
    ad_selector: str = ""
    skip_classes: tuple[str, ...] = ()
    caption_selector: str = ""
    caption_text_selector: str = "p"
    summary_selector: str = ""
    heading_selector: str = "h2, h3"
    snippet_max_chars: int = 200
    fallback_anchor_selector: str = "a"
    fallback_container_selector: str = "li"
    fallback_heading_selector: str = "h2"
    fallback_snippet_selector: str = ""
    fallback_min_title_chars: int = 3
    fallback_title_max_chars: int = 200
    fallback_snippet_max_chars: int = 300

    def with_origin(self, origin: str, site_domain: str | None = None) -> "SerpLayout":
        return replace(
            self,
            origin=origin.rstrip("/"),
            site_domain=site_domain if site_domain is not None else self.site_domain,
        )


BING_LAYOUT = SerpLayout(
    name="bing",
    origin="https://cn.bing.com",
    site_domain="bing.com",
    strategies=(
        BlockStrategy("algo", "#b_results > li.b_algo"),
        BlockStrategy("answer", "#b_results > li.b_ans"),
        BlockStrategy("generic", "#b_results > li:not(.b_ad):not(.b_pag):not(.b_msg)"),
        BlockStrategy("top_algo", "#b_topw > li.b_algo"),
        BlockStrategy("top_answer", "#b_topw > li.b_ans"),
    ),
    title_probes=(
        TitleProbe("heading_anchor", anchor="h2 a"),
        TitleProbe("compact_card", scope=".b_tpcn", title=".tptt", anchor="a.tilk"),
        TitleProbe(
            "prominent_anchor",
            anchor='.b_title a, a.tilk, h2 a, a[target="_blank"]',
            nested_title=".tptt, strong",
        ),
        TitleProbe("bare_heading", title="h2", anchor="h2 a"),
    ),
    link_attrs=("href", "redirecturl", "data-h"),
    ad_selector=".b_ad",
    skip_classes=("b_pag", "b_msg"),
    caption_selector=".b_caption",
    caption_text_selector="p",
    summary_selector=".b_snippet, .b_lineclamp2, .b_lineclamp3",
    heading_selector="h2, h3, .b_title, .tptt",
    fallback_anchor_selector="#b_results a, #b_topw a, .b_algo a, .b_ans a",
    fallback_container_selector="li, .b_algo, .b_ans",
    fallback_heading_selector="h2, .tptt, .b_title",
    fallback_snippet_selector=".b_caption, .b_snippet, .b_lineclamp2",
)
