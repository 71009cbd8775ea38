"""HTML element selection tests.

Test classes: TestElementSelection, TestListItems, TestImpliedEndTags, TestScriptBlocks
"""

from __future__ import annotations

from jobkeywords.extractors import markup

_PAGE = """
<html><body>
  <h2 data-automation-id="jobPostingHeader">Senior&nbsp;Platform   Engineer</h2>
  <div data-automation-id="jobPostingDescription">
    <p>About the role</p>
    <ul>
      <li>Build <b>APIs</b> in Go</li>
      <li>Operate Kubernetes<br> clusters</li>
      <li>   </li>
      <li>Mentor engineers
        <ul><li>nested detail</li></ul>
      </li>
    </ul>
  </div>
  <ul class="ml-5 list-disc extra"><li>Tailwind bullet</li></ul>
</body></html>
"""

_DESCRIPTION = 'div[data-automation-id="jobPostingDescription"]'


class TestElementSelection:
    """REQUIREMENT: Elements are matched by CSS selector; text is cleaned.

    WHO: Site extractors locating titles and descriptions
    WHAT: Attribute selectors compare exactly; class selectors match
          when every named class is present; text of nested inline
          elements is included; whitespace and non-breaking spaces collapse;
          an absent element yields None
    WHY: Rendered pages wrap text in arbitrary inline markup and spacing
    """

    def test_first_text_matches_on_attribute(self) -> None:
        soup = markup.parse(_PAGE)
        title = markup.first_text(soup, 'h2[data-automation-id="jobPostingHeader"]')
        assert title == "Senior Platform Engineer"

    def test_first_text_returns_none_when_absent(self) -> None:
        soup = markup.parse(_PAGE)
        assert markup.first_text(soup, 'h2[data-automation-id="missing"]') is None

    def test_class_matches_by_token_subset(self) -> None:
        soup = markup.parse(_PAGE)
        assert markup.list_items(soup, "ul.list-disc.ml-5") == ["Tailwind bullet"]

    def test_class_with_missing_token_does_not_match(self) -> None:
        soup = markup.parse(_PAGE)
        assert markup.list_items(soup, "ul.ml-5.list-decimal") is None

    def test_nested_inline_text_is_kept(self) -> None:
        soup = markup.parse('<div class="x">outer <div>inner</div> tail</div><div>after</div>')
        assert markup.first_text(soup, "div.x") == "outer inner tail"


class TestListItems:
    """REQUIREMENT: List items inside a matched container become scoring fragments.

    WHO: Extractors turning a description into fragments for the scorer
    WHAT: Each outermost ``<li>`` yields one cleaned fragment including its
          nested text; empty items are dropped; no container → None;
          a container without items → empty list; nested matching
          containers do not repeat their items
    WHY: The scorer works per requirement bullet; None lets an extractor
         report "not my page" instead of "no keywords"
    """

    def test_items_are_cleaned_and_nested_text_is_kept(self) -> None:
        items = markup.list_items(markup.parse(_PAGE), _DESCRIPTION)
        assert items == [
            "Build APIs in Go",
            "Operate Kubernetes clusters",
            "Mentor engineers nested detail",
        ]

    def test_container_without_items_is_empty_list(self) -> None:
        soup = markup.parse("<div id='d'><p>prose only</p></div>")
        assert markup.list_items(soup, "div#d") == []

    def test_missing_container_is_none(self) -> None:
        assert markup.list_items(markup.parse("<p>nothing</p>"), "div#d") is None

    def test_nested_containers_count_items_once(self) -> None:
        soup = markup.parse("<div><div><ul><li>Write Go</li></ul></div></div>")
        assert markup.list_items(soup, "div") == ["Write Go"]


class TestImpliedEndTags:
    """REQUIREMENT: List items without an explicit ``</li>`` are still separate.

    WHO: Extractors reading site HTML that omits optional end tags
    WHAT: ``<li>a<li>b`` yields two fragments, both inside a matched
          container and in a bare HTML fragment such as a JSON-LD
          description
    WHY: Gluing bullets together hands the scorer one meaningless phrase
         instead of several requirements
    """

    def test_unclosed_items_in_container_are_split(self) -> None:
        soup = markup.parse('<ul class="ml-5 list-disc"><li>Build APIs<li>Ship features</ul>')
        assert markup.list_items(soup, "ul.ml-5.list-disc") == ["Build APIs", "Ship features"]

    def test_unclosed_items_in_fragment_are_split(self) -> None:
        soup = markup.parse("<ul><li>Python<li>Go<li>Rust</ul>")
        assert markup.items_of(soup) == ["Python", "Go", "Rust"]


class TestScriptBlocks:
    """REQUIREMENT: Script blocks of a given type are returned verbatim.

    WHO: The JSON-LD extractor
    WHAT: Every ``<script type=...>`` of the requested type is returned in
          document order; other script types are ignored
    WHY: Structured data must reach the JSON decoder unaltered
    """

    def test_returns_matching_blocks_only(self) -> None:
        html = (
            '<script type="application/ld+json">{"a": 1}</script>'
            "<script>var x = 1;</script>"
            '<script type="application/ld+json">{"b": "<li>"}</script>'
        )
        blocks = markup.script_texts(markup.parse(html), "application/ld+json")
        assert blocks == ['{"a": 1}', '{"b": "<li>"}']
