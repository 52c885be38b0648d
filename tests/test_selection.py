"""Tests for CSS selection and filtering."""

from htmltomd.conversion.selection import Selection, apply_filters, parse_document, select

PAGE = b"""<html><head><title>Post</title></head><body>
<nav class="navbar"><a href="/">Home</a></nav>
<div class="content">
  <h1>Title</h1>
  <p>Body text</p>
  <div class="post-actions"><button>Like</button></div>
  <div class="ad">Buy now</div>
  <div class="relates"><p class="ad">Related ad</p><p>Related post</p></div>
</div>
<footer class="footer">Copyright</footer>
</body></html>"""


class TestParseDocument:
    """Tests for parse_document."""

    def test_parses_bytes(self):
        """Test parsing raw bytes."""
        doc = parse_document(PAGE)
        assert doc.select_one("h1").get_text() == "Title"

    def test_uses_declared_encoding(self):
        """Test that the server-declared charset is honored."""
        html = "<html><body><p>Héllo Wörld</p></body></html>".encode("iso-8859-1")
        doc = parse_document(html, "iso-8859-1")
        assert "Héllo Wörld" in doc.get_text()

    def test_parses_text(self):
        """Test parsing already decoded text."""
        doc = parse_document("<p>plain</p>")
        assert doc.p.get_text() == "plain"


class TestSelect:
    """Tests for select."""

    def test_empty_selector_selects_whole_document(self):
        """Test that an empty selector keeps everything."""
        doc = parse_document(PAGE)
        selection = select(doc, "")

        assert selection.is_whole_document
        html = selection.html()
        assert "Copyright" in html
        assert "Body text" in html

    def test_selector_matches_elements(self):
        """Test selecting a region by class."""
        doc = parse_document(PAGE)
        selection = select(doc, ".content")

        assert len(selection) == 1
        html = selection.html()
        assert "Body text" in html
        assert "Copyright" not in html
        assert "Home" not in html

    def test_zero_matches_is_empty_selection(self):
        """Test that a selector matching nothing is not an error."""
        doc = parse_document(PAGE)
        selection = select(doc, ".does-not-exist")

        assert len(selection) == 0
        assert selection.html() == ""

    def test_first_match_inner_html(self):
        """Test that only the contents of the first match are serialized."""
        doc = parse_document(b"<ul><li>one</li><li>two</li></ul>")
        selection = select(doc, "li")

        assert len(selection) == 2
        assert selection.html() == "one"

    def test_selected_tag_itself_not_serialized(self):
        """Test that the matched element's own tag is left out."""
        doc = parse_document(b"<h1>T</h1><p>x</p>")

        assert select(doc, "h1").html() == "T"

    def test_nested_matches_use_outer(self):
        """Test that the outermost match comes first."""
        doc = parse_document(b'<div class="a"><div class="a">inner</div></div>')
        selection = select(doc, ".a")

        assert len(selection) == 2
        assert selection.html() == '<div class="a">inner</div>'

    def test_invalid_selector_matches_nothing(self):
        """Test that a malformed selector does not raise."""
        doc = parse_document(PAGE)
        selection = select(doc, "div[")

        assert len(selection) == 0

    def test_selection_never_larger_than_document(self):
        """Test selection size is bounded by the number of elements."""
        doc = parse_document(PAGE)
        total = len(doc.find_all(True))

        for selector in ["", "*", "div", "p", ".content *", "nav, footer"]:
            assert len(select(doc, selector)) <= total + 1


class TestApplyFilters:
    """Tests for apply_filters."""

    def test_removes_matching_descendants(self):
        """Test that filtered elements are removed with their subtree."""
        doc = parse_document(PAGE)
        selection = apply_filters(select(doc, ".content"), [".post-actions", ".relates"])

        html = selection.html()
        assert "Like" not in html
        assert "Related post" not in html
        assert "Body text" in html
        assert selection.removed == [(".post-actions", 1), (".relates", 1)]

    def test_returns_same_selection(self):
        """Test that filtering mutates and returns the given selection."""
        doc = parse_document(PAGE)
        selection = select(doc, ".content")

        assert apply_filters(selection, [".ad"]) is selection

    def test_filter_mutates_document(self):
        """Test that removal is visible on the underlying document."""
        doc = parse_document(PAGE)
        apply_filters(select(doc, ".content"), [".ad"])

        assert doc.select(".ad") == []

    def test_only_descendants_are_filtered(self):
        """Test that the selected element itself is never removed."""
        doc = parse_document(b'<div class="content ad"><p>keep</p><p class="ad">drop</p></div>')
        selection = apply_filters(select(doc, ".content"), [".ad"])

        html = selection.html()
        assert "keep" in html
        assert "drop" not in html

    def test_filters_whole_document(self):
        """Test filtering when no selector was given."""
        doc = parse_document(PAGE)
        selection = apply_filters(select(doc, ""), ["nav", ".footer"])

        html = selection.html()
        assert "Home" not in html
        assert "Copyright" not in html
        assert "Body text" in html

    def test_non_matching_filter_is_noop(self):
        """Test that a filter matching nothing changes nothing."""
        doc = parse_document(PAGE)
        selection = select(doc, ".content")
        before = selection.html()

        apply_filters(selection, [".nothing", "div["])

        assert selection.html() == before
        assert selection.removed == [(".nothing", 0), ("div[", 0)]

    def test_filter_is_idempotent(self):
        """Test that applying the same filter twice equals applying it once."""
        once = apply_filters(select(parse_document(PAGE), ".content"), [".ad"])
        twice = apply_filters(select(parse_document(PAGE), ".content"), [".ad", ".ad"])

        assert once.html() == twice.html()
        assert twice.removed[1] == (".ad", 0)

    def test_disjoint_filter_order_does_not_change_content(self):
        """Test that disjoint filters commute."""
        ab = apply_filters(select(parse_document(PAGE), ".content"), [".post-actions", ".relates"])
        ba = apply_filters(select(parse_document(PAGE), ".content"), [".relates", ".post-actions"])

        assert ab.html() == ba.html()

    def test_overlapping_filter_order_changes_only_counts(self):
        """Test that removing an ancestor first leaves nothing for the nested filter."""
        outer_first = apply_filters(select(parse_document(PAGE), ".content"), [".relates", ".ad"])
        inner_first = apply_filters(select(parse_document(PAGE), ".content"), [".ad", ".relates"])

        assert outer_first.html() == inner_first.html()
        assert outer_first.removed == [(".relates", 1), (".ad", 1)]
        assert inner_first.removed == [(".ad", 2), (".relates", 1)]

    def test_filtered_selected_node_is_skipped(self):
        """Test that a matched node removed by a filter is not serialized."""
        doc = parse_document(b'<div class="box"><p>outer</p><div class="box ad">inner</div></div>')
        selection = apply_filters(select(doc, ".box"), [".ad"])

        html = selection.html()
        assert "outer" in html
        assert "inner" not in html

    def test_selection_holds_document(self):
        """Test the selection keeps a reference to its document."""
        doc = parse_document(PAGE)
        selection = select(doc, "h1")

        assert isinstance(selection, Selection)
        assert selection.document is doc
        assert selection.selector == "h1"
