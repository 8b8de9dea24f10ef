"""Tests for HTML helpers."""

from extractor.pages.dom import (
    discover_frame_urls,
    html_fragment_to_text,
    parse_html,
    remove_noise,
    select_all,
    select_first,
    validate_selectors,
    visible_text,
)


class TestVisibleText:
    """Rendered-text approximation."""

    def test_blocks_become_lines(self):
        soup = parse_html("<div><h1>Title</h1><p>First   paragraph</p><p>Second<br>line</p></div>")

        assert visible_text(soup) == "Title\nFirst paragraph\nSecond\nline"

    def test_inline_elements_stay_on_one_line(self):
        soup = parse_html("<p>Salary: <strong>$120k</strong> <em>plus equity</em></p>")

        assert visible_text(soup) == "Salary: $120k plus equity"

    def test_hidden_content_skipped(self):
        """Test that scripts, styles and hidden elements contribute no text."""
        soup = parse_html(
            "<body><script>var x = 1;</script><style>p{color:red}</style>"
            "<p hidden>Hidden attr</p><p style='display: none'>Hidden style</p>"
            "<template><p>Template</p></template><p>Shown</p><!-- comment --></body>"
        )

        assert visible_text(soup) == "Shown"

    def test_non_breaking_spaces_collapsed(self):
        soup = parse_html("<p>Remote&nbsp;&nbsp; (US)</p>")

        assert visible_text(soup) == "Remote (US)"

    def test_none_yields_empty(self):
        assert visible_text(None) == ""

    def test_hidden_root_yields_empty(self):
        soup = parse_html("<div hidden><p>Secret</p></div>")

        assert visible_text(soup.div) == ""


class TestFragments:
    """Entity-encoded HTML fragments."""

    def test_escaped_fragment(self):
        """Test that API-style escaped HTML is decoded before parsing."""
        text = html_fragment_to_text("&lt;p&gt;Build &amp;amp; ship&lt;/p&gt;&lt;ul&gt;&lt;li&gt;Go&lt;/li&gt;&lt;/ul&gt;")

        assert text == "Build & ship\nGo"

    def test_empty_fragment(self):
        assert html_fragment_to_text("") == ""


class TestRemoveNoise:
    """Noise stripping works on a copy."""

    def test_original_untouched(self):
        soup = parse_html("<div><nav>Menu</nav><p>Job</p><footer>Footer</footer></div>")

        cleaned = remove_noise(soup.div, ["nav", "footer"])

        assert visible_text(cleaned) == "Job"
        assert visible_text(soup) == "Menu\nJob\nFooter"

    def test_nested_noise_matches(self):
        """Test that a match nested inside another match is handled."""
        soup = parse_html("<div><aside class='cookie'><div class='cookie-inner'>C</div></aside><p>Job</p></div>")

        cleaned = remove_noise(soup.div, ["[class*='cookie']"])

        assert visible_text(cleaned) == "Job"


class TestSelection:
    """Selector helpers."""

    def test_select_first_uses_selector_order(self):
        soup = parse_html("<h1>Heading</h1><div class='title'>Title div</div>")

        assert select_first(soup, [".title", "h1"]).get_text() == "Title div"
        assert select_first(soup, [".missing"]) is None

    def test_select_all_deduplicates(self):
        soup = parse_html("<div class='description job-description'>D</div>")

        matches = select_all(soup, [".description", ".job-description", "div"])

        assert len(matches) == 1

    def test_validate_selectors(self):
        errors = validate_selectors(["main", "[role='main']", "div[", "p:unknown-pseudo"])

        assert len(errors) == 2
        assert errors[0].startswith("'div['")


class TestDiscoverFrameUrls:
    """Frame discovery in a parent document."""

    def test_frames_resolved_and_deduplicated(self):
        markup = (
            "<iframe src='/embed/job'></iframe>"
            "<iframe src='https://boards.greenhouse.io/embed/job_app?for=acme'></iframe>"
            "<iframe src='https://boards.greenhouse.io/embed/job_app?for=acme'></iframe>"
            "<iframe src='javascript:void(0)'></iframe>"
            "<iframe></iframe>"
            "<frame src='frame.html'>"
        )

        urls = discover_frame_urls(markup, "https://www.acme.com/careers/")

        assert urls == [
            "https://www.acme.com/embed/job",
            "https://boards.greenhouse.io/embed/job_app?for=acme",
            "https://www.acme.com/careers/frame.html",
        ]

    def test_no_frames(self):
        assert discover_frame_urls("<p>No frames</p>", "https://example.com") == []
