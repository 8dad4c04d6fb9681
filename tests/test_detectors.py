"""Tests for the passive behaviour detectors, driven through a headless page."""

from mmmetric.core.headless import HeadlessPage
from mmmetric.core.platform import Anchor, Form, PerformanceEntry, ScrollMetrics
from mmmetric.detectors.links import download_extension, download_filename
from mmmetric.detectors.scroll import reached_milestones, scroll_percent


def _percents(transport):
    return [e["properties"]["percent"] for e in transport.named("scroll_depth")]


class TestScrollDepth:
    """Test scroll milestone reporting."""

    def test_short_page_reports_100_once(self, transport, start_agent):
        page = HeadlessPage("https://example.com/", scroll_height=800, viewport_height=800)
        start_agent(page)
        page.advance(1_000)
        page.scroll_to(0)
        page.advance(1_000)
        assert _percents(transport) == [100]

    def test_incremental_scroll(self, transport, start_agent):
        page = HeadlessPage("https://example.com/post", scroll_height=10_000, viewport_height=1_000)
        start_agent(page)
        page.advance(1_000)  # deferred check at 10%
        assert _percents(transport) == []

        page.scroll_to(1_600)  # 26%
        page.advance(200)
        page.scroll_to(5_000)  # 60%
        page.advance(200)
        page.scroll_to(8_500)  # 95%
        page.advance(200)
        page.scroll_to(1_000)  # back up
        page.advance(200)

        assert _percents(transport) == [25, 50, 75, 90]
        for event in transport.named("scroll_depth"):
            assert event["properties"]["url"] == "/post"

    def test_scroll_is_debounced(self, transport, start_agent):
        page = HeadlessPage("https://example.com/", scroll_height=10_000, viewport_height=1_000)
        start_agent(page)
        page.advance(1_000)
        page.scroll_to(1_600)
        page.advance(100)
        page.scroll_to(9_000)  # restarts the debounce timer
        page.advance(199)
        assert _percents(transport) == []
        page.advance(1)
        assert _percents(transport) == [25, 50, 75, 90, 100]

    def test_percent_capped(self):
        metrics = ScrollMetrics(scroll_height=1_000, scroll_top=900, viewport_height=800)
        assert scroll_percent(metrics) == 100

    def test_reached_skips_sent(self):
        metrics = ScrollMetrics(scroll_height=1_000, scroll_top=0, viewport_height=800)
        assert reached_milestones(metrics, {25, 50}) == [75]


class TestNavigation:
    """Test SPA navigation and engagement."""

    def test_push_state_emits_engagement_then_pageview(self, page, transport, start_agent):
        start_agent(page)
        page.advance(6_000)
        transport.clear()

        page.navigate("https://example.com/pricing")

        names = [e["event_name"] for e in transport.events]
        assert names == ["engagement", "pageview"]
        engagement, pageview = transport.events
        assert engagement["properties"]["url"] == "/home"
        assert 5 <= engagement["properties"]["duration_seconds"] < 86_400
        assert engagement["properties"]["duration_seconds"] == 6
        assert pageview["url"] == "/pricing"

    def test_same_path_is_ignored(self, page, transport, start_agent):
        start_agent(page)
        page.advance(10_000)
        transport.clear()
        page.navigate("https://example.com/home?tab=2")
        assert transport.events == []

    def test_short_dwell_sends_only_pageview(self, page, transport, start_agent):
        start_agent(page)
        page.advance(3_000)
        transport.clear()
        page.navigate("https://example.com/pricing")
        assert [e["event_name"] for e in transport.events] == ["pageview"]

    def test_popstate(self, page, transport, start_agent):
        start_agent(page)
        page.advance(8_000)
        page.navigate("https://example.com/a", push=False)
        assert transport.named("pageview")[-1]["url"] == "/a"
        assert transport.named("engagement")[0]["properties"]["duration_seconds"] == 8

    def test_timer_resets_on_navigation(self, page, transport, start_agent):
        start_agent(page)
        page.advance(20_000)
        page.navigate("https://example.com/a")
        page.advance(7_000)
        page.navigate("https://example.com/b")
        durations = [e["properties"]["duration_seconds"] for e in transport.named("engagement")]
        assert durations == [20, 7]

    def test_hide_flushes_and_show_restarts(self, page, transport, start_agent):
        start_agent(page)
        page.advance(10_000)
        page.hide()
        assert transport.named("engagement")[0]["properties"]["duration_seconds"] == 10

        page.advance(60_000)
        page.show()
        page.advance(3_000)
        page.unload()
        assert len(transport.named("engagement")) == 1

    def test_unload_flushes(self, page, transport, start_agent):
        start_agent(page)
        page.advance(12_000)
        page.unload()
        assert transport.named("engagement")[0]["properties"]["duration_seconds"] == 12

    def test_heartbeat_bounds_continuous_view(self, page, transport, start_agent):
        start_agent(page)
        page.advance(60_000)
        durations = [e["properties"]["duration_seconds"] for e in transport.named("engagement")]
        assert durations == [60]

    def test_no_heartbeat_while_hidden(self, page, transport, start_agent):
        start_agent(page)
        page.hide()
        page.advance(5 * 60_000)
        assert transport.named("engagement") == []


class TestLinks:
    """Test outbound link and download tracking."""

    def test_outbound_link(self, page, transport, start_agent):
        start_agent(page)
        page.click(Anchor(href="https://other.com/page", text="x" * 150))
        outbound = transport.named("outbound")
        assert len(outbound) == 1
        assert outbound[0]["properties"]["href"] == "https://other.com/page"
        assert len(outbound[0]["properties"]["text"]) == 100

    def test_internal_link_ignored(self, page, transport, start_agent):
        start_agent(page)
        page.click(Anchor(href="/about", text="About"))
        page.click(Anchor(href="https://example.com/contact"))
        assert transport.named("outbound") == []

    def test_click_without_anchor(self, page, transport, start_agent):
        start_agent(page)
        page.click(None)
        page.click(Anchor(href=""))
        assert transport.named("outbound") == []
        assert transport.named("file_download") == []

    def test_every_click_counted(self, page, transport, start_agent):
        start_agent(page)
        link = Anchor(href="https://other.com/")
        page.click(link)
        page.click(link)
        assert len(transport.named("outbound")) == 2

    def test_cross_domain_link_gets_session(self, page, start_agent):
        agent = start_agent(page, cross_domain="shop.example.net")
        link = Anchor(href="https://shop.example.net/cart?item=1")
        page.click(link)
        assert link.href == f"https://shop.example.net/cart?item=1&_mm_sid={agent.session.session_id}"

        plain = Anchor(href="https://shop.example.net/")
        page.click(plain)
        assert plain.href == f"https://shop.example.net/?_mm_sid={agent.session.session_id}"

    def test_other_outbound_not_decorated(self, page, start_agent):
        start_agent(page, cross_domain="shop.example.net")
        link = Anchor(href="https://other.com/")
        page.click(link)
        assert link.href == "https://other.com/"

    def test_protocol_relative_link_is_resolved(self, page, transport, start_agent):
        agent = start_agent(page, cross_domain="shop.example.net")
        page.click(Anchor(href="//cdn.other.com/x"))
        assert transport.named("outbound")[0]["properties"]["href"] == "https://cdn.other.com/x"

        link = Anchor(href="//shop.example.net/cart")
        page.click(link)
        assert transport.named("outbound")[1]["properties"]["href"] == "https://shop.example.net/cart"
        assert link.href == f"https://shop.example.net/cart?_mm_sid={agent.session.session_id}"

    def test_relative_download_is_resolved(self, transport, start_agent):
        page = HeadlessPage("https://example.com/docs/guide")
        start_agent(page)
        page.click(Anchor(href="files/a.pdf"))
        download = transport.named("file_download")[0]["properties"]
        assert download["href"] == "https://example.com/docs/files/a.pdf"
        assert download["filename"] == "a.pdf"
        assert transport.named("outbound") == []

    def test_pdf_download(self, page, transport, start_agent):
        start_agent(page)
        page.click(Anchor(href="https://example.com/files/Report.PDF?v=2"))
        downloads = transport.named("file_download")
        assert len(downloads) == 1
        assert downloads[0]["properties"] == {
            "href": "https://example.com/files/Report.PDF?v=2",
            "filename": "Report.PDF",
            "extension": "pdf",
            "screen": "1920x1080",
        }
        assert transport.named("outbound") == []

    def test_external_download_counts_twice(self, page, transport, start_agent):
        start_agent(page)
        page.click(Anchor(href="https://cdn.other.com/app.dmg"))
        assert len(transport.named("outbound")) == 1
        assert transport.named("file_download")[0]["properties"]["extension"] == "dmg"

    def test_extension_helpers(self):
        assert download_extension("/a/b.zip") == "zip"
        assert download_extension("/a/b.html") is None
        assert download_extension("/a/b.html?f=x.pdf") is None
        assert download_filename("https://x.com/a/b.csv?dl=1") == "b.csv"


class TestForms:
    """Test form start and submit tracking."""

    def test_start_once_until_submit(self, page, transport, start_agent):
        start_agent(page)
        form = Form(id="signup")
        page.focus("INPUT", form)
        page.focus("TEXTAREA", form)
        page.focus("SELECT", form)
        assert len(transport.named("form_start")) == 1

        page.submit(form)
        assert transport.named("form_submit")[0]["properties"]["form_id"] == "signup"

        page.focus("INPUT", form)
        assert len(transport.named("form_start")) == 2

    def test_form_id_fallbacks(self, page, transport, start_agent):
        start_agent(page)
        page.focus("input", Form(name="newsletter"))
        page.focus("input", Form())
        ids = [e["properties"]["form_id"] for e in transport.named("form_start")]
        assert ids == ["newsletter", "unknown"]

    def test_forms_tracked_separately(self, page, transport, start_agent):
        start_agent(page)
        page.focus("INPUT", Form(id="a"))
        page.focus("INPUT", Form(id="a"))  # a different element with the same id
        assert len(transport.named("form_start")) == 2

    def test_ignores_non_fields(self, page, transport, start_agent):
        start_agent(page)
        page.focus("BUTTON", Form(id="a"))
        page.focus("INPUT", None)
        assert transport.named("form_start") == []


class TestWebVitals:
    """Test Core Web Vitals capture."""

    def _emit_sample(self, page):
        page.emit_performance(
            PerformanceEntry("largest-contentful-paint", start_time=1200.0),
            PerformanceEntry("largest-contentful-paint", start_time=1800.4),
            PerformanceEntry("layout-shift", value=0.05),
            PerformanceEntry("layout-shift", value=0.3, had_recent_input=True),
            PerformanceEntry("event", duration=250.0, interaction_id=7),
            PerformanceEntry("event", duration=400.0, interaction_id=0),
        )

    def _vitals(self, transport):
        return {
            e["properties"]["metric"]: (e["properties"]["value"], e["properties"]["rating"])
            for e in transport.named("web_vitals")
        }

    def test_reported_on_hide(self, page, transport, start_agent):
        start_agent(page)
        self._emit_sample(page)
        page.hide()
        assert self._vitals(transport) == {
            "LCP": (1800, "good"),
            "CLS": (0.05, "good"),
            "INP": (250, "poor"),
        }

    def test_once_per_cycle(self, page, transport, start_agent):
        start_agent(page)
        self._emit_sample(page)
        page.hide()
        page.unload()
        assert len(transport.named("web_vitals")) == 3

        page.show()
        page.hide()
        assert len(transport.named("web_vitals")) == 6

    def test_inp_omitted_without_interactions(self, page, transport, start_agent):
        start_agent(page)
        page.emit_performance(PerformanceEntry("largest-contentful-paint", start_time=3000.0))
        page.unload()
        assert self._vitals(transport) == {"LCP": (3000, "poor"), "CLS": (0.0, "good")}

    def test_only_observed_metrics_reported(self, transport, start_agent):
        page = HeadlessPage("https://example.com/", supports_performance={"largest-contentful-paint"})
        start_agent(page)
        page.emit_performance(PerformanceEntry("largest-contentful-paint", start_time=900.0))
        page.hide()
        assert self._vitals(transport) == {"LCP": (900, "good")}

    def test_unsupported_platform(self, transport, start_agent):
        page = HeadlessPage("https://example.com/", supports_performance=False)
        start_agent(page)
        page.hide()
        assert transport.named("web_vitals") == []


class TestNotFound:
    """Test 404 detection."""

    def test_404_title(self, transport, start_agent):
        page = HeadlessPage(
            "https://example.com/missing?x=1",
            title="404 - Page Not Found",
            referrer="https://google.com/",
        )
        start_agent(page)
        assert transport.named("404") == []
        page.advance(1_000)
        events = transport.named("404")
        assert len(events) == 1
        assert events[0]["properties"]["url"] == "https://example.com/missing?x=1"
        assert events[0]["properties"]["referrer"] == "https://google.com/"

    def test_checked_once(self, page, transport, start_agent):
        start_agent(page)
        page.advance(1_000)
        page.title = "Error 404"
        page.advance(10_000)
        assert transport.named("404") == []
