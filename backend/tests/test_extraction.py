"""Tests for the selector cascade shared by both extractors."""

from gameprice.scrapers.base import SelectorSet, SiteProfile
from gameprice.scrapers.extraction import extract_items
from gameprice.scrapers.registry import SiteProfileRegistry
from gameprice.scrapers.utils.normalizer import Currency, Region


URL = "https://www.foxepin.com/pubg-mobile"


def _profile(**selectors) -> SiteProfile:
    defaults = dict(container=(".card",), title=(".name",), price=(".price",))
    defaults.update(selectors)
    return SiteProfile(
        domain="example.com",
        display_name="Example",
        selectors=SelectorSet(**defaults),
    )


class TestExtractItems:
    """Tests for extract_items."""

    def test_three_cards_two_valid(self, product_page_html):
        """A card with an empty price is skipped; the others are parsed."""
        profile = SiteProfileRegistry().resolve("foxepin.com")

        items = extract_items(product_page_html, profile, URL)

        assert len(items) == 2
        first, second = items
        assert first.title == "PUBG Mobile 60 UC"
        assert first.raw_price_text == "₺29,90"
        assert first.currency == Currency.TRY
        assert first.game_category == "pubg"
        assert first.site_domain == "foxepin.com"
        assert first.source_url == URL
        assert second.title == "Valorant 475 VP"
        assert second.original_price_text == "179,90 TL"

    def test_first_matching_container_selector_wins(self):
        html = """
        <div class="card"><span class="name">Steam 50 TL Kod</span><span class="price">50 TL</span></div>
        <div class="tile"><span class="name">Other Product</span><span class="price">10 TL</span></div>
        """
        items = extract_items(html, _profile(container=(".missing", ".card", ".tile")), URL)
        assert [i.title for i in items] == ["Steam 50 TL Kod"]

    def test_title_selectors_tried_in_order(self):
        html = """
        <div class="card"><h3></h3><h4>Roblox 400 Robux</h4><span class="price">99,90 TL</span></div>
        """
        items = extract_items(html, _profile(title=("h3", "h4")), URL)
        assert items[0].title == "Roblox 400 Robux"
        assert items[0].game_category == "roblox"

    def test_title_attribute_fallback(self):
        html = '<div class="card" data-title="Razer Gold 20 TL"><span class="price">$4.99</span></div>'
        items = extract_items(html, _profile(), URL)
        assert items[0].title == "Razer Gold 20 TL"
        assert items[0].currency == Currency.USD

    def test_inline_price_fallback(self):
        """Without selector hits the price and title come from the card text."""
        html = '<div class="card"><p>Valorant EU 475 VP 149,90 TL</p></div>'
        items = extract_items(html, _profile(), URL)
        assert len(items) == 1
        assert items[0].raw_price_text == "149,90 TL"
        assert items[0].title == "Valorant EU 475 VP"
        assert items[0].region == Region.EU

    def test_short_titles_are_skipped(self):
        html = '<div class="card"><span class="name">UC</span><span class="price">10 TL</span></div>'
        assert extract_items(html, _profile(), URL) == []

    def test_invalid_prices_are_skipped(self):
        html = """
        <div class="card"><span class="name">Free Item</span><span class="price">0 TL</span></div>
        <div class="card"><span class="name">Huge Item</span><span class="price">2000000 TL</span></div>
        """
        assert extract_items(html, _profile(), URL) == []

    def test_invalid_selector_is_ignored(self):
        html = '<div class="card"><span class="name">PUBG 325 UC</span><span class="price">₺149,90</span></div>'
        items = extract_items(html, _profile(container=("div[", ".card")), URL)
        assert len(items) == 1

    def test_limit_caps_inspected_containers(self):
        card = '<div class="card"><span class="name">PUBG 60 UC</span><span class="price">₺29,90</span></div>'
        items = extract_items(card * 60, _profile(), URL)
        assert len(items) == 50
        assert len(extract_items(card * 5, _profile(), URL, limit=3)) == 3

    def test_empty_html(self):
        assert extract_items("", _profile(), URL) == []
