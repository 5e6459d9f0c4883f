"""Static selector profiles for the supported e-pin shops.

Selectors are listed in priority order; the first one that matches wins.
"""

from typing import Dict, FrozenSet, Iterable, Optional

from gameprice.scrapers.base import SelectorSet, SiteProfile


# Cloudflare-protected shops, fetched through FlareSolverr
BYPASS_REQUIRED_DOMAINS: FrozenSet[str] = frozenset({
    "oyuneks.com",
    "liderepin.com",
})

# Shops rendered in the headless browser
RENDERING_DOMAINS: FrozenSet[str] = frozenset({
    "epindigital.com", "turkpin.com", "oyunone.com", "playsultan.com",
    "epinsultan.com", "foxepin.com", "perdigital.com", "kopazar.com",
    "vatangame.com", "mtcgame.com", "bursagb.com", "itemsatis.com",
    "dijipin.com", "oyunfor.com", "inovapin.com", "bynogame.com",
    "gamesatis.com", "hesap.com.tr", "s2gepin.com", "hi2games.com",
})

# Needs CSS/images and a lazy-load scroll to render its product grid
FULL_ASSET_DOMAINS: FrozenSet[str] = frozenset({"vatangame.com"})

_OLD_PRICE = (".old-price",)
_PRODUCT_NAME = ("h3.product-name.d-block", "h3.product-name", ".title")


def _profile(
    domain: str,
    name: str,
    container: Iterable[str],
    title: Iterable[str],
    price: Iterable[str],
    original_price: Iterable[str] = _OLD_PRICE,
    wait_for: Optional[str] = None,
    delay: int = 1000,
    retries: int = 2,
) -> SiteProfile:
    return SiteProfile(
        domain=domain,
        display_name=name,
        selectors=SelectorSet(
            container=tuple(container),
            title=tuple(title),
            price=tuple(price),
            original_price=tuple(original_price),
        ),
        wait_condition=wait_for,
        inter_request_delay_ms=delay,
        max_retries=retries,
        requires_rendering=True,
    )


_PROFILES = [
    _profile(
        "epindigital.com", "EpinDigital",
        container=["div.product-item"],
        title=["h3.product-name.d-block"],
        price=["div.product-price", "div.sales-price.fw-600.fs-18"],
        wait_for="h3.product-name",
    ),
    _profile(
        "turkpin.com", "TurkPin",
        container=["tr"],
        title=["h5", "div.product__description", "div.short_desc"],
        price=["td.bold"],
        wait_for="h5",
    ),
    _profile(
        "oyunone.com", "OyunOne",
        container=["div.item"],
        title=["div.text1"],
        price=["div.price.notranslate", "div.new_price.ng-binding"],
        wait_for="div.text1",
    ),
    _profile(
        "playsultan.com", "PlaySultan",
        container=["a div.product_item", "div.product_item"],
        title=["h5"],
        price=["span.fiyat"],
        wait_for="div.product_item",
    ),
    _profile(
        "epinsultan.com", "EpinSultan",
        container=["a div.product_item", "div.product_item"],
        title=["h5"],
        price=["span.fiyat"],
        wait_for="div.product_item",
    ),
    _profile(
        "foxepin.com", "FoxEpin",
        container=[".product-item", ".product-card"],
        title=["h3.product-name.d-block"],
        price=["div.product-price"],
        wait_for="h3.product-name",
    ),
    _profile(
        "perdigital.com", "PerDigital",
        container=["tr", ".product-row", ".product"],
        title=["td.text-center", ".product-name", ".title"],
        price=["span.text-center.semi-bold", ".price", ".fiyat"],
        wait_for="tr",
        delay=1500,
        retries=3,
    ),
    _profile(
        "kopazar.com", "Kopazar",
        container=["div.col-12 div.card div.list-items"],
        title=["a strong"],
        price=["div.d-flex.align-items-center.justify-content-end strong"],
        wait_for="div.card",
        delay=1500,
    ),
    _profile(
        "vatangame.com", "VatanGame",
        container=[
            ".card", "div.card", '[class*="card"]', "div.row", ".row",
            '[class*="row"]', "div.col", ".product", ".item",
        ],
        title=[
            "p", "span", "div", "h1", "h2", "h3", "h4", "h5", "a", "strong",
            '[class*="font-bold"]', '[class*="title"]',
        ],
        price=[
            "p", "span", "div", "strong", '[class*="font-bold"]',
            '[class*="price"]', '[class*="fiyat"]', '[style*="font-size"]',
        ],
        original_price=['[style*="line-through"]', ".old-price", '[class*="old"]'],
        wait_for="body",
        delay=5000,
        retries=5,
    ),
    _profile(
        "mtcgame.com", "MTCGame",
        container=[r"a.border-2.border-amber-600\/10"],
        title=["h3.text-white.font-medium.text-sm.line-clamp-2"],
        price=[r"div.text-right.bg-\[\#7CFF6B33\] p.text-sm.font-medium.text-white"],
        wait_for=r"a.border-2.border-amber-600\/10",
    ),
    _profile(
        "bursagb.com", "BursaGB",
        container=[".product-item", ".product-card", "tr", ".product"],
        title=_PRODUCT_NAME,
        price=["div.product-price", ".price", ".fiyat"],
        wait_for=".product-item",
        delay=1500,
        retries=3,
    ),
    _profile(
        "liderepin.com", "LiderEpin",
        container=[".product-item", ".product", "tr"],
        title=_PRODUCT_NAME,
        price=["div.product-price", ".price", ".fiyat"],
        wait_for=".product-item",
        delay=1500,
        retries=3,
    ),
    _profile(
        "oyuneks.com", "OyunEks",
        container=["button.productListHorizontal.detailProductButton", ".productListHorizontal"],
        title=["div.productListHorizontalDetailTitle", ".productListHorizontalDetailTitle"],
        price=["div.productListHorizontalDetailPrice", ".productListHorizontalDetailPrice"],
        wait_for=".productListHorizontal",
        delay=3000,
        retries=3,
    ),
    _profile(
        "dijipin.com", "DijiPin",
        container=[".product-item", ".product", "tr"],
        title=_PRODUCT_NAME,
        price=["div.sales-price.fw-600.fs-18", ".sales-price", ".price", ".fiyat"],
        wait_for=".product-item",
        delay=1500,
        retries=3,
    ),
    _profile(
        "itemsatis.com", "ItemSatis",
        container=["div.relative.border.rounded-lg"],
        title=[r"h3.text-base.font-medium.\!text-white"],
        price=[r"div.text-2xl.font-medium.text-\[\#ffd679\]"],
        original_price=["div.text-base.line-through.text-gray-400"],
        wait_for="div.relative.border.rounded-lg",
    ),
    _profile(
        "inovapin.com", "InovaPin",
        container=["div.col-lg-6.col-md-6.col-xs-12.col-12.product-base"],
        title=_PRODUCT_NAME,
        price=["div.sales-price.fw-600.fs-18"],
        wait_for="div.col-lg-6.col-md-6.col-xs-12.col-12.product-base",
        delay=1500,
        retries=3,
    ),
    _profile(
        "bynogame.com", "BynoGame",
        container=["div.itemCard"],
        title=["h2.font-weight-bolder.text-left"],
        price=["div.col-lg-4.col-md-5"],
        wait_for="div.itemCard",
        delay=1500,
    ),
    _profile(
        "gamesatis.com", "GameSatis",
        container=["a.product"],
        title=["h3"],
        price=["div.selling-price"],
        original_price=["div.original-price"],
        wait_for="a.product",
        delay=1500,
        retries=3,
    ),
    _profile(
        "hesap.com.tr", "HesapComTr",
        container=["li.col-12.prd"],
        title=["a.d-flex"],
        price=["div#newprice_lg282.new"],
        wait_for="li.col-12.prd",
        delay=1500,
    ),
    _profile(
        "s2gepin.com", "S2GEpin",
        container=[".product-item", ".product", "tr"],
        title=_PRODUCT_NAME,
        price=["div.product-price", ".price", ".fiyat"],
        wait_for=".product-item",
        delay=1500,
        retries=3,
    ),
    _profile(
        "hi2games.com", "Hi2Games",
        container=["div.table-container.product"],
        title=["div.table-item.name p.text-header:first-child"],
        price=["div.table-item.price p.text-header.current"],
        original_price=["div.table-item.price p.text-header.old"],
        wait_for="div.table-container.product",
        delay=1500,
    ),
    _profile(
        "oyunfor.com", "OyunFor",
        container=[".product-item", ".productBox", "tr", ".product"],
        title=["h3.productText", "h3", ".title", ".product-name"],
        price=["div.notranslate", ".price", ".fiyat"],
        wait_for=".productBox",
        delay=1500,
        retries=3,
    ),
]

SITE_PROFILES: Dict[str, SiteProfile] = {p.domain: p for p in _PROFILES}


GENERIC_SELECTORS = SelectorSet(
    container=(
        ".product", ".item", ".card", ".product-item", "div", "article", "section", "tr",
    ),
    title=(
        ".title", ".name", ".product-title", ".product-name", "h1", "h2", "h3", "h4", "h5",
        '[class*="product"]', '[class*="title"]', '[class*="name"]',
    ),
    price=(
        ".price", ".cost", ".amount", ".product-price", '[class*="price"]',
        '[class*="fiyat"]', '[class*="cost"]', "span", "div", "td",
    ),
    original_price=(".old-price", ".original-price", ".was-price"),
)


def generic_profile(domain: str) -> SiteProfile:
    """Low-precision profile for shops without a dedicated entry."""
    return SiteProfile(
        domain=domain or "unknown",
        display_name=domain or "unknown",
        selectors=GENERIC_SELECTORS,
        wait_condition=None,
        inter_request_delay_ms=1000,
        max_retries=3,
        requires_rendering=False,
    )
