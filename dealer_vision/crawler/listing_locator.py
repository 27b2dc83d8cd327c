"""
Listing detection for dealer inventory pages.

The live page is described once by DOM_SNAPSHOT_JS into a DomSnapshot.
Detection strategies are plain functions over that snapshot, tried in
order; the first one that yields at least one valid listing wins and the
rest are not consulted.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from dealer_vision.core.logging import get_logger
from dealer_vision.crawler.geometry import ListingGeometry
from dealer_vision.crawler.scripts import DOM_SNAPSHOT_JS
from dealer_vision.crawler.session import ViewportSession

logger = get_logger(__name__)

COMMERCE_RE = re.compile(r"price|contact|quote", re.I)
YEAR_RE = re.compile(r"20\d{2}")

# Ordered from specific class names to generic grid columns
LISTING_SELECTORS: List[str] = [
    ".vehicle-item",
    ".inventory-item",
    ".product-item",
    '[class*="vehicle"]',
    '[class*="inventory"]',
    '[class*="listing"]',
    ".col-sm-6",
    ".col-md-6",
    '[class*="product-grid"]',
]

IMAGE_ANCESTOR_STRATEGY = "image-ancestors"


class NoListingsFoundError(RuntimeError):
    """No detection strategy produced a valid listing."""


@dataclass(frozen=True)
class ElementSnapshot:
    """Browser-independent description of one candidate element."""

    top: float
    height: float
    width: float
    text: str = ""
    text_length: int = 0
    has_image: bool = False

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ElementSnapshot":
        text = raw.get("text") or ""
        return cls(
            top=float(raw.get("top") or 0),
            height=float(raw.get("height") or 0),
            width=float(raw.get("width") or 0),
            text=text,
            text_length=int(raw.get("text_length") or len(text.strip())),
            has_image=bool(raw.get("has_image")),
        )

    def to_geometry(self) -> ListingGeometry:
        return ListingGeometry(top=max(0.0, self.top), height=self.height, width=self.width)


@dataclass(frozen=True)
class DomSnapshot:
    """Candidate elements per selector plus image-derived containers, in DOM order."""

    by_selector: Dict[str, List[ElementSnapshot]] = field(default_factory=dict)
    image_containers: List[ElementSnapshot] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DomSnapshot":
        by_selector = {
            sel: [ElementSnapshot.from_dict(e) for e in (items or [])]
            for sel, items in (raw.get("by_selector") or {}).items()
        }
        containers = [ElementSnapshot.from_dict(e) for e in (raw.get("image_containers") or [])]
        return cls(by_selector=by_selector, image_containers=containers)

    def query(self, selector: str) -> List[ElementSnapshot]:
        return list(self.by_selector.get(selector, []))


@dataclass(frozen=True)
class ListingStrategy:
    """A named extractor returning candidate elements from a snapshot."""

    name: str
    extract: Callable[[DomSnapshot], List[ElementSnapshot]]


def selector_strategy(selector: str) -> ListingStrategy:
    return ListingStrategy(name=selector, extract=lambda snap: snap.query(selector))


def image_ancestor_strategy() -> ListingStrategy:
    return ListingStrategy(name=IMAGE_ANCESTOR_STRATEGY, extract=lambda snap: list(snap.image_containers))


DEFAULT_STRATEGIES: List[ListingStrategy] = (
    [selector_strategy(sel) for sel in LISTING_SELECTORS] + [image_ancestor_strategy()]
)


def is_listing_candidate(
    el: ElementSnapshot,
    min_size: int = 100,
    min_text_length: int = 50,
) -> bool:
    """
    Decide whether an element looks like one vehicle listing.

    Requires an image, a rendered box larger than min_size on both axes,
    more than min_text_length characters of text, and commerce evidence
    (price/contact/quote wording or a 20xx model year).
    """
    if not el.has_image:
        return False
    if el.width <= min_size or el.height <= min_size:
        return False
    if el.text_length <= min_text_length:
        return False
    return bool(COMMERCE_RE.search(el.text) or YEAR_RE.search(el.text))


def select_listings(
    snapshot: DomSnapshot,
    strategies: Sequence[ListingStrategy] = None,
    min_size: int = 100,
    min_text_length: int = 50,
) -> Tuple[Optional[str], List[ListingGeometry]]:
    """
    Apply strategies in order and keep the first non-empty validated set.

    Returns:
        (winning strategy name, geometries in DOM order), or (None, [])
    """
    for strategy in strategies or DEFAULT_STRATEGIES:
        candidates = strategy.extract(snapshot)
        valid = [
            el for el in candidates
            if is_listing_candidate(el, min_size=min_size, min_text_length=min_text_length)
        ]
        logger.debug(f"Strategy {strategy.name!r}: {len(valid)}/{len(candidates)} valid")
        if valid:
            return strategy.name, [el.to_geometry() for el in valid]
    return None, []


async def snapshot_dom(
    session: ViewportSession,
    selectors: Sequence[str] = None,
    min_size: int = 100,
    min_text_length: int = 50,
) -> DomSnapshot:
    """Describe the live page's candidate elements in one evaluation."""
    raw = await session.page.evaluate(DOM_SNAPSHOT_JS, {
        "selectors": list(selectors or LISTING_SELECTORS),
        "minSize": min_size,
        "minText": min_text_length,
    })
    return DomSnapshot.from_dict(raw or {})


async def locate_listings(
    session: ViewportSession,
    strategies: Sequence[ListingStrategy] = None,
    min_size: int = 100,
    min_text_length: int = 50,
) -> Tuple[Optional[str], List[ListingGeometry]]:
    """
    Find vehicle listings on the prepared page.

    Precondition: overlays hidden and lazy content scrolled in.
    Postcondition: page state unchanged.

    Returns:
        (winning strategy name, geometries in DOM order); (None, []) when
        nothing matched. Callers treat an empty result as fatal.
    """
    snapshot = await snapshot_dom(session, min_size=min_size, min_text_length=min_text_length)
    name, listings = select_listings(
        snapshot, strategies, min_size=min_size, min_text_length=min_text_length
    )
    if listings:
        logger.info(f"Found {len(listings)} vehicle listings (strategy {name!r})")
    else:
        logger.warning("No listing strategy matched any element")
    return name, listings
