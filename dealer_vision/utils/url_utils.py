"""
URL helpers for naming output locations.
"""

import re
from pathlib import Path
from urllib.parse import urlparse


def domain_of(url: str) -> str:
    """
    Return the lowercase host of a URL ("unknown" when there is none).

    Example:
        >>> domain_of("https://www.HudsonBusSales.com/PreOwnedBusesForSale")
        'www.hudsonbussales.com'
    """
    try:
        host = urlparse(url or "").netloc.lower()
    except ValueError:
        return "unknown"
    return host or "unknown"


def site_dir(base_out: Path, url: str) -> Path:
    """
    Per-site output directory (created if missing).

    Example:
        >>> site_dir(Path("out"), "https://www.hudsonbussales.com/x")
        PosixPath('out/www.hudsonbussales.com')
    """
    safe = re.sub(r"[^a-z0-9.\-]+", "_", domain_of(url))
    p = Path(base_out) / safe
    p.mkdir(exist_ok=True, parents=True)
    return p
