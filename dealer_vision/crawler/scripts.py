"""
In-page JavaScript evaluated through Playwright.

Kept as module constants so the Python side can reference them by name
(and test doubles can dispatch on them).
"""

# Hide fixed/sticky overlays without changing layout (visibility, not display).
HIDE_FIXED_ELEMENTS_JS = r"""
() => {
  const hidden = new Set();
  const hide = (el) => {
    if (hidden.has(el)) return;
    el.style.visibility = 'hidden';
    hidden.add(el);
  };

  const commonSelectors = [
    'header',
    'nav',
    '[class*="header"]',
    '[class*="navigation"]',
    '[class*="navbar"]',
    '[class*="nav-bar"]',
    '[class*="fixed"]',
    '[class*="sticky"]'
  ];
  commonSelectors.forEach(sel => {
    document.querySelectorAll(sel).forEach(hide);
  });

  document.querySelectorAll('*').forEach(el => {
    const pos = window.getComputedStyle(el).position;
    if (pos === 'fixed' || pos === 'sticky') hide(el);
  });

  return hidden.size;
}
"""

SCROLL_HEIGHT_JS = "() => document.documentElement.scrollHeight | 0"

# Reads scrollHeight before scrolling, matching one tick of the lazy-load loop.
SCROLL_STEP_JS = r"""
(distance) => {
  const height = document.documentElement.scrollHeight | 0;
  window.scrollBy(0, distance);
  return { height: height, y: window.scrollY | 0 };
}
"""

SCROLL_TO_JS = "(y) => { window.scrollTo(0, y); return window.scrollY | 0; }"

HAS_ANY_SELECTOR_JS = r"""
(selectors) => selectors.some(sel => {
  try { return document.querySelectorAll(sel).length > 0; }
  catch (e) { return false; }
})
"""

# Describe candidate elements per selector plus image-ancestor containers.
# Coordinates are absolute page coordinates (viewport rect + scroll offset).
DOM_SNAPSHOT_JS = r"""
(args) => {
  const maxText = args.maxText || 4000;
  const describe = (el) => {
    const r = el.getBoundingClientRect();
    const text = (el.innerText || el.textContent || '').trim();
    return {
      top: r.top + window.scrollY,
      height: r.height,
      width: r.width,
      text: text.slice(0, maxText),
      text_length: text.length,
      has_image: el.querySelector('img') !== null,
    };
  };

  const bySelector = {};
  for (const sel of args.selectors) {
    try {
      bySelector[sel] = Array.from(document.querySelectorAll(sel)).map(describe);
    } catch (e) {
      bySelector[sel] = [];
    }
  }

  // climb from each image to the nearest ancestor that is big enough and
  // carries enough text to be a listing card
  const seen = new Set();
  const containers = [];
  for (const img of document.querySelectorAll('img')) {
    let el = img.parentElement;
    while (el && el !== document.body) {
      const r = el.getBoundingClientRect();
      const len = (el.innerText || '').trim().length;
      if (len > args.minText && r.height > args.minSize && r.width > args.minSize) break;
      el = el.parentElement;
    }
    if (el && el !== document.body && !seen.has(el)) {
      seen.add(el);
      containers.push(el);
    }
  }
  const innermost = containers.filter(c => !containers.some(o => o !== c && c.contains(o)));

  return {
    by_selector: bySelector,
    image_containers: innermost.map(describe),
  };
}
"""

# True once every rendered image overlapping [startY, endY) reports natural
# dimensions. Zero-size images (display:none, collapsed lazy placeholders)
# never load and are ignored.
SECTION_IMAGES_LOADED_JS = r"""
(bounds) => Array.from(document.images).filter(img => {
  const r = img.getBoundingClientRect();
  if (!(r.width > 0 && r.height > 0)) return false;
  const top = r.top + window.scrollY;
  return top < bounds.endY && top + r.height > bounds.startY;
}).every(img => img.complete && img.naturalWidth > 0 && img.naturalHeight > 0)
"""
