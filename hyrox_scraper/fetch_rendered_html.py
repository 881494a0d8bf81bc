#!/usr/bin/env python3
"""
Fetch a results page with a headless browser so the full DOM is rendered,
and save it to fixtures/ for offline parsing (parse_sample, diagnose_parser).

Usage:
  hyrox-fetch-html <url> [name]
  name defaults to the page's idp parameter (athlete page) or "roster".

Requires: pip install ".[browser]" && python -m playwright install chromium
"""
import os
import sys
from urllib.parse import parse_qs, urlparse

from .config import FIXTURES_DIR, USER_AGENT


def fixture_name(url: str) -> str:
    """athlete_<idp>.html for detail pages, roster_<page>.html for list pages."""
    qs = parse_qs(urlparse(url).query)
    if qs.get("idp"):
        return f"athlete_{qs['idp'][0]}.html"
    page = qs.get("page", ["1"])[0]
    return f"roster_{page}.html"


def fetch_one(page, url: str) -> str:
    """Load url and return the rendered HTML once a results table is present."""
    page.goto(url, wait_until="domcontentloaded", timeout=60000)
    try:
        page.wait_for_selector("table, a[href*='content=detail']", timeout=15000)
    except Exception as e:
        print(f"Warning: no results table after 15s ({e}); saving what loaded")
        page.wait_for_timeout(3000)
    return page.content()


def main():
    if len(sys.argv) < 2:
        print("Usage: hyrox-fetch-html <url> [name]")
        sys.exit(1)
    url = sys.argv[1]
    name = sys.argv[2] if len(sys.argv) > 2 else fixture_name(url)
    if not name.endswith(".html"):
        name += ".html"

    try:
        from playwright.sync_api import sync_playwright
    except ImportError:
        print('Install Playwright: pip install ".[browser]" && python -m playwright install chromium')
        sys.exit(1)

    os.makedirs(FIXTURES_DIR, exist_ok=True)
    out_path = FIXTURES_DIR / name
    print(f"Loading {url} ...")
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=True)
        page = browser.new_page()
        page.set_extra_http_headers({"User-Agent": USER_AGENT})
        html = fetch_one(page, url)
        browser.close()
    out_path.write_text(html, encoding="utf-8")
    print(f"Saved {len(html)} chars to {out_path}")


if __name__ == "__main__":
    main()
