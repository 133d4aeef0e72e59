#!/usr/bin/env python3
"""Download the UMD bundles the isolated preview document loads.

Usage:
    python scripts/sync_vendor.py [--force]

Files land in app/static/vendor/ and are served same-origin, as the preview
document's content security policy only allows local scripts.
"""
import os
import sys
import httpx
from dotenv import load_dotenv

load_dotenv()

VENDOR_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "app", "static", "vendor"
)

BUNDLES = {
    "react.production.min.js": "https://unpkg.com/react@18.3.1/umd/react.production.min.js",
    "react-dom.production.min.js": "https://unpkg.com/react-dom@18.3.1/umd/react-dom.production.min.js",
    "babel-standalone.min.js": "https://unpkg.com/@babel/standalone@7.26.2/babel.min.js",
    # Play CDN build: generates utility classes in the browser from the page markup
    "tailwindcss.js": "https://cdn.tailwindcss.com/3.4.16",
}


def main():
    force = "--force" in sys.argv[1:]
    os.makedirs(VENDOR_DIR, exist_ok=True)

    with httpx.Client(timeout=60, follow_redirects=True) as client:
        for filename, url in BUNDLES.items():
            path = os.path.join(VENDOR_DIR, filename)
            if os.path.exists(path) and not force:
                print(f"Skipping {filename} (exists)")
                continue
            resp = client.get(url)
            if resp.status_code != 200:
                print(f"Error: {url} returned {resp.status_code}")
                sys.exit(1)
            with open(path, "wb") as fh:
                fh.write(resp.content)
            print(f"Downloaded {filename} ({len(resp.content) // 1024}KB)")


if __name__ == "__main__":
    main()
