#!/usr/bin/env python3
"""
Serve the driver's fixture pages over HTTP.

Every directory next to this script that holds an index.html is a site. Sites
get consecutive ports starting at --base-port (8001 by default), so the
interaction form lives at http://localhost:8001/.
"""

import argparse
import http.server
import logging
import threading
from functools import partial
from pathlib import Path

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent


class NoCacheHandler(http.server.SimpleHTTPRequestHandler):
    """Static handler that never lets the browser cache a fixture."""

    def end_headers(self):
        self.send_header("Cache-Control", "no-store")
        self.send_header("Access-Control-Allow-Origin", "*")
        super().end_headers()

    def log_message(self, format, *args):
        logger.info(f"{self.address_string()} {format % args}")


def discover_sites(base_dir: Path = BASE_DIR) -> list:
    return sorted(p.name for p in base_dir.iterdir() if (p / "index.html").is_file())


def make_server(site: str, port: int, host: str = "127.0.0.1") -> http.server.ThreadingHTTPServer:
    handler = partial(NoCacheHandler, directory=str(BASE_DIR / site))
    return http.server.ThreadingHTTPServer((host, port), handler)


def main():
    sites = discover_sites()
    parser = argparse.ArgumentParser(description="Serve fixture pages for the browser driver")
    parser.add_argument("--site", choices=sites, help="Serve only this site (default: all)")
    parser.add_argument("--base-port", type=int, default=8001, help="Port of the first site")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(message)s")

    selected = [args.site] if args.site else sites
    servers = []
    for offset, site in enumerate(selected):
        server = make_server(site, args.base_port + offset, args.host)
        servers.append(server)
        threading.Thread(target=server.serve_forever, daemon=True).start()
        logger.info(f"{site}: http://{args.host}:{args.base_port + offset}/")

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("Stopping fixture servers")
    finally:
        for server in servers:
            server.shutdown()
            server.server_close()


if __name__ == "__main__":
    main()
