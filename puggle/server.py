from __future__ import annotations

import functools
import gzip
import logging
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from .config import load_config
from .models import Config
from .pages import build_site
from .watcher import watch

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"


class PreviewRequestHandler(SimpleHTTPRequestHandler):
    """Static file handler that gzips responses for clients that accept it."""

    def accepts_gzip(self) -> bool:
        return "gzip" in self.headers.get("Accept-Encoding", "")

    def do_GET(self):
        if not self.accepts_gzip():
            return super().do_GET()

        path = Path(self.translate_path(self.path))
        if path.is_dir():
            # Let the base class redirect "/page" to "/page/".
            if not urlsplit(self.path).path.endswith("/"):
                return super().do_GET()
            path = path / "index.html"
        if not path.is_file():
            return super().do_GET()

        body = gzip.compress(path.read_bytes())
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", self.guess_type(str(path)))
        self.send_header("Content-Encoding", "gzip")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Vary", "Accept-Encoding")
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        logger.debug("%s %s", self.address_string(), format % args)


class PreviewServer(ThreadingHTTPServer):
    daemon_threads = True

    def handle_error(self, request, client_address):
        logger.exception("Error while handling request from %s", client_address)


def make_server(directory: Path, host: str = DEFAULT_HOST, port: int = 3000) -> PreviewServer:
    handler = functools.partial(PreviewRequestHandler, directory=str(directory))
    return PreviewServer((host, port), handler)


def serve(config: Config, config_path: Optional[Path] = None) -> None:
    """Build once, rebuild on source changes, and serve ``dest_dir`` until interrupted."""
    build_site(config)
    observer = watch(Path.cwd(), lambda: build_site(load_config(config_path)))
    server = make_server(config.dest_dir, port=config.preview.port)
    logger.info("Serving %s on http://%s:%d", config.dest_dir, DEFAULT_HOST, config.preview.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
        observer.stop()
        observer.join()
