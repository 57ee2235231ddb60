"""HTTP server: the PDF conversion trigger and the invoice render target."""

from __future__ import annotations

import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlsplit

from .config import Settings, get_settings
from .errors import InvalidNavigationTarget
from .net import is_client_disconnect, render_target_url
from .rendering import OrderValidationError, load_sample_order, render_invoice_html
from .tracking import capture_failure, init_tracking

logger = logging.getLogger(__name__)

RENDER_PATH = "/api/render"
RENDER_TARGET_PATH = "/"
HEALTH_PATHS = ("/health", "/healthz", "/ready")
CONVERSION_FAILED_MESSAGE = b"Failed to generate invoice - recorded the exception."
EMPTY_PDF_MESSAGE = b"Error: could not generate PDF"
RENDER_FAILED_HTML = "<!DOCTYPE html><html><body><p>Cannot render this invoice.</p></body></html>"

ValidationError = Tuple[int, Dict[str, Any]]


def load_converter() -> Callable[[str, Any, Optional[Settings]], bytes]:
    from .convert import convert, load_playwright

    load_playwright()
    return convert


def run_conversion(url: str, payload: Any, settings: Settings) -> bytes:
    return load_converter()(url, payload, settings)


def parse_json_body(body: bytes) -> Tuple[Optional[Dict[str, Any]], Optional[ValidationError]]:
    try:
        payload = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError:
        return None, (
            400,
            {"error": "invalid_encoding", "detail": "Body must be UTF-8 encoded JSON."},
        )
    except json.JSONDecodeError as exc:
        return None, (
            400,
            {
                "error": "invalid_json",
                "detail": f"{exc.msg} (line {exc.lineno}, column {exc.colno})",
            },
        )

    if not isinstance(payload, dict):
        return None, (
            400,
            {"error": "invalid_payload", "detail": "JSON root must be an object."},
        )
    return payload, None


class InvoiceHandler(BaseHTTPRequestHandler):
    server: "InvoiceHTTPServer"

    @property
    def settings(self) -> Settings:
        return self.server.settings

    @property
    def route(self) -> str:
        return urlsplit(self.path).path or "/"

    def _write_response(
        self,
        status: int,
        content_type: str,
        body: bytes,
        headers: Optional[Dict[str, str]] = None,
    ) -> bool:
        try:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            for name, value in (headers or {}).items():
                self.send_header(name, value)
            self.end_headers()
            self.wfile.write(body)
            return True
        except Exception as exc:
            if is_client_disconnect(exc):
                return False
            raise

    def _send_json(self, status: int, payload: Dict[str, Any]) -> bool:
        body = json.dumps(payload).encode("utf-8")
        return self._write_response(status, "application/json", body)

    def _send_html(self, status: int, html: str) -> bool:
        return self._write_response(status, "text/html; charset=utf-8", html.encode("utf-8"))

    def _send_not_found(self) -> None:
        self._send_json(404, {"error": "not_found", "detail": "Unsupported endpoint."})

    def _send_method_not_allowed(self) -> None:
        self._write_response(405, "text/plain", b"", headers={"Allow": "POST"})

    def _read_body(self) -> Optional[bytes]:
        header = self.headers.get("Content-Length")
        if header is None:
            self._send_json(
                411,
                {
                    "error": "missing_content_length",
                    "detail": "Content-Length header is required.",
                },
            )
            return None

        try:
            content_length = int(header)
        except ValueError:
            self._send_json(
                400,
                {
                    "error": "invalid_content_length",
                    "detail": "Content-Length must be an integer.",
                },
            )
            return None

        if content_length <= 0:
            self._send_json(400, {"error": "empty_body", "detail": "Request body cannot be empty."})
            return None

        if content_length > self.settings.max_body_bytes:
            self._send_json(
                413,
                {
                    "error": "payload_too_large",
                    "detail": f"Body exceeds {self.settings.max_body_bytes} bytes.",
                },
            )
            return None

        try:
            return self.rfile.read(content_length)
        except Exception as exc:
            if is_client_disconnect(exc):
                return None
            raise

    def _read_json(self) -> Optional[Dict[str, Any]]:
        body = self._read_body()
        if body is None:
            return None
        payload, validation_error = parse_json_body(body)
        if validation_error is not None:
            status, error_body = validation_error
            self._send_json(status, error_body)
            return None
        return payload

    def _handle_conversion(self) -> None:
        payload = self._read_json()
        if payload is None:
            return

        url = render_target_url(self.headers.get("Host"), self.settings.is_serverless)
        logger.debug("Request body %s", payload)
        logger.debug("Headers %s", dict(self.headers.items()))

        try:
            pdf_bytes = run_conversion(url, payload, self.settings)
        except InvalidNavigationTarget as exc:
            capture_failure(exc, payload)
            logger.warning("Render target %s could not be navigated to: %s", url, exc)
            self._write_response(404, "text/plain", b"")
            return
        except Exception as exc:
            capture_failure(exc, payload)
            logger.exception("PDF conversion failed for %s", url)
            self._write_response(500, "text/plain", CONVERSION_FAILED_MESSAGE)
            return

        if not pdf_bytes:
            self._write_response(400, "text/plain", EMPTY_PDF_MESSAGE)
            return
        self._write_response(200, "application/pdf", pdf_bytes)

    def _handle_render(self, order: Dict[str, Any]) -> None:
        try:
            html = render_invoice_html(order)
        except OrderValidationError as exc:
            self._send_html(400, f"<!DOCTYPE html><html><body><p>{exc}</p></body></html>")
            return
        except Exception as exc:
            capture_failure(exc, order)
            logger.exception("Invoice rendering failed")
            self._send_html(500, RENDER_FAILED_HTML)
            return
        self._send_html(200, html)

    def do_POST(self) -> None:
        if self.route == RENDER_PATH:
            self._handle_conversion()
            return
        if self.route == RENDER_TARGET_PATH:
            logger.info("Invoice posted to the service")
            order = self._read_json()
            if order is not None:
                self._handle_render(order)
            return
        self._send_not_found()

    def do_GET(self) -> None:
        if self.route == RENDER_PATH:
            self._send_method_not_allowed()
            return
        if self.route == RENDER_TARGET_PATH:
            if self.settings.is_serverless:
                self._send_not_found()
                return
            self._handle_render(load_sample_order())
            return
        if self.route in HEALTH_PATHS:
            self._send_json(200, {"status": "ok"})
            return
        self._send_not_found()

    def _reject_non_post(self) -> None:
        if self.route == RENDER_PATH:
            self._send_method_not_allowed()
            return
        self._send_not_found()

    do_PUT = _reject_non_post
    do_PATCH = _reject_non_post
    do_DELETE = _reject_non_post

    def handle_one_request(self) -> None:
        try:
            super().handle_one_request()
        except Exception as exc:
            if is_client_disconnect(exc):
                return
            raise

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class InvoiceHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address: Tuple[str, int], settings: Settings) -> None:
        self.settings = settings
        self.request_queue_size = settings.listen_backlog
        super().__init__(address, InvoiceHandler)


def create_server(
    settings: Optional[Settings] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> InvoiceHTTPServer:
    settings = settings or get_settings()
    return InvoiceHTTPServer(
        (settings.host if host is None else host, settings.port if port is None else port),
        settings,
    )


def run(
    host: Optional[str] = None,
    port: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> None:
    settings = settings or get_settings()
    load_converter()
    init_tracking(settings)
    server = create_server(settings, host, port)
    bound_host, bound_port = server.server_address[:2]
    print(f"Invoice PDF server listening on http://{bound_host}:{bound_port}")
    server.serve_forever()
