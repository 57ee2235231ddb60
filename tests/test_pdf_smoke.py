import re
import threading
import unittest
from importlib import util as importlib_util

from invoice_pdf.config import Settings
from invoice_pdf.errors import InvalidNavigationTarget, RenderResponseError
from invoice_pdf.rendering import load_sample_order
from invoice_pdf.server import create_server

PLAYWRIGHT_AVAILABLE = importlib_util.find_spec("playwright") is not None
if PLAYWRIGHT_AVAILABLE:
    from playwright.sync_api import sync_playwright

    from invoice_pdf.convert import convert
    from invoice_pdf.launch import resolve_launch_options

SETTINGS = Settings(is_development=False, headless_override=True)
PAGE_OBJECT = re.compile(rb"/Type\s*/Page(?![a-zA-Z])")


def page_count(pdf: bytes) -> int:
    return len(PAGE_OBJECT.findall(pdf))


def browser_launchable() -> bool:
    try:
        with sync_playwright() as p:
            options = resolve_launch_options(SETTINGS, p.chromium)
            browser = p.chromium.launch(**options.as_kwargs())
            try:
                browser.new_page().set_content("<p>ok</p>")
            finally:
                browser.close()
    except Exception:
        return False
    return True


@unittest.skipUnless(PLAYWRIGHT_AVAILABLE, "playwright is not installed")
class PdfSmokeTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        if not browser_launchable():
            raise unittest.SkipTest("Chromium for playwright is not available")
        cls.server = create_server(SETTINGS, "127.0.0.1", 0)
        cls.url = f"http://127.0.0.1:{cls.server.server_address[1]}"
        cls.thread = threading.Thread(target=cls.server.serve_forever, daemon=True)
        cls.thread.start()

    @classmethod
    def tearDownClass(cls) -> None:
        cls.server.shutdown()
        cls.server.server_close()
        cls.thread.join(timeout=5)

    def test_sample_order_converts_to_pdf(self) -> None:
        pdf = convert(self.url, load_sample_order(), SETTINGS)

        self.assertIsInstance(pdf, bytes)
        self.assertTrue(pdf.startswith(b"%PDF-"))
        self.assertGreater(len(pdf), 1000)

    def test_same_order_converts_to_same_page_count(self) -> None:
        first = convert(self.url, load_sample_order(), SETTINGS)
        second = convert(self.url, load_sample_order(), SETTINGS)

        self.assertGreater(page_count(first), 0)
        self.assertEqual(page_count(first), page_count(second))

    def test_malformed_nested_order_is_render_failure(self) -> None:
        order = {"DeliverySummary": [{"OrderItems": ["x"]}], "PaymentDetails": {}}

        with self.assertRaises(RenderResponseError):
            convert(self.url, order, SETTINGS)

    def test_error_status_from_render_target_fails(self) -> None:
        with self.assertRaises(RenderResponseError) as ctx:
            convert(self.url, {"DeliverySummary": []}, SETTINGS)

        self.assertEqual(ctx.exception.status, 400)

    def test_unreachable_target_is_invalid_navigation(self) -> None:
        with self.assertRaises(InvalidNavigationTarget):
            convert("http://127.0.0.1:1", load_sample_order(), SETTINGS)


if __name__ == "__main__":
    unittest.main()
