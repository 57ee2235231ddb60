"""Browser launch configuration per deployment environment.

Development launches a visible window by default. Chromium only exports
PDFs when headless, so set ``INVOICE_HEADLESS=true`` to convert locally.
"""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

from .config import Settings
from .errors import BrowserNotFoundError


class Platform(enum.Enum):
    LINUX = "linux"
    WIN32 = "win32"
    DARWIN = "darwin"

    @classmethod
    def current(cls, name: Optional[str] = None) -> "Platform":
        name = sys.platform if name is None else name
        for platform in cls:
            if name.startswith(platform.value):
                return platform
        return cls.LINUX


CHROME_EXECUTABLES: Mapping[Platform, str] = {
    Platform.LINUX: "/usr/bin/chromium-browser",
    Platform.WIN32: "C:\\Program Files (x86)\\Google\\Chrome\\Application\\chrome.exe",
    Platform.DARWIN: "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
}

# Chromium inside a serverless sandbox has no setuid helper, a tiny /dev/shm
# and no GPU.
SERVERLESS_CHROMIUM_ARGS: Tuple[str, ...] = (
    "--allow-running-insecure-content",
    "--autoplay-policy=user-gesture-required",
    "--disable-component-update",
    "--disable-dev-shm-usage",
    "--disable-domain-reliability",
    "--disable-features=AudioServiceOutOfProcess,IsolateOrigins,site-per-process",
    "--disable-gpu",
    "--disable-print-preview",
    "--disable-setuid-sandbox",
    "--disable-site-isolation-trials",
    "--disable-speech-api",
    "--disable-web-security",
    "--hide-scrollbars",
    "--ignore-gpu-blocklist",
    "--mute-audio",
    "--no-default-browser-check",
    "--no-pings",
    "--no-sandbox",
)


class BrowserType(Protocol):
    @property
    def executable_path(self) -> str:
        ...


@dataclass(frozen=True)
class LaunchOptions:
    executable_path: str
    args: Tuple[str, ...] = field(default_factory=tuple)
    headless: bool = True

    def as_kwargs(self) -> Dict[str, Any]:
        return {
            "executable_path": self.executable_path,
            "args": list(self.args),
            "headless": self.headless,
        }


def resolve_launch_options(
    settings: Settings,
    browser_type: BrowserType,
    executables: Mapping[Platform, str] = CHROME_EXECUTABLES,
    platform: Optional[Platform] = None,
) -> LaunchOptions:
    """Pick the browser binary, its arguments and the headless mode.

    Development uses the locally installed Chrome for the running platform
    with a visible window. Everywhere else the Chromium build bundled with
    the browser library runs headless with sandbox-friendly arguments.
    ``settings.headless_override`` wins over both; a visible development
    window cannot print to PDF.
    """
    if settings.is_development:
        platform = platform or Platform.current()
        path = executables.get(platform) or executables[Platform.LINUX]
        options = LaunchOptions(executable_path=path, args=(), headless=False)
    else:
        try:
            path = browser_type.executable_path
        except Exception as exc:
            raise BrowserNotFoundError(f"Bundled browser could not be resolved: {exc}") from exc
        options = LaunchOptions(executable_path=path, args=SERVERLESS_CHROMIUM_ARGS, headless=True)

    if not options.executable_path or not os.path.exists(options.executable_path):
        raise BrowserNotFoundError(f"Browser executable not found at {options.executable_path!r}")

    if settings.headless_override is not None:
        options = LaunchOptions(
            executable_path=options.executable_path,
            args=options.args,
            headless=settings.headless_override,
        )
    return options
