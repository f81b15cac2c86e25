"""
Diagnostic snapshots for fields that could not be located.
"""

import itertools
import json
import re
import time
from pathlib import Path
from typing import Optional, Dict, Any

from playwright.async_api import Page, Error as PlaywrightError

from ..config.settings import Settings
from .dom_utils import DOMUtils
from .logger import logger


_SNAPSHOT_COUNTER = itertools.count(1)


def _slug(text: str) -> str:
    return re.sub(r'[^a-zA-Z0-9]+', '_', text).strip('_')[:40] or 'field'


async def capture_snapshot(page: Page, reason: str,
                           details: Optional[Dict[str, Any]] = None) -> Optional[Path]:
    """
    Write the page HTML and control statistics to the diagnostics directory.

    Does nothing when no diagnostics directory is configured.

    Args:
        page: Playwright page object
        reason: Short description, used in the file name
        details: Extra JSON-serializable context

    Returns:
        Path of the HTML snapshot, or None
    """
    if not Settings.DIAGNOSTICS_DIR:
        return None

    directory = Path(Settings.DIAGNOSTICS_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    base_name = f"{next(_SNAPSHOT_COUNTER):04d}_{time.strftime('%Y%m%d-%H%M%S')}_{_slug(reason)}"

    try:
        html = await page.content()
    except PlaywrightError as e:
        logger.warning(f"Could not capture page HTML: {e}")
        return None

    html_path = directory / f"{base_name}.html"
    html_path.write_text(html, encoding="utf-8")

    stats = await DOMUtils.get_dom_stats(page)
    payload = {'reason': reason, 'stats': stats, 'details': details or {}}
    (directory / f"{base_name}.json").write_text(
        json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
    )

    logger.info(f"Diagnostic snapshot saved: {html_path}")
    return html_path
