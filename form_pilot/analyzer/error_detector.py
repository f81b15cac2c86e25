"""
Validation Error Detector - Read post-submit validation feedback.
Collects errors from invalid-control indicators, free-standing error
messages and empty required controls, then decides whether the form
went through.
"""

import asyncio
from typing import List, Dict, Any, Tuple

from playwright.async_api import Page, Error as PlaywrightError

from ..config.settings import Settings
from ..models.validation_error import ValidationError
from ..utils.dom_utils import LABEL_HELPERS_JS
from ..utils.logger import logger
from ..utils.text_utils import strip_required_marker
from .field_classifier import FieldClassifier


DROPDOWN_MESSAGE = "Please select an option from the dropdown"
REQUIRED_MESSAGE = "This field is required"
INVALID_MESSAGE = "Invalid value entered"

SCAN_ERRORS_JS = "(config) => {" + LABEL_HELPERS_JS + r"""
    const maxLength = config.maxLabelLength;
    const controls = 'input, select, textarea, [role="combobox"], [role="listbox"]';
    const found = [];

    const safeAll = (sel) => {
        try { return Array.from(document.querySelectorAll(sel)); } catch (e) { return []; }
    };
    const messageNear = (el) => {
        const ref = el.getAttribute('aria-describedby') || el.getAttribute('aria-errormessage');
        if (ref) {
            const t = __fp.byIds(ref);
            if (t) return t;
        }
        let scope = el.parentElement;
        for (let depth = 0; scope && depth < 2; depth++, scope = scope.parentElement) {
            if (__fp.controlCount(scope) > 1) break;
            for (const sel of config.messageSelectors) {
                const node = scope.querySelector(sel);
                if (node && node !== el && !__fp.isControl(node) && __fp.text(node)) return __fp.text(node);
            }
        }
        return el.validationMessage || '';
    };
    const isEmpty = (el, raw) => {
        const tag = el.tagName.toLowerCase();
        if (['input', 'select', 'textarea'].includes(tag)) return !raw.value;
        const text = __fp.text(el);
        return !raw.value && (!text || text === (el.getAttribute('placeholder') || ''));
    };
    const record = (el, source, message) => {
        const raw = __fp.describe(el, maxLength);
        raw.source = source;
        raw.message = message;
        found.push(raw);
    };

    // (a) controls flagged by error indicators
    for (const sel of config.fieldSelectors) {
        for (const match of safeAll(sel)) {
            let el = match;
            if (!match.matches(controls)) {
                el = match.querySelector(controls);
                if (!el) continue;
            }
            record(el, 'indicator', messageNear(el));
        }
    }

    // (b) free-standing error messages tied to a form-group control
    for (const sel of config.messageSelectors) {
        for (const node of safeAll(sel)) {
            const text = __fp.text(node);
            if (!text || __fp.isControl(node)) continue;
            const container = node.closest(config.containerSelectors.join(', ')) || node.parentElement;
            const el = container ? container.querySelector(controls) : null;
            if (!el) continue;
            record(el, 'message', text);
        }
    }

    // (c) required controls left empty
    for (const el of safeAll('[required], [aria-required="true"]')) {
        if (!el.matches(controls) && !el.matches('[role]')) continue;
        const raw = __fp.describe(el, maxLength);
        if (!isEmpty(el, raw)) continue;
        raw.source = 'required';
        raw.message = '';
        found.push(raw);
    }
    return found;
}
"""

SUCCESS_STATE_JS = """
(selectors) => {
    const indicator = selectors.some(sel => {
        try {
            return Array.from(document.querySelectorAll(sel))
                .some(n => (n.textContent || '').trim().length > 0);
        } catch (e) {
            return false;
        }
    });
    return {
        indicator,
        forms: document.querySelectorAll('form').length,
        url: window.location.href,
    };
}
"""


def synthesize_message(raw: Dict[str, Any]) -> str:
    """Message for an error that the page did not describe."""
    if raw.get('isDropdown'):
        return DROPDOWN_MESSAGE
    if raw.get('required') or raw.get('ariaRequired') or not raw.get('value'):
        return REQUIRED_MESSAGE
    return INVALID_MESSAGE


def build_error(raw: Dict[str, Any]) -> Tuple[ValidationError, bool]:
    """
    Build a ValidationError from a raw report.

    Returns:
        Tuple of (error, whether the message was synthesized)
    """
    field_type = FieldClassifier.infer_type(raw)
    label = strip_required_marker(FieldClassifier.choose_label(raw, field_type))
    message = (raw.get('message') or '').strip()
    synthesized = not message
    if synthesized:
        message = synthesize_message(raw)

    error = ValidationError(
        field_name=raw.get('name') or raw.get('id') or label,
        field_label=label,
        error_message=message,
        field_type=field_type.value if field_type else (raw.get('typeAttr') or raw.get('tag') or 'unknown'),
        current_value=raw.get('value') or '',
    )
    return error, synthesized


def merge_errors(candidates: List[Tuple[ValidationError, bool]]) -> List[ValidationError]:
    """
    Deduplicate errors by (field_name, field_label).

    The first occurrence keeps its position. A later occurrence replaces
    it only when the kept message was synthesized and the new one was not.
    """
    merged: Dict[tuple, Tuple[ValidationError, bool]] = {}
    for error, synthesized in candidates:
        kept = merged.get(error.key)
        if kept is None:
            merged[error.key] = (error, synthesized)
        elif kept[1] and not synthesized:
            merged[error.key] = (error, False)
    return [error for error, _ in merged.values()]


class ValidationErrorDetector:
    """Detects validation errors shown after a submission attempt."""

    def __init__(self, page: Page):
        self.page = page

    async def detect(self) -> List[ValidationError]:
        """
        Collect validation errors after a short settle delay.

        Returns:
            Deduplicated errors in detection order
        """
        await asyncio.sleep(Settings.ERROR_SETTLE_DELAY / 1000)

        try:
            raw_errors = await self.page.evaluate(SCAN_ERRORS_JS, {
                'fieldSelectors': Settings.ERROR_FIELD_SELECTORS,
                'messageSelectors': Settings.ERROR_MESSAGE_SELECTORS,
                'containerSelectors': Settings.FIELD_CONTAINER_SELECTORS,
                'maxLabelLength': Settings.SIBLING_LABEL_MAX_LENGTH,
            })
        except PlaywrightError as e:
            # Page navigated away mid-scan; nothing left to report
            logger.debug(f"Error scan interrupted: {e}")
            return []

        errors = merge_errors([build_error(raw) for raw in raw_errors])
        logger.metric("Validation errors", len(errors))
        for error in errors:
            logger.debug(f"Validation error: {error}")
        return errors

    async def is_submitted(self) -> bool:
        """
        Decide whether the form was accepted.

        True when a success indicator shows text, when the URL carries a
        success token, or when no errors remain and no form is left.
        """
        await asyncio.sleep(Settings.SUBMITTED_SETTLE_DELAY / 1000)

        try:
            state = await self.page.evaluate(SUCCESS_STATE_JS, Settings.SUCCESS_SELECTORS)
        except PlaywrightError as e:
            logger.debug(f"Success check interrupted: {e}")
            return False

        if state['indicator']:
            logger.debug("Success indicator present")
            return True

        url = (state.get('url') or '').lower()
        if any(token in url for token in Settings.SUCCESS_URL_TOKENS):
            logger.debug(f"Success token in URL: {url}")
            return True

        if state['forms'] == 0:
            errors = await self.detect()
            return not errors

        return False
