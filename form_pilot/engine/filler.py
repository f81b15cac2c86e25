"""
Field Filler - Apply cached answers to live page elements.
Resolves each field through its selector chain, then applies the fill
strategy from the capability table.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from playwright.async_api import Page, ElementHandle, Error as PlaywrightError

from ..config.settings import Settings
from ..exceptions import FormPilotError, FieldFillError
from ..models.answer import ResponseCache
from ..models.field import Field
from ..utils.diagnostics import capture_snapshot
from ..utils.dom_utils import DOMUtils, css_attr
from ..utils.logger import logger
from ..utils.text_utils import is_truthy
from .field_types import FillStrategy, capability_for
from .validators import resolve_option


class FillStatus(str, Enum):
    FILLED = "filled"
    SKIPPED = "skipped"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class FillReport:
    field: Field
    status: FillStatus
    message: str = ""


FIND_BY_LABEL_JS = r"""
(wanted) => {
    const controls = 'input:not([type="hidden"]):not([type="submit"]):not([type="button"]), '
        + 'select, textarea, [role="combobox"], [role="listbox"], [role="textbox"]';
    const clean = (t) => (t || '').replace(/\s+/g, ' ').replace(/\*/g, '').trim()
        .replace(/:$/, '').trim().toLowerCase();
    const target = clean(wanted);
    if (!target) return null;

    const controlFor = (label) => {
        if (label.htmlFor) {
            const byId = document.getElementById(label.htmlFor);
            if (byId) return byId;
        }
        const inside = label.querySelector(controls);
        if (inside) return inside;
        let next = label.nextElementSibling;
        if (next && next.matches(controls)) return next;
        if (next) return next.querySelector(controls);
        return null;
    };

    const labels = Array.from(document.querySelectorAll('label, legend'));
    for (const matches of [(t) => t === target, (t) => t.includes(target)]) {
        for (const label of labels) {
            if (!matches(clean(label.textContent))) continue;
            const control = controlFor(label);
            if (control) return control;
        }
        for (const control of document.querySelectorAll(controls)) {
            const own = clean(control.getAttribute('aria-label') || control.getAttribute('placeholder'));
            if (own && matches(own)) return control;
        }
    }
    return null;
}
"""

NATIVE_OPTIONS_JS = r"""
(el) => Array.from(el.options).map(o => ({
    text: (o.textContent || '').replace(/\s+/g, ' ').trim(),
    value: o.value,
}))
"""

VISIBLE_OPTIONS_JS = r"""
(selectors) => {
    const seen = new Set();
    const texts = [];
    for (const node of document.querySelectorAll(selectors.join(', '))) {
        if (node.getClientRects().length === 0) continue;
        const text = (node.textContent || '').replace(/\s+/g, ' ').trim();
        if (text && !seen.has(text)) {
            seen.add(text);
            texts.push(text);
        }
    }
    return texts;
}
"""

MATCH_OPTION_JS = r"""
([selectors, wanted]) => {
    const target = wanted.toLowerCase().trim();
    const text = (n) => (n.textContent || '').replace(/\s+/g, ' ').trim().toLowerCase();
    const nodes = Array.from(document.querySelectorAll(selectors.join(', ')))
        .filter(n => n.getClientRects().length > 0);
    return nodes.find(n => text(n) === target)
        || nodes.find(n => text(n).includes(target))
        || null;
}
"""


class FieldFiller:
    """Fills fields on a live page."""

    def __init__(self, page: Page):
        self.page = page

    async def fill_all(self, fields: List[Field], cache: ResponseCache) -> List[FillReport]:
        """
        Fill every field that has a cached answer, in discovery order.

        Failures are reported per field and never stop the pass.

        Args:
            fields: Discovered fields
            cache: Accepted answers keyed by field identity

        Returns:
            One FillReport per field
        """
        logger.step(6, "Filling form fields")
        reports = []

        for field in fields:
            value = cache.get(field.identity)
            if not value:
                reports.append(FillReport(field, FillStatus.SKIPPED, "no answer"))
                continue

            try:
                status = await self.fill(field, value)
                reports.append(FillReport(field, status))
            except FormPilotError as e:
                logger.warning(f"Failed to fill {field.label}: {e}")
                reports.append(FillReport(field, FillStatus.FAILED, str(e)))

        for status in FillStatus:
            count = sum(1 for r in reports if r.status == status)
            if count:
                logger.metric(f"Fields {status.value}", count)
        return reports

    async def fill(self, field: Field, value: str) -> FillStatus:
        """
        Apply one value to one field.

        Args:
            field: Target field
            value: Accepted answer

        Returns:
            FillStatus (FILLED, SKIPPED or NOT_FOUND)

        Raises:
            FieldFillError: The element was found but the value could not be applied
        """
        strategy = capability_for(field).fill_strategy
        if strategy == FillStrategy.SKIP:
            logger.warning(f"Skipping {field.label}: {field.field_type.value} inputs are not filled")
            return FillStatus.SKIPPED

        element = await self.resolve(field)
        if element is None:
            logger.warning(f"Could not locate {field.label} ({field.selector})")
            await capture_snapshot(self.page, f"unresolved {field.label}", field.to_dict())
            return FillStatus.NOT_FOUND

        try:
            state = await DOMUtils.get_element_state(element)
            if state['disabled']:
                logger.info(f"Skipping disabled field {field.label}")
                return FillStatus.SKIPPED
            # Custom widgets keep a read-only text box by construction
            if state['readonly'] and not field.is_custom:
                logger.info(f"Skipping read-only field {field.label}")
                return FillStatus.SKIPPED

            handler = {
                FillStrategy.TYPE_TEXT: self._type_text,
                FillStrategy.SET_VALUE: self._set_value,
                FillStrategy.SELECT_NATIVE: self._select_native,
                FillStrategy.SELECT_CUSTOM: self._select_custom,
                FillStrategy.TOGGLE: self._toggle,
                FillStrategy.CHOOSE_MEMBER: self._choose_member,
            }[strategy]
            await handler(field, element, value)
        except PlaywrightError as e:
            raise FieldFillError(f"{field.label}: {e}") from e

        logger.debug(f"Filled {field.label}")
        return FillStatus.FILLED

    async def resolve(self, field: Field) -> Optional[ElementHandle]:
        """
        Locate the live element for a field.

        Tries the primary selector with a short wait, each alternate
        selector, then a search by label text.
        """
        try:
            element = await self.page.wait_for_selector(
                field.selector, state='attached', timeout=Settings.ELEMENT_RESOLVE_TIMEOUT
            )
            if element:
                return element
        except PlaywrightError:
            logger.debug(f"Primary selector missed for {field.label}: {field.selector}")

        for selector in field.alternate_selectors:
            element = await DOMUtils.first_match(self.page, selector)
            if element:
                logger.debug(f"Resolved {field.label} via alternate {selector}")
                return element

        return await self._find_by_label(field.label)

    async def read_custom_options(self, field: Field) -> List[str]:
        """Open a custom dropdown, read its option texts and close it."""
        element = await self.resolve(field)
        if element is None:
            return []
        try:
            await self._click(element)
            await asyncio.sleep(Settings.DROPDOWN_RENDER_DELAY / 1000)
            options = await self.page.evaluate(VISIBLE_OPTIONS_JS, Settings.CUSTOM_OPTION_SELECTORS)
            await self.page.keyboard.press('Escape')
        except PlaywrightError as e:
            logger.debug(f"Could not read options for {field.label}: {e}")
            return []
        logger.debug(f"Options for {field.label}: {options}")
        return options

    async def _find_by_label(self, label: str) -> Optional[ElementHandle]:
        try:
            handle = await self.page.evaluate_handle(FIND_BY_LABEL_JS, label)
        except PlaywrightError:
            return None
        element = handle.as_element()
        if element:
            logger.debug(f"Resolved {label} by label text")
        return element

    async def _click(self, element: ElementHandle):
        try:
            await element.click(timeout=Settings.ELEMENT_RESOLVE_TIMEOUT)
        except PlaywrightError:
            # Covered or visually hidden inputs still take a DOM click
            await element.evaluate("(el) => el.click()")

    async def _type_text(self, field: Field, element: ElementHandle, value: str):
        await element.focus()
        await element.fill('')
        await self.page.keyboard.type(value, delay=Settings.TYPING_DELAY)
        await DOMUtils.dispatch_input_events(element)

    async def _set_value(self, field: Field, element: ElementHandle, value: str):
        await DOMUtils.set_value(element, value)

    async def _select_native(self, field: Field, element: ElementHandle, value: str):
        options = await element.evaluate(NATIVE_OPTIONS_JS)
        lowered = value.lower()

        target = next((o['value'] for o in options if o['value'] == value), None)
        if target is None:
            target = next((o['value'] for o in options if o['text'].lower() == lowered), None)
        if target is None:
            target = next(
                (o['value'] for o in options
                 if lowered in o['text'].lower() or (o['value'] and lowered in o['value'].lower())),
                None,
            )
        if target is None:
            raise FieldFillError(f'No option matching "{value}" in {field.label}')

        await element.select_option(value=target, timeout=Settings.ELEMENT_RESOLVE_TIMEOUT)

    async def _toggle(self, field: Field, element: ElementHandle, value: str):
        state = await DOMUtils.get_element_state(element)
        if bool(state['checked']) != is_truthy(value):
            await self._click(element)

    async def _choose_member(self, field: Field, element: ElementHandle, value: str):
        result = resolve_option(value, field.options or ())
        if not result.is_valid:
            raise FieldFillError(f"{field.label}: {result.message}")
        index = field.options.index(result.value)

        member = None
        if field.option_values and field.option_values[index]:
            member = await DOMUtils.first_match(
                self.page, field.selector + css_attr('value', field.option_values[index])
            )
        if member is None:
            members = await self.page.query_selector_all(field.selector)
            member = members[index] if index < len(members) else None
        if member is None:
            raise FieldFillError(f'Option "{result.value}" not found for {field.label}')

        state = await DOMUtils.get_element_state(member)
        if not state['checked']:
            await self._click(member)

    async def _select_custom(self, field: Field, element: ElementHandle, value: str):
        await self._click(element)
        await asyncio.sleep(Settings.DROPDOWN_RENDER_DELAY / 1000)

        option = await self._match_option(value)
        if option is not None:
            await self._click(option)
            return

        text_box = element
        if await element.evaluate("(el) => el.tagName.toLowerCase()") != 'input':
            text_box = await element.query_selector('input') or element
        await text_box.focus()
        await self.page.keyboard.type(value, delay=Settings.TYPING_DELAY)
        await asyncio.sleep(Settings.DROPDOWN_RENDER_DELAY / 1000)
        await self.page.keyboard.press('Enter')

    async def _match_option(self, value: str) -> Optional[ElementHandle]:
        handle = await self.page.evaluate_handle(
            MATCH_OPTION_JS, [Settings.CUSTOM_OPTION_SELECTORS, value]
        )
        return handle.as_element()
