"""
DOM helpers.
In-page JavaScript shared by discovery, filling and error detection, plus
small element-level utilities.
"""

import json
from typing import Dict, Any, Optional

from playwright.async_api import Page, ElementHandle, Error as PlaywrightError


CONTROL_QUERY = 'input, select, textarea'

# Defines a `__fp` helper object inside page.evaluate bodies. Label
# candidates are returned raw so that the ordering lives in Python.
LABEL_HELPERS_JS = r"""
const __fp = {
    text(node) {
        return ((node && node.textContent) || '').replace(/\s+/g, ' ').trim();
    },
    byIds(ids) {
        return (ids || '').split(/\s+/).filter(Boolean)
            .map(id => document.getElementById(id)).filter(Boolean)
            .map(n => __fp.text(n)).join(' ').trim();
    },
    isControl(node) {
        return !!node && node.nodeType === 1 && node.matches(
            'input, select, textarea, [role="combobox"], [role="listbox"], [role="textbox"], [role="searchbox"]');
    },
    controlCount(node) {
        return (node && node.querySelectorAll) ? node.querySelectorAll('input, select, textarea').length : 0;
    },
    enclosingLabel(el) {
        const label = el.closest('label');
        if (!label) return '';
        const clone = label.cloneNode(true);
        clone.querySelectorAll('input, select, textarea, option').forEach(n => n.remove());
        return __fp.text(clone);
    },
    previousText(start, maxLength) {
        let prev = start.previousElementSibling;
        let hops = 0;
        while (prev && hops < 3) {
            if (__fp.isControl(prev) || __fp.controlCount(prev) > 0) return '';
            const t = __fp.text(prev);
            if (t) return t.length <= maxLength ? t : '';
            prev = prev.previousElementSibling;
            hops++;
        }
        return '';
    },
    siblingText(el, maxLength) {
        const own = __fp.previousText(el, maxLength);
        if (own) return own;
        const parent = el.parentElement;
        if (parent && parent !== document.body && parent.tagName.toLowerCase() !== 'form'
                && __fp.controlCount(parent) <= 1) {
            return __fp.previousText(parent, maxLength);
        }
        return '';
    },
    followingText(el, maxLength) {
        let node = el.nextSibling;
        const parts = [];
        while (node) {
            if (node.nodeType === 1 && (__fp.isControl(node) || __fp.controlCount(node) > 0)) break;
            const t = (node.textContent || '').replace(/\s+/g, ' ').trim();
            if (t) parts.push(t);
            node = node.nextSibling;
        }
        const text = parts.join(' ').trim();
        return text.length <= maxLength ? text : '';
    },
    groupMembers(el) {
        const name = el.getAttribute('name');
        const type = (el.getAttribute('type') || '').toLowerCase();
        if (!name || (type !== 'radio' && type !== 'checkbox')) return [el];
        return Array.from(document.querySelectorAll(`input[name="${CSS.escape(name)}"]`))
            .filter(m => (m.getAttribute('type') || '').toLowerCase() === type);
    },
    groupLabel(el, maxLength) {
        const fieldset = el.closest('fieldset');
        if (fieldset) {
            const legend = fieldset.querySelector('legend');
            if (legend && __fp.text(legend)) return __fp.text(legend);
        }
        const group = el.closest('[role="radiogroup"], [role="group"]');
        if (group) {
            const t = (group.getAttribute('aria-label') || '').trim()
                || __fp.byIds(group.getAttribute('aria-labelledby'));
            if (t) return t;
        }
        const members = __fp.groupMembers(el);
        const first = members[0];
        let node = first.closest('label') || first;
        for (let depth = 0; node && depth < 4; depth++) {
            const t = __fp.previousText(node, maxLength);
            if (t) return t;
            const parent = node.parentElement;
            if (!parent || parent === document.body || parent.tagName.toLowerCase() === 'form') break;
            if (__fp.controlCount(parent) > members.length) break;
            node = parent;
        }
        return '';
    },
    labelCandidates(el, maxLength) {
        let forLabel = null;
        if (el.id) forLabel = document.querySelector(`label[for="${CSS.escape(el.id)}"]`);
        return {
            aria: (el.getAttribute('aria-label') || '').trim(),
            labelledBy: __fp.byIds(el.getAttribute('aria-labelledby')),
            forLabel: forLabel ? __fp.text(forLabel) : '',
            enclosing: __fp.enclosingLabel(el),
            following: __fp.followingText(el, maxLength),
            sibling: __fp.siblingText(el, maxLength),
            placeholder: (el.getAttribute('placeholder') || '').trim(),
        };
    },
    describe(el, maxLength) {
        const tag = el.tagName.toLowerCase();
        const typeAttr = (el.getAttribute('type') || '').toLowerCase();
        const role = (el.getAttribute('role') || '').toLowerCase();
        const className = typeof el.className === 'string' ? el.className : (el.getAttribute('class') || '');
        const isChoice = tag === 'input' && (typeAttr === 'radio' || typeAttr === 'checkbox');
        const members = isChoice ? __fp.groupMembers(el) : [el];
        let value = '';
        if (isChoice) {
            const checked = members.find(m => m.checked);
            value = checked ? (checked.value || 'on') : '';
        } else if (tag === 'select') {
            const opt = el.selectedIndex >= 0 ? el.options[el.selectedIndex] : null;
            value = opt && opt.value ? __fp.text(opt) : '';
        } else if ('value' in el && typeof el.value === 'string') {
            value = el.value;
        } else {
            value = (el.getAttribute('aria-valuetext') || '').trim();
        }
        return {
            tag, typeAttr, role, className,
            name: el.getAttribute('name') || '',
            id: el.id || '',
            inputMode: (el.getAttribute('inputmode') || '').toLowerCase(),
            placeholder: (el.getAttribute('placeholder') || '').trim(),
            required: el.hasAttribute('required'),
            ariaRequired: el.getAttribute('aria-required') === 'true',
            multiline: el.getAttribute('aria-multiline') === 'true',
            labels: __fp.labelCandidates(el, maxLength),
            groupLabel: isChoice ? __fp.groupLabel(el, maxLength) : '',
            groupSize: members.length,
            value,
            isDropdown: tag === 'select' || role === 'combobox' || role === 'listbox'
                || /select|dropdown/i.test(className),
        };
    },
};
"""

ELEMENT_STATE_JS = """
(el) => ({
    disabled: !!el.disabled || el.hasAttribute('disabled') || el.getAttribute('aria-disabled') === 'true',
    readonly: !!el.readOnly || el.hasAttribute('readonly') || el.getAttribute('aria-readonly') === 'true',
    checked: !!el.checked,
    tag: el.tagName.toLowerCase(),
    type: (el.getAttribute('type') || '').toLowerCase(),
})
"""

# Uses the prototype setter so framework-controlled inputs see the change.
SET_VALUE_JS = """
(el, value) => {
    const proto = el.tagName.toLowerCase() === 'textarea'
        ? HTMLTextAreaElement.prototype : HTMLInputElement.prototype;
    const descriptor = Object.getOwnPropertyDescriptor(proto, 'value');
    if (descriptor && descriptor.set) {
        descriptor.set.call(el, value);
    } else {
        el.value = value;
    }
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
    return el.value;
}
"""

DISPATCH_EVENTS_JS = """
(el) => {
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
}
"""

DOM_STATS_JS = """
() => ({
    url: window.location.href,
    title: document.title,
    forms: document.querySelectorAll('form').length,
    inputs: document.querySelectorAll('input').length,
    textareas: document.querySelectorAll('textarea').length,
    selects: document.querySelectorAll('select').length,
    labels: document.querySelectorAll('label').length,
    comboboxes: document.querySelectorAll('[role="combobox"], [role="listbox"]').length,
    iframes: document.querySelectorAll('iframe').length,
})
"""


def css_attr(attribute: str, value: str) -> str:
    """Attribute selector with the value quoted and escaped."""
    return f'[{attribute}={json.dumps(value)}]'


class DOMUtils:
    """DOM helper functions."""

    @staticmethod
    async def is_visible(element: ElementHandle) -> bool:
        """
        Check if element is visible.

        Considers Playwright visibility plus a non-empty bounding box.
        """
        try:
            if not await element.is_visible():
                return False
            box = await element.bounding_box()
            if not box:
                return False
            return box['width'] >= 1 and box['height'] >= 1
        except PlaywrightError:
            return False

    @staticmethod
    async def get_element_state(element: ElementHandle) -> Dict[str, Any]:
        """Disabled/read-only/checked state of a live element."""
        return await element.evaluate(ELEMENT_STATE_JS)

    @staticmethod
    async def set_value(element: ElementHandle, value: str) -> str:
        """Assign through the value channel and notify listeners."""
        return await element.evaluate(SET_VALUE_JS, value)

    @staticmethod
    async def dispatch_input_events(element: ElementHandle):
        await element.evaluate(DISPATCH_EVENTS_JS)

    @staticmethod
    async def get_dom_stats(page: Page) -> Dict[str, Any]:
        """Counts of form controls on the page, for diagnostics."""
        try:
            return await page.evaluate(DOM_STATS_JS)
        except PlaywrightError:
            return {}

    @staticmethod
    async def first_match(page: Page, selector: str) -> Optional[ElementHandle]:
        """query_selector that treats an invalid selector as no match."""
        try:
            return await page.query_selector(selector)
        except PlaywrightError:
            return None
