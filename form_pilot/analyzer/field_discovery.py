"""
Field Discovery - Scan a rendered page for fillable controls.
Extracts raw control descriptions in one in-page pass, then normalizes
and groups them into Field objects.
"""

from dataclasses import replace
from typing import List, Dict, Any, Optional

from playwright.async_api import Page, Error as PlaywrightError

from ..config.settings import Settings
from ..exceptions import DiscoveryError
from ..models.field import Field
from ..utils.dom_utils import CONTROL_QUERY, LABEL_HELPERS_JS
from ..utils.logger import logger
from .field_classifier import FieldClassifier


SCAN_CONTROLS_JS = "(config) => {" + LABEL_HELPERS_JS + r"""
    const maxLength = config.maxLabelLength;
    const skipTypes = ['hidden', 'submit', 'button', 'reset', 'image'];
    const selector = [config.controlSelector].concat(config.widgetSelectors).join(', ');
    const accepted = [];
    const results = [];

    const countOf = (sel) => {
        try { return document.querySelectorAll(sel).length; } catch (e) { return 0; }
    };
    const quote = (value) => JSON.stringify(value);
    const matchesAny = (el, selectors) => selectors.some(sel => {
        try { return el.matches(sel); } catch (e) { return false; }
    });
    const pathOf = (el) => {
        const parts = [];
        let node = el;
        while (node && node.nodeType === 1 && node !== document.body && node !== document.documentElement) {
            let index = 1;
            let sib = node.previousElementSibling;
            while (sib) {
                if (sib.tagName === node.tagName) index++;
                sib = sib.previousElementSibling;
            }
            parts.unshift(`${node.tagName.toLowerCase()}:nth-of-type(${index})`);
            node = node.parentElement;
        }
        parts.unshift('body');
        return parts.join(' > ');
    };
    const isPopupList = (el) => {
        if (!el.id) return false;
        const ref = CSS.escape(el.id);
        return !!document.querySelector(`[aria-controls~="${ref}"], [aria-owns~="${ref}"]`);
    };

    document.querySelectorAll(selector).forEach((el) => {
        if (accepted.some(widget => widget !== el && widget.contains(el))) return;

        const tag = el.tagName.toLowerCase();
        const typeAttr = (el.getAttribute('type') || '').toLowerCase();
        if (tag === 'input' && skipTypes.includes(typeAttr)) return;

        const role = (el.getAttribute('role') || '').toLowerCase();
        const isNative = ['input', 'select', 'textarea'].includes(tag);
        const isChoice = tag === 'input' && (typeAttr === 'radio' || typeAttr === 'checkbox');
        const isWidget = tag !== 'select' && (role === 'combobox' || role === 'listbox'
            || matchesAny(el, config.widgetSelectors.filter(s => !s.startsWith('[role'))));
        if (!isNative && !isWidget && role !== 'textbox' && role !== 'searchbox') return;
        if (role === 'listbox' && isPopupList(el)) return;
        if (!isChoice && el.getClientRects().length === 0) return;

        if (!isNative || isWidget) accepted.push(el);

        const raw = __fp.describe(el, maxLength);
        let testIdAttr = '';
        let testId = '';
        for (const attr of config.testIdAttributes) {
            const value = el.getAttribute(attr);
            if (value) { testIdAttr = attr; testId = value; break; }
        }
        raw.testIdAttr = testIdAttr;
        raw.testId = testId;
        raw.nameCount = raw.name ? countOf(`${tag}[name=${quote(raw.name)}]`) : 0;
        raw.idCount = raw.id ? countOf(`[id=${quote(raw.id)}]`) : 0;
        raw.testIdCount = testId ? countOf(`[${testIdAttr}=${quote(testId)}]`) : 0;
        raw.path = pathOf(el);
        raw.isCustom = isWidget;
        raw.value = isChoice ? (el.getAttribute('value') || 'on') : raw.value;
        raw.min = el.getAttribute('min') || '';
        raw.max = el.getAttribute('max') || '';
        raw.minLength = el.minLength > 0 ? el.minLength : null;
        raw.maxLength = el.maxLength > 0 ? el.maxLength : null;
        raw.options = tag === 'select'
            ? Array.from(el.options).map(o => ({ text: __fp.text(o), value: o.value }))
            : [];
        results.push(raw);
    });
    return results;
}
"""


class FieldDiscovery:
    """Discovers fillable fields on a rendered page."""

    def __init__(self, page: Page):
        self.page = page

    async def discover(self, custom_only: bool = False) -> List[Field]:
        """
        Complete discovery pipeline.

        Args:
            custom_only: Only return custom (non-native) widgets

        Returns:
            Fields in document order
        """
        logger.step(3, "Scanning page for form controls")
        raw_controls = await self._scan_controls()
        logger.metric("Controls scanned", len(raw_controls))

        logger.step(4, "Normalizing controls into fields")
        fields = self._normalize(raw_controls)

        if custom_only:
            fields = [f for f in fields if f.is_custom]

        logger.metric("Fields discovered", len(fields))
        logger.metric("Required fields", sum(1 for f in fields if f.required))
        logger.success(f"Field discovery complete: {len(fields)} fields")
        return fields

    async def _scan_controls(self) -> List[Dict[str, Any]]:
        """
        Run the in-page scan.

        Raises:
            DiscoveryError: The page could not be evaluated
        """
        try:
            return await self.page.evaluate(SCAN_CONTROLS_JS, {
                'controlSelector': CONTROL_QUERY,
                'widgetSelectors': Settings.WIDGET_SELECTORS,
                'testIdAttributes': Settings.TEST_ID_ATTRIBUTES,
                'maxLabelLength': Settings.SIBLING_LABEL_MAX_LENGTH,
            })
        except PlaywrightError as e:
            raise DiscoveryError(f"Could not scan {self.page.url}: {e}") from e

    @staticmethod
    def _normalize(raw_controls: List[Dict[str, Any]]) -> List[Field]:
        """
        Convert raw controls to fields, collapsing radio/checkbox groups.

        A group takes the position of its first member. Controls that
        cannot be classified are skipped.
        """
        groups: Dict[tuple, List[Dict[str, Any]]] = {}
        ordered: List[Any] = []

        for raw in raw_controls:
            key = FieldDiscovery._group_key(raw)
            if key is None:
                ordered.append(raw)
            elif key not in groups:
                groups[key] = [raw]
                ordered.append(key)
            else:
                groups[key].append(raw)

        fields = []
        for entry in ordered:
            if isinstance(entry, tuple):
                members = groups[entry]
                field = (
                    FieldClassifier.to_group_field(members) if len(members) > 1
                    else FieldClassifier.to_field(members[0])
                )
            else:
                field = FieldClassifier.to_field(entry)

            if field is None:
                logger.debug(f"Skipped unclassifiable control: {entry}")
                continue
            fields.append(field)
            logger.debug(f"Discovered {field!r}")

        return FieldDiscovery._unique_keys(fields)

    @staticmethod
    def _unique_keys(fields: List[Field]) -> List[Field]:
        """Suffix repeated cache keys with an ordinal: email, email_2, email_3."""
        used = set()
        unique = []
        for field in fields:
            key = field.identity
            ordinal = 1
            while key in used:
                ordinal += 1
                key = f"{field.identity}_{ordinal}"
            used.add(key)
            unique.append(field if key == field.identity else replace(field, key=key))
        return unique

    @staticmethod
    def _group_key(raw: Dict[str, Any]) -> Optional[tuple]:
        if raw.get('tag') != 'input' or raw.get('typeAttr') not in ('radio', 'checkbox'):
            return None
        if not raw.get('name'):
            return None
        return (raw['typeAttr'], raw['name'])
