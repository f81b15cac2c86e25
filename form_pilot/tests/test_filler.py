"""
Browser tests for the filling engine.
"""

import pytest

from form_pilot.browser.browser_manager import BrowserManager
from form_pilot.engine.filler import FieldFiller, FillStatus
from form_pilot.exceptions import FieldFillError
from form_pilot.models.answer import ResponseCache
from form_pilot.models.field import Field, FieldType


FORM = """
<!DOCTYPE html>
<html>
<body>
    <form>
        <label for="name">Name</label>
        <input id="name" name="name">

        <input type="date" id="dob" name="dob">

        <input type="checkbox" id="news" name="news"
               onclick="window.clicks = (window.clicks || 0) + 1">
        <label for="news">Newsletter</label>

        <select id="country" name="country">
            <option value="">Choose</option>
            <option value="de">Germany</option>
            <option value="fr">France</option>
        </select>

        <label><input type="radio" name="plan" value="basic"> Basic</label>
        <label><input type="radio" name="plan" value="pro"> Pro</label>

        <label for="nick">Nickname</label>
        <input id="nick">

        <input id="locked" disabled>
        <input type="file" id="cv">
    </form>
</body>
</html>
"""


def text_field(label, selector, **kwargs):
    return Field(label=label, selector=selector, field_type=kwargs.pop('field_type', FieldType.TEXT), **kwargs)


@pytest.mark.asyncio
async def test_checkbox_fill_is_idempotent():
    """Filling a checkbox twice with a truthy token clicks only once."""
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(FORM)
        filler = FieldFiller(page)
        field = text_field('Newsletter', '#news', field_type=FieldType.CHECKBOX)

        assert await filler.fill(field, 'yes') == FillStatus.FILLED
        assert await filler.fill(field, 'yes') == FillStatus.FILLED

        assert await page.evaluate("window.clicks") == 1
        assert await page.is_checked('#news')


@pytest.mark.asyncio
async def test_text_date_and_select():
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(FORM)
        filler = FieldFiller(page)

        await filler.fill(text_field('Name', '#name'), 'Ada Lovelace')
        await filler.fill(text_field('Date of birth', '#dob', field_type=FieldType.DATE), '2024-03-15')
        await filler.fill(text_field('Country', '#country', field_type=FieldType.SELECT), 'France')

        assert await page.input_value('#name') == 'Ada Lovelace'
        assert await page.input_value('#dob') == '2024-03-15'
        assert await page.input_value('#country') == 'fr'


@pytest.mark.asyncio
async def test_select_without_match_raises():
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(FORM)

        with pytest.raises(FieldFillError):
            await FieldFiller(page).fill(
                text_field('Country', '#country', field_type=FieldType.SELECT), 'Atlantis'
            )


@pytest.mark.asyncio
async def test_group_member_is_checked_by_option():
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(FORM)
        field = Field(
            label='Plan',
            selector='input[type="radio"][name="plan"]',
            field_type=FieldType.RADIO,
            options=('Basic', 'Pro'),
            option_values=('basic', 'pro'),
            is_group=True,
        )

        assert await FieldFiller(page).fill(field, 'Pro') == FillStatus.FILLED
        assert await page.is_checked('input[value="pro"]')
        assert not await page.is_checked('input[value="basic"]')


@pytest.mark.asyncio
async def test_falls_back_to_label_search():
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(FORM)
        field = text_field('Nickname', '#stale-selector', alternate_selectors=('#also-stale',))

        assert await FieldFiller(page).fill(field, 'Ada') == FillStatus.FILLED
        assert await page.input_value('#nick') == 'Ada'


@pytest.mark.asyncio
async def test_fill_all_reports_each_field():
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(FORM)

        fields = [
            text_field('Name', '#name', name='name'),
            text_field('Locked', '#locked', element_id='locked'),
            text_field('CV', '#cv', field_type=FieldType.FILE, element_id='cv'),
            text_field('Missing', '#missing', element_id='missing'),
            text_field('Country', '#country', field_type=FieldType.SELECT, name='country'),
            text_field('Nickname', '#nick', element_id='nick'),
        ]
        cache = ResponseCache()
        cache.set('name', 'Grace')
        cache.set('locked', 'value')
        cache.set('cv', 'resume.pdf')
        cache.set('missing', 'value')
        cache.set('country', 'Atlantis')

        reports = await FieldFiller(page).fill_all(fields, cache)
        statuses = [r.status for r in reports]

        assert statuses == [
            FillStatus.FILLED,
            FillStatus.SKIPPED,
            FillStatus.SKIPPED,
            FillStatus.NOT_FOUND,
            FillStatus.FAILED,
            FillStatus.SKIPPED,
        ]
        assert await page.input_value('#name') == 'Grace'


DROPDOWN = """
<!DOCTYPE html>
<html>
<body>
    <div id="color" role="combobox" tabindex="0"
         onclick="document.getElementById('colors').hidden = false">Choose a color</div>
    <ul id="colors" role="listbox" hidden>
        <li role="option" onclick="window.picked = this.textContent">Red</li>
        <li role="option" onclick="window.picked = this.textContent">Green</li>
    </ul>

    <input id="city" role="combobox"
           onkeydown="if (event.key === 'Enter') window.chosen = this.value">
</body>
</html>
"""


def dropdown_field(label, selector):
    return Field(label=label, selector=selector, field_type=FieldType.SELECT, is_custom=True)


@pytest.mark.asyncio
async def test_read_custom_options_opens_the_list():
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(DROPDOWN)

        options = await FieldFiller(page).read_custom_options(dropdown_field('Color', '#color'))
        assert options == ['Red', 'Green']


@pytest.mark.asyncio
async def test_custom_dropdown_clicks_matching_option():
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(DROPDOWN)

        assert await FieldFiller(page).fill(dropdown_field('Color', '#color'), 'green') == FillStatus.FILLED
        assert await page.evaluate("window.picked") == 'Green'


@pytest.mark.asyncio
async def test_custom_dropdown_without_options_types_and_presses_enter():
    async with BrowserManager(headless=True) as browser_manager:
        page = await browser_manager.new_page()
        await page.set_content(DROPDOWN)

        assert await FieldFiller(page).fill(dropdown_field('City', '#city'), 'Berlin') == FillStatus.FILLED
        assert await page.evaluate("window.chosen") == 'Berlin'
        assert await page.evaluate("window.picked === undefined")
