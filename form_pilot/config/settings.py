"""
Configuration settings for Form Pilot.
Controls timeouts, browser behavior, retry policy and detection selectors.
"""

import os
from typing import Dict, Any, List, Optional

from dotenv import load_dotenv


class Settings:
    """Central configuration for discovery, filling and submission."""

    # Browser settings
    HEADLESS: bool = True
    BROWSER_TYPE: str = "chromium"
    VIEWPORT_WIDTH: int = 1280
    VIEWPORT_HEIGHT: int = 720
    USER_AGENT: str = (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) '
        'AppleWebKit/537.36 (KHTML, like Gecko) '
        'Chrome/120.0.0.0 Safari/537.36'
    )
    BROWSER_ARGS: List[str] = [
        '--disable-blink-features=AutomationControlled',
        '--disable-dev-shm-usage',
        '--no-sandbox',
        '--disable-setuid-sandbox',
    ]

    # Timeouts (in milliseconds)
    PAGE_LOAD_TIMEOUT: int = 30000  # 30 seconds
    NETWORK_IDLE_TIMEOUT: int = 5000
    JS_EXECUTION_BUFFER: int = 500  # extra wait for JS frameworks after load
    ELEMENT_RESOLVE_TIMEOUT: int = 2000
    SUBMIT_WAIT_TIMEOUT: int = 5000
    ERROR_SETTLE_DELAY: int = 500
    SUBMITTED_SETTLE_DELAY: int = 1000
    DROPDOWN_RENDER_DELAY: int = 400
    TYPING_DELAY: int = 30

    # Retry policy
    MAX_SUBMIT_ATTEMPTS: int = 3

    # Question generation
    QUESTION_TONE: str = "casual"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4.1-nano"
    OPENAI_TIMEOUT: float = 10.0
    QUESTION_MAX_RETRIES: int = 3
    QUESTION_RETRY_DELAY: float = 1.0  # seconds, multiplied by attempt

    # Discovery
    SIBLING_LABEL_MAX_LENGTH: int = 100
    TEST_ID_ATTRIBUTES: List[str] = ['data-testid', 'data-test', 'data-cy', 'data-qa']
    WIDGET_SELECTORS: List[str] = [
        '[role="combobox"]',
        '[role="listbox"]',
        '[role="textbox"]',
        '[role="searchbox"]',
        '.react-select__control',
        '.mantine-Select-input',
        '.ant-select-selector',
        '.MuiSelect-select',
        '.select2-selection',
        '.choices__inner',
        '.vs__dropdown-toggle',
    ]
    CUSTOM_OPTION_SELECTORS: List[str] = [
        '[role="option"]',
        '.react-select__option',
        '.mantine-Select-option',
        '.ant-select-item-option',
        '.MuiMenuItem-root',
        '.select2-results__option',
        '.choices__item--choice',
        '.vs__dropdown-option',
    ]

    # Validation error detection
    ERROR_FIELD_SELECTORS: List[str] = [
        '[aria-invalid="true"]',
        'input:invalid',
        'select:invalid',
        'textarea:invalid',
        '.error',
        '.invalid',
        '.is-invalid',
        '.has-error',
        '[data-invalid="true"]',
        '.mantine-Input-invalid',
        '.ant-form-item-has-error',
        '.Mui-error',
    ]
    ERROR_MESSAGE_SELECTORS: List[str] = [
        '.error-message',
        '.validation-error',
        '.field-error',
        '.invalid-feedback',
        '.help-block.error',
        '[role="alert"]',
        '.mantine-Input-error',
        '.ant-form-item-explain-error',
        '.MuiFormHelperText-root.Mui-error',
    ]
    FIELD_CONTAINER_SELECTORS: List[str] = [
        '.form-group', '.form-field', '.field', '.input-group',
        '.form-item', '.mantine-Input-wrapper', '.ant-form-item', 'fieldset',
    ]

    # Submit control lookup, in priority order
    SUBMIT_SELECTORS: List[str] = [
        'input[type="submit"]',
        'button[type="submit"]',
        'input[value*="submit" i]',
        'input[value*="send" i]',
        '.submit-btn',
        '#submit',
        '[data-testid="submit"]',
        '[data-test="submit"]',
    ]
    SUBMIT_KEYWORDS: List[str] = [
        'submit', 'send', 'continue', 'save', 'next', 'apply',
        'register', 'sign up', 'finish', 'confirm',
    ]

    # Outcome detection
    SUCCESS_SELECTORS: List[str] = [
        '.success', '.success-message', '.submitted',
        '.thank-you', '.confirmation', '[role="status"]',
    ]
    SUCCESS_URL_TOKENS: List[str] = ['success', 'thank', 'submitted', 'confirmation']
    ERROR_INDICATOR_SELECTORS: List[str] = [
        '.error', '.validation-error', '.field-error', '.alert-danger',
        '.invalid-feedback', '[aria-invalid="true"]',
    ]

    # Cancellation vocabulary for every human prompt
    CANCEL_WORDS: set = {'quit', 'exit', 'cancel', 'abort', 'stop'}

    # Diagnostics (None disables snapshots of unresolved fields)
    DIAGNOSTICS_DIR: Optional[str] = None

    # Misc
    DEFAULT_FORM_URL: str = "https://www.selenium.dev/selenium/web/web-form.html"

    # Logging
    LOG_LEVEL: str = "INFO"
    DEBUG_MODE: bool = False

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return {
            key: value for key, value in cls.__dict__.items()
            if key.isupper() and not callable(value) and key != 'OPENAI_API_KEY'
        }

    @classmethod
    def update(cls, **kwargs):
        """Update settings dynamically."""
        for key, value in kwargs.items():
            if hasattr(cls, key.upper()):
                setattr(cls, key.upper(), value)

    @classmethod
    def load_env(cls, env_file: Optional[str] = None):
        """
        Override settings from environment variables (and a .env file).

        Args:
            env_file: Optional explicit path to a .env file
        """
        load_dotenv(env_file)

        cls.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY") or cls.OPENAI_API_KEY
        cls.OPENAI_MODEL = os.getenv("OPENAI_MODEL", cls.OPENAI_MODEL)
        cls.PAGE_LOAD_TIMEOUT = int(os.getenv("FORM_TIMEOUT", str(cls.PAGE_LOAD_TIMEOUT)))
        cls.HEADLESS = os.getenv("HEADLESS_MODE", str(cls.HEADLESS)).lower() in ("true", "1", "yes")
        cls.LOG_LEVEL = os.getenv("LOG_LEVEL", cls.LOG_LEVEL).upper()
        cls.DEFAULT_FORM_URL = os.getenv("DEFAULT_FORM_URL", cls.DEFAULT_FORM_URL)
        cls.MAX_SUBMIT_ATTEMPTS = int(os.getenv("MAX_SUBMIT_ATTEMPTS", str(cls.MAX_SUBMIT_ATTEMPTS)))
        cls.QUESTION_TONE = os.getenv("QUESTION_TONE", cls.QUESTION_TONE)
        cls.DIAGNOSTICS_DIR = os.getenv("DIAGNOSTICS_DIR") or cls.DIAGNOSTICS_DIR
