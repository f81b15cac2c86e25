"""
Form Pilot - Main Entry Point
Conversational form filling from the command line.
"""

import asyncio
import argparse
import sys
from typing import Optional

from .config.settings import Settings
from .engine.form_runner import FormRunner, FormRunResult
from .interaction.answer_channel import ConsoleAnswerChannel
from .interaction.question_provider import build_provider
from .utils.logger import logger


async def fill_form(
    url: str,
    headless: bool = True,
    timeout: Optional[int] = None,
    use_ai: bool = True,
    confirm: bool = True,
    output_file: Optional[str] = None,
) -> FormRunResult:
    """
    Fill a web form by asking the user one question per field.

    Args:
        url: Form page URL
        headless: Run browser in headless mode
        timeout: Page load timeout in ms
        use_ai: Phrase questions with OpenAI when a key is configured
        confirm: Ask before starting to collect answers
        output_file: Optional path for the JSON submission record

    Returns:
        FormRunResult
    """
    runner = FormRunner(
        provider=build_provider(use_ai),
        channel=ConsoleAnswerChannel(),
        confirm=confirm,
    )
    result = await runner.run_form(url, timeout=timeout, headless=headless)

    if result.submission:
        print("\n" + result.submission.summary())
        if output_file:
            result.submission.save_to_file(output_file)
            logger.success(f"Submission saved to: {output_file}")

    if result.success:
        print("Form submitted successfully.")
    else:
        print(f"Form was not submitted ({result.status.value}): {result.error}")
        for error in result.validation_errors:
            print(f"  - {error.to_user_friendly_string()}")

    return result


def main():
    """CLI entry point."""
    Settings.load_env()

    parser = argparse.ArgumentParser(
        description="Form Pilot - Fill web forms through a guided conversation"
    )

    parser.add_argument(
        '--url',
        type=str,
        default=Settings.DEFAULT_FORM_URL,
        help=f'Form URL (default: {Settings.DEFAULT_FORM_URL})'
    )

    parser.add_argument(
        '--timeout',
        type=int,
        default=Settings.PAGE_LOAD_TIMEOUT,
        help='Page load timeout in ms'
    )

    parser.add_argument(
        '--no-headless',
        action='store_true',
        help='Run browser in visible mode'
    )

    parser.add_argument(
        '--tone',
        type=str,
        default=Settings.QUESTION_TONE,
        help='Tone of generated questions (e.g. casual, formal)'
    )

    parser.add_argument(
        '--max-attempts',
        type=int,
        default=Settings.MAX_SUBMIT_ATTEMPTS,
        help='Maximum submit attempts, including correction rounds'
    )

    parser.add_argument(
        '--output',
        type=str,
        help='Output JSON file path (optional)'
    )

    parser.add_argument(
        '--diagnostics-dir',
        type=str,
        default=Settings.DIAGNOSTICS_DIR,
        help='Directory for HTML snapshots of fields that could not be located'
    )

    parser.add_argument(
        '--no-ai',
        action='store_true',
        help='Use template questions instead of OpenAI'
    )

    parser.add_argument(
        '--yes',
        action='store_true',
        help='Skip the confirmation prompt'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args()

    Settings.update(
        question_tone=args.tone,
        max_submit_attempts=args.max_attempts,
        diagnostics_dir=args.diagnostics_dir,
        headless=not args.no_headless,
    )

    if args.debug:
        Settings.LOG_LEVEL = "DEBUG"
        Settings.DEBUG_MODE = True
    logger.set_level(Settings.LOG_LEVEL)

    try:
        result = asyncio.run(fill_form(
            url=args.url,
            headless=Settings.HEADLESS,
            timeout=args.timeout,
            use_ai=not args.no_ai,
            confirm=not args.yes,
            output_file=args.output,
        ))
    except KeyboardInterrupt:
        logger.warning("\nRun interrupted by user")
        sys.exit(130)

    sys.exit(0 if result.success else 1)


if __name__ == '__main__':
    main()
