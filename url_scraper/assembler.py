"""
Result assembler: the translation boundary between pipeline outcomes and
the ScrapeResult envelope.

The failure messages are the ones the existing front end displays, so they
are reproduced verbatim.
"""

from typing import Union

from .exceptions import ErrorKind, HTTPStatusError, ScraperError
from .logger import get_module_logger
from .schemas import Payload, ScrapeResult

logger = get_module_logger("assembler")

HTTP_ERROR_MESSAGE = "HTTPエラー: {status} - {status_text}"

FAILURE_MESSAGES = {
    ErrorKind.INVALID_URL: "有効なURLを入力してください。URLはhttp://またはhttps://で始まる必要があります。",
    ErrorKind.TIMEOUT: "リクエストがタイムアウトしました。URLが正しいか確認してください。",
    ErrorKind.HTTP_ERROR: HTTP_ERROR_MESSAGE,
    ErrorKind.SERVER_ERROR: HTTP_ERROR_MESSAGE,
    ErrorKind.NO_RESPONSE: "サーバーからの応答がありませんでした。URLが正しいか、サーバーが稼働しているか確認してください。",
    ErrorKind.PARSE_ERROR: "Extraction error: {detail}",
    ErrorKind.UNKNOWN: "スクレイピングエラー: {detail}",
}


def failure_message(error: ScraperError) -> str:
    """Human-readable message for a failure."""
    template = FAILURE_MESSAGES.get(error.kind, FAILURE_MESSAGES[ErrorKind.UNKNOWN])
    if isinstance(error, HTTPStatusError):
        return template.format(status=error.status, status_text=error.status_text)
    return template.format(detail=error.message)


def assemble(outcome: Union[Payload, ScraperError]) -> ScrapeResult:
    """
    Wrap an extraction payload or a scraper error into a ScrapeResult.

    Args:
        outcome: Flat text / field mapping on success, ScraperError on failure

    Returns:
        ScrapeResult
    """
    if isinstance(outcome, ScraperError):
        message = failure_message(outcome)
        logger.debug(f"Assembled failure ({outcome.kind.value}): {message}")
        return ScrapeResult(success=False, error=message, error_kind=outcome.kind)

    return ScrapeResult(success=True, data=outcome)
