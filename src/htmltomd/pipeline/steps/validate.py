"""ValidateStep and NameStep - URL checks before any network access."""

import logging
from typing import Optional

from ...errors import InvalidURLError
from ...naming import derive_filename
from ...security.url_validator import UrlValidator
from ..base import EventEmitter, PageContext

logger = logging.getLogger(__name__)


class ValidateStep:
    """
    Pipeline step that applies the URL policy.

    Raises InvalidURLError when the URL is rejected, before anything is
    fetched.
    """

    name = "validate"

    def __init__(self, url_validator: UrlValidator) -> None:
        self._url_validator = url_validator

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        result = self._url_validator.validate(ctx.url)
        if not result.is_valid:
            logger.info(f"Rejected {ctx.url}: {result.rejection_reason}")
            raise InvalidURLError(f"URL not allowed: {result.rejection_reason}", url=ctx.url)

        logger.debug(f"Validated {ctx.url}")
        return ctx


class NameStep:
    """Pipeline step that derives the output filename from the URL."""

    name = "name"

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        ctx.filename = derive_filename(ctx.url)
        return ctx
