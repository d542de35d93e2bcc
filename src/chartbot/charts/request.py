"""Validation of render requests and renderer argument construction.

:func:`validate_request` checks that a :class:`RenderRequest` is
complete and attaches the widget markup when the request renders
inline HTML.  :func:`build_arguments` then turns the request into the
``capture-website`` flag list.  The flag order is fixed so that logged
command lines and test expectations are reproducible.
"""

from __future__ import annotations

import logging
from typing import List

from ..config import IMAGE_FORMAT, WIDGET_LOCALE
from ..errors import ValidationError
from .models import RenderRequest
from .widgets import build_markup

logger = logging.getLogger(__name__)


def validate_request(request: RenderRequest, *, locale: str = WIDGET_LOCALE) -> RenderRequest:
    """Check ``request`` for required fields and normalise it in place.

    Parameters
    ----------
    request : RenderRequest
        The request to validate.  It is modified in place: ``format`` is
        fixed to PNG and ``html`` receives the widget markup for inline
        requests or is cleared for remote ones.
    locale : str, optional
        Widget locale passed to the markup builder.

    Returns
    -------
    RenderRequest
        The same request object, for chaining.

    Raises
    ------
    ValidationError
        If the symbol, description (overview mode only), input marker or
        output name is empty.
    """
    request.format = IMAGE_FORMAT
    if not request.symbol:
        raise ValidationError("missing-symbol", "Must provide symbol")
    # Detail mode labels the chart with the symbol itself.
    if not request.description and not request.technical_analysis:
        raise ValidationError("missing-description", "Must provide description")
    if not request.input:
        raise ValidationError("missing-input", "Must provide input")
    if not request.output:
        raise ValidationError("missing-output", "Must provide output")
    if request.is_inline:
        request.html = build_markup(request, locale=locale)
    else:
        request.html = ""
    return request


def build_arguments(request: RenderRequest) -> List[str]:
    """Return the ordered ``capture-website`` arguments for ``request``.

    Options left at zero or ``False`` are omitted.  The input source is
    not included; inline markup travels on stdin.
    """
    if not request.output:
        raise ValidationError("missing-output", "Must provide output")
    args: List[str] = []
    if request.height:
        args += ["--height", str(request.height)]
    if request.width:
        args += ["--width", str(request.width)]
    if request.delay:
        args += ["--delay", str(request.delay)]
    if request.overwrite:
        args.append("--overwrite")
    if request.dark_mode:
        args.append("--dark-mode")
    args += ["--output", str(request.file_path)]
    logger.debug("renderer arguments: %s", args)
    return args


__all__ = ["validate_request", "build_arguments"]
