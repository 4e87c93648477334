"""Route merger: declared routes -> per-path operations.

A service may route the same action on the same path to several handlers,
each expecting a different payload type. Swagger allows one operation per
(path, action), so such routes are merged: parameters are concatenated in
declaration order and descriptions joined with " / ".
"""

import logging
from typing import Iterable

from api_doc_assembler.assembler.classifier import Classifier
from api_doc_assembler.assembler.document import Operation, PathItem
from api_doc_assembler.metadata.base import Action, RouteDeclaration, SupportLevel

logger = logging.getLogger(__name__)

DESCRIPTION_SEPARATOR = " / "


def _is_blank(text: str | None) -> bool:
    return text is None or not text.strip()


def merge_operations(dest: Operation | None, source: Operation) -> Operation:
    """Fold ``source`` into ``dest``; the first operation keeps its responses."""
    if dest is None:
        return source
    dest.add_parameters(source.parameters or [])
    if not _is_blank(dest.description) and not _is_blank(source.description):
        dest.description = f"{dest.description}{DESCRIPTION_SEPARATOR}{source.description}"
    elif not _is_blank(source.description):
        dest.description = source.description
    return dest


class RouteMerger:
    """Groups one resource's routes by path suffix and action."""

    def __init__(
        self,
        classifier: Classifier,
        tag: str,
        support_level: SupportLevel = SupportLevel.DEPRECATED,
    ):
        self.classifier = classifier
        self.tag = tag
        self.support_level = support_level

    def merge(self, routes: Iterable[RouteDeclaration]) -> dict[str, PathItem]:
        """Return path suffix -> operations, suffixes in first-seen order.

        A suffix whose routes are all below the support threshold maps to an
        empty PathItem. Raises UnknownActionError for an action Swagger
        cannot express.
        """
        groups: dict[str, PathItem] = {}
        for route in routes:
            path = groups.setdefault(route.path or "", PathItem())

            level = route.support_level
            if level is not None and level.is_below(self.support_level):
                logger.debug(
                    "Skipping %s %r: %s is below %s",
                    route.action, route.path, level.value, self.support_level.value,
                )
                continue

            action = Action.parse(route.action, route.description or "")
            op = self.operation(route)
            path.set_operation(action, merge_operations(path.operation(action), op))
        return groups

    def operation(self, route: RouteDeclaration) -> Operation:
        shape = self.classifier.classify(route)
        op = Operation(tags=[self.tag], description=route.description)
        if route.support_level == SupportLevel.DEPRECATED:
            op.deprecated = True
        op.add_parameters(shape.parameters)
        op.responses = shape.responses or self.classifier.default_responses(route.response_type)
        if shape.consumes:
            op.consumes = shape.consumes
        if shape.produces:
            op.produces = shape.produces
        return op
