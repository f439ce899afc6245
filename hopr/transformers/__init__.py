"""Route source transforms keyed by route role."""

from __future__ import annotations

from typing import Optional

from .api import exported_methods, transform_api_route
from .common import TransformResult
from .layout import VARIANTS, transform_layout_to_root
from .page import RegexPageStrategy, RouteTransformStrategy, StructuralPageStrategy, page_strategy
from ..logging import get_logger
from ..models import UNSUPPORTED_ROLES, RouteDescriptor


class CodeTransformer:
    """Dispatches each route to the rewrite for its role; no state is kept between routes."""

    def __init__(
        self,
        variant: str = "shell",
        page_strategy_name: str | RouteTransformStrategy = "structural",
    ) -> None:
        if variant not in VARIANTS:
            raise ValueError(f"Unknown root route variant: {variant}")
        self.variant = variant
        if isinstance(page_strategy_name, str):
            self.page_strategy = page_strategy(page_strategy_name)
        else:
            self.page_strategy = page_strategy_name
        self.logger = get_logger("transformers")

    @staticmethod
    def skip_reason(route: RouteDescriptor) -> Optional[str]:
        """Explain why ``route`` produces no output, or None when it is transformed."""
        if route.role in UNSUPPORTED_ROLES:
            return f"{route.role} files are not migrated"
        if route.role == "layout" and not route.is_root:
            return "nested layouts are not migrated"
        return None

    def transform(self, route: RouteDescriptor, route_id: str) -> Optional[TransformResult]:
        """Return the rewritten module for ``route``, or None for roles that are skipped.

        Raises ``TransformError`` when the source cannot be parsed or has an
        unsupported shape.
        """
        if self.skip_reason(route) is not None:
            return None
        self.logger.debug("Transforming %s (%s) as %s", route.source_path, route.role, route_id)
        if route.role == "layout":
            return transform_layout_to_root(route.content, self.variant, route.source_path)
        if route.role == "api":
            return transform_api_route(route.content, route_id, route.source_path)
        return self.page_strategy.transform_page(route.content, route_id, route.source_path)


__all__ = [
    "CodeTransformer",
    "RegexPageStrategy",
    "RouteTransformStrategy",
    "StructuralPageStrategy",
    "TransformResult",
    "exported_methods",
    "page_strategy",
    "transform_api_route",
    "transform_layout_to_root",
]
