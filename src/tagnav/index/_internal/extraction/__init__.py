"""Component extraction from TypeScript sources."""

from tagnav.index._internal.extraction.components import (
    COMPONENT_QUERY,
    MEMBER_QUERY,
    ComponentExtractor,
)

__all__ = ["COMPONENT_QUERY", "MEMBER_QUERY", "ComponentExtractor"]
