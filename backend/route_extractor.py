"""
Pull top-level route handler blocks out of a monolithic route file.

A block starts at a line beginning ``app.<method>('<path>',`` and runs up to,
but not including, the next line that begins with ``app.``. A handler with
no ``app.`` line after it is not extracted.
"""

import re
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class RoutePattern:
    name: str
    method: str
    path: str
    target: str

    def compile(self) -> "re.Pattern":
        prefix = rf"^app\.{re.escape(self.method)}\('{re.escape(self.path)}',"
        return re.compile(prefix + r".*?(?=^app\.)", re.MULTILINE | re.DOTALL)


DEFAULT_PATTERNS = (
    RoutePattern("networks", "get", "/networks", "src/routes/public/networks.tsx"),
    RoutePattern("map", "get", "/map", "src/routes/public/map.tsx"),
    RoutePattern("suggest-church-get", "get", "/suggest-church", "src/routes/public/suggest-church.tsx"),
    RoutePattern("suggest-church-post", "post", "/suggest-church", "src/routes/public/suggest-church.tsx"),
    RoutePattern("admin-monitoring", "get", "/admin/monitoring", "src/routes/admin-core/monitoring.tsx"),
    RoutePattern("admin-dashboard", "get", "/admin", "src/routes/admin-core/dashboard.tsx"),
)


def extract_routes(source: str, patterns: Iterable[RoutePattern] = DEFAULT_PATTERNS) -> dict:
    """Map pattern name -> handler source for every pattern that matched."""
    matches = {}
    for pattern in patterns:
        match = pattern.compile().search(source)
        if match:
            matches[pattern.name] = match.group(0)
    return matches
