"""
Route helpers - normalising and combining repository routes.
"""

from .errors import InvalidRoute


def normalize_route(route: str) -> str:
    """
    Normalize a route to '/'-separated segments without leading,
    trailing or duplicate separators.

    Raises:
        InvalidRoute: If the route is not a string or contains '..'
    """
    if not isinstance(route, str):
        raise InvalidRoute(f"Route must be a string, got {type(route).__name__}")

    segments = [s for s in route.replace('\\', '/').split('/') if s and s != '.']
    if '..' in segments:
        raise InvalidRoute(f"Route {route!r} must not contain '..'")

    return '/'.join(segments)


def combine_routes(parent: str, child: str) -> str:
    """
    Combine an item route and a file route into a fully-qualified route.

    Args:
        parent: Route of the parent item (may be empty for the root item)
        child: Route of the file, relative to the parent

    Returns:
        The combined, normalized route

    Raises:
        InvalidRoute: If either part is malformed or the child is empty
    """
    parent_route = normalize_route(parent)
    child_route = normalize_route(child)

    if not child_route:
        raise InvalidRoute(f"Cannot combine {parent!r} with empty route {child!r}")

    if not parent_route:
        return child_route
    return f"{parent_route}/{child_route}"
