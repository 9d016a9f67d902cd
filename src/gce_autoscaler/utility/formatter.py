import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_camel_case(snake_str: str) -> str:
    head, *rest = snake_str.split("_")
    return head + "".join(part.title() for part in rest)


def to_snake_case(camel_str: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", camel_str).lower()


def camelcase_dict(d: Any) -> Any:
    """Recursively rename dict keys to camelCase, the key style of the overlord's JSON configuration"""
    if isinstance(d, dict):
        return {to_camel_case(k) if isinstance(k, str) else k: camelcase_dict(v) for k, v in d.items()}
    if isinstance(d, (list, tuple)):
        return [camelcase_dict(i) for i in d]
    return d


def snakecase_dict(d: Any) -> Any:
    if isinstance(d, dict):
        return {to_snake_case(k) if isinstance(k, str) else k: snakecase_dict(v) for k, v in d.items()}
    if isinstance(d, list):
        return [snakecase_dict(i) for i in d]
    return d


def format_id_list(ids: Any, limit: int = 10) -> str:
    """Render instance ids for log lines, truncating long lists"""
    ordered = sorted(ids)
    if len(ordered) <= limit:
        return f"[{', '.join(ordered)}]"

    return f"[{', '.join(ordered[:limit])}, ... +{len(ordered) - limit} more]"
