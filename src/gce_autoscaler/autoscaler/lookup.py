import logging
from typing import Iterator, List, Optional, Sequence

from gce_autoscaler.autoscaler.service import InstanceGroupService
from gce_autoscaler.autoscaler.types import InstanceID, InstanceRef

PRIVATE_IP_FIELD = "networkInterfaces.networkIP"
INSTANCE_ID_FIELD = "name"

logger = logging.getLogger(__name__)


def build_filter(field: str, values: Sequence[str]) -> str:
    """OR together one equality predicate per value, e.g. (name = "a") OR (name = "b")"""
    return " OR ".join(f'({field} = "{_quote(value)}")' for value in values)


def partition(values: Sequence[str], size: int) -> Iterator[List[str]]:
    if size <= 0:
        raise ValueError(f"partition size must be positive, got {size}")

    for start in range(0, len(values), size):
        yield list(values[start : start + size])


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class InstanceLookup:
    """
    Translates between instance ids and private ips by listing instances with a filter.

    Lookups are best effort: a value that matches no instance is simply absent from the result. Each chunk of at
    most max_filter_values values is one filtered list call, and every page of that call is fetched before the next
    chunk starts.
    """

    def __init__(self, service: InstanceGroupService, project: str, zone: str, max_filter_values: int):
        if max_filter_values <= 0:
            raise ValueError("max_filter_values must be a positive integer.")

        self._service = service
        self._project = project
        self._zone = zone
        self._max_filter_values = max_filter_values

    def ip_to_id(self, ips: Sequence[str]) -> List[InstanceID]:
        return [instance.id for instance in self.find(PRIVATE_IP_FIELD, ips)]

    def id_to_ip(self, ids: Sequence[InstanceID]) -> List[str]:
        return [instance.private_ip for instance in self.find(INSTANCE_ID_FIELD, ids) if instance.private_ip]

    def find(self, field: str, values: Sequence[str]) -> List[InstanceRef]:
        found: List[InstanceRef] = []
        for chunk in partition(list(dict.fromkeys(values)), self._max_filter_values):
            found.extend(self._list_all_pages(build_filter(field, chunk)))

        return found

    def _list_all_pages(self, filter_expression: str) -> List[InstanceRef]:
        instances: List[InstanceRef] = []
        page_token: Optional[str] = None
        while True:
            page, page_token = self._service.list_instances(self._project, self._zone, filter_expression, page_token)
            instances.extend(page)

            if not page_token:
                return instances

            logger.debug(f"instance list has more pages, following page token {page_token}")
