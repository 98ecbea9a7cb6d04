"""Core domain models for scraped metric data."""

from dataclasses import dataclass
from enum import Enum


class ValueType(Enum):
    """Exposition type of a metric family."""

    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    """Immutable metadata identifying a metric family.

    Attributes:
        name: Fully qualified metric name (e.g., mysql_sys_full_scans_by_user).
        help: Human readable description.
        label_names: Ordered label names, fixed for the descriptor's lifetime.
        value_type: Exposition type. Scraped cumulative values are counters.
    """

    name: str
    help: str
    label_names: tuple[str, ...] = ()
    value_type: ValueType = ValueType.COUNTER


@dataclass(frozen=True)
class Observation:
    """One value of one descriptor with its label values bound.

    Attributes:
        descriptor: The metric family this value belongs to.
        value: The metric value.
        label_values: Values for descriptor.label_names, in the same order.
    """

    descriptor: MetricDescriptor
    value: float
    label_values: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def labels(self) -> dict[str, str]:
        """Label names zipped with their values."""
        return dict(zip(self.descriptor.label_names, self.label_values, strict=True))
