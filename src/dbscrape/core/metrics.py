"""Metric helper function for creating Observation objects."""

from dbscrape.core.models import MetricDescriptor, Observation


def counter(descriptor: MetricDescriptor, value: float, *label_values: str) -> Observation:
    """Create a counter observation.

    Args:
        descriptor: Counter descriptor
        value: Current cumulative value
        *label_values: One value per descriptor label name, in order

    Returns:
        Observation bound to the descriptor

    Raises:
        ValueError: If the number of label values does not match the
            descriptor's label names.
    """
    if len(label_values) != len(descriptor.label_names):
        raise ValueError(
            f"inconsistent label cardinality for {descriptor.name}: "
            f"expected {len(descriptor.label_names)} label values, "
            f"got {len(label_values)}"
        )
    return Observation(
        descriptor=descriptor,
        value=float(value),
        label_values=label_values,
    )
