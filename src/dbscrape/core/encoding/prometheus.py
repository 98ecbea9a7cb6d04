"""Prometheus text format encoder for observations."""

import math
from collections.abc import Iterable

from dbscrape.core.models import MetricDescriptor, Observation


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _format_value(value: float) -> str:
    """Format a sample value the way Prometheus parses it."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if float(value).is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def _format_labels(observation: Observation) -> str:
    if not observation.label_values:
        return ""
    pairs = ",".join(
        f'{name}="{_escape_label_value(value)}"'
        for name, value in zip(
            observation.descriptor.label_names, observation.label_values, strict=True
        )
    )
    return "{" + pairs + "}"


def encode_observations(observations: Iterable[Observation]) -> str:
    """Encode observations to Prometheus text exposition format.

    Observations are grouped by descriptor; families appear in the order
    their first observation was seen and samples keep their push order.

    Args:
        observations: An iterable of Observation objects.

    Returns:
        Text format string with HELP and TYPE lines per family.
        Empty string if no observations.
    """
    families: dict[str, tuple[MetricDescriptor, list[Observation]]] = {}
    for observation in observations:
        name = observation.descriptor.name
        if name not in families:
            families[name] = (observation.descriptor, [])
        families[name][1].append(observation)

    lines: list[str] = []
    for name, (descriptor, samples) in families.items():
        lines.append(f"# HELP {name} {_escape_help(descriptor.help)}")
        lines.append(f"# TYPE {name} {descriptor.value_type.value}")
        for sample in samples:
            lines.append(f"{name}{_format_labels(sample)} {_format_value(sample.value)}")

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
