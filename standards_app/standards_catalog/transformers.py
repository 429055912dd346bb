from typing import Any, List, Mapping, Optional, Sequence

from standards_app.performance_engine.data_structures import Standard


def transform_swimming_standards(
    mapping: Mapping[str, Any],
    levels_order: Optional[Sequence[str]] = None
) -> List[Standard]:
    """
    Turn a {level: cut} mapping (e.g. swim time standards) into an ordered list of
    Standards.

    `levels_order` lists the labels from lowest (worst) to highest (best). When it is
    omitted or empty, the mapping's own iteration order is used. Cuts are passed
    through untouched (usually strings like "1:02.49"); parsing and validation are
    left to compute_performance, so a level with no entry in the mapping gets cut=None.
    """
    if levels_order:
        return [Standard(label=label, cut=mapping.get(label)) for label in levels_order]
    return [Standard(label=label, cut=cut) for label, cut in mapping.items()]
