from typing import Any

_METADATA_MAPS = ("labels", "annotations")


def _preserve_map(desired_meta: Any, existing_meta: Any) -> None:
    for attr in _METADATA_MAPS:
        existing_map = getattr(existing_meta, attr, None) or {}
        if not existing_map:
            continue
        desired_map = dict(getattr(desired_meta, attr, None) or {})
        for key, value in existing_map.items():
            if key not in desired_map:
                desired_map[key] = value
        setattr(desired_meta, attr, desired_map)


def _template_metadata(obj: Any) -> Any:
    spec = getattr(obj, "spec", None)
    template = getattr(spec, "template", None)
    return getattr(template, "metadata", None)


def preserve_metadata(desired: Any, existing: Any) -> Any:
    """Carry labels and annotations owned by others over into ``desired``.

    Keys present on the live object and absent from the desired object are
    copied unchanged, both on the object metadata and, for workloads, on the
    pod template metadata. Keys the desired object sets keep their desired
    value.
    """
    if getattr(desired, "metadata", None) is not None:
        _preserve_map(desired.metadata, getattr(existing, "metadata", None))

    desired_template = _template_metadata(desired)
    if desired_template is not None:
        _preserve_map(desired_template, _template_metadata(existing))
    return desired
