"""
Utility functions for the DTO generator.
"""

from __future__ import annotations

import re

_GENERIC_SUFFIX = re.compile(r"<.*>$")


def short_type_name(type_name: str) -> str:
    """Strip namespace qualifier, generic arguments and nullable marker.

    Examples:
        "Models.Address" -> "Address"
        "global::Models.Address?" -> "Address"
        "List<TagDto>" -> "List"
    """
    name = type_name.strip().rstrip("?")
    name = _GENERIC_SUFFIX.sub("", name)
    name = name.split("::")[-1]
    return name.rsplit(".", 1)[-1]


def static_method_names(model_name: str, derived_name: str) -> tuple[str, str]:
    """Names of the static conversion methods generated on a derived type.

    The model-to-derived method is ``To`` followed by whatever the derived
    name adds to the model name; the derived-to-model method is ``To``
    followed by the model name.

    Examples:
        ("User", "UserDto") -> ("ToDto", "ToUser")
        ("Product", "ProductDTO") -> ("ToDTO", "ToProduct")
        ("Order", "OrderTransfer") -> ("ToTransfer", "ToOrder")
        ("Tag", "Tag") -> ("ToDTO", "ToTag")
        ("Order", "WireOrder") -> ("ToWireOrder", "ToOrder")

    Args:
        model_name: Short name of the model type
        derived_name: Short name of the derived type

    Returns:
        (model-to-derived method name, derived-to-model method name)
    """
    suffix = derived_name[len(model_name) :] if derived_name.startswith(model_name) else derived_name
    return f"To{suffix or 'DTO'}", f"To{model_name}"
