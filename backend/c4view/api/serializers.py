from typing import Any

from pydantic import BaseModel


PRIMITIVE_TYPES = (str, int, float, bool, type(None))


def serialize_ir(obj: Any):
    """
    Serialize graph dataclasses and document models into JSON-compatible
    structures. Deterministic; primitives pass through.
    """

    if isinstance(obj, PRIMITIVE_TYPES):
        return obj

    # Document models keep their wire spelling ("from", not "from_")
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=True, exclude_none=True)

    if isinstance(obj, (list, tuple, set, frozenset)):
        items = [serialize_ir(item) for item in obj]
        return sorted(items) if isinstance(obj, (set, frozenset)) else items

    if isinstance(obj, dict):
        return {k: serialize_ir(v) for k, v in obj.items()}

    # Dataclass-like objects
    if hasattr(obj, "__dict__"):
        return {
            key: serialize_ir(value)
            for key, value in obj.__dict__.items()
            if not key.startswith("_")
        }

    # 🔴 Fallback (should rarely happen)
    return str(obj)
