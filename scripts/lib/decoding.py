"""
Boundary decoding for store payloads.

Rows are validated into pydantic models as they arrive; a row that does not
fit raises DecodeError instead of turning into zeros further down.
"""
from typing import Iterable, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from scripts.lib.errors import DecodeError

RowT = TypeVar("RowT", bound=BaseModel)


def decode_rows(model: Type[RowT], rows: Iterable[dict], source: str) -> List[RowT]:
    """Validate raw store rows, raising DecodeError on the first bad one."""
    decoded = []
    for index, row in enumerate(rows):
        try:
            decoded.append(model.model_validate(row))
        except ValidationError as e:
            raise DecodeError(
                f"Row {index} from '{source}' does not match {model.__name__}: {e}",
                source=source,
            ) from e
    return decoded


def decode_list(model: Type[RowT], payload, source: str) -> List[RowT]:
    """Decode an RPC payload that should be a list of rows (null means none)."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise DecodeError(
            f"Expected a list of rows, got {type(payload).__name__}", source=source,
        )
    return decode_rows(model, payload, source)


def decode_object(model: Type[RowT], payload, source: str):
    """Decode an RPC payload that is one object, a one-row list, or null."""
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise DecodeError(
            f"Expected an object, got {type(payload).__name__}", source=source,
        )
    return decode_rows(model, [payload], source)[0]
