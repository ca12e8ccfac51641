"""
Typed RFC 6902 JSON patch operations.

Patches are built from PatchOperation values and validated before they are
serialized for ``kubectl patch --type=json``.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from nginxarch.errors import PatchValidationError

VALID_OPS = {"add", "remove", "replace", "move", "copy", "test"}
VALUE_OPS = {"add", "replace", "test"}
FROM_OPS = {"move", "copy"}

_MISSING = object()


def _check_pointer(pointer: str, what: str) -> None:
    if not isinstance(pointer, str) or not pointer.startswith("/"):
        raise PatchValidationError(f"{what} must be a JSON pointer starting with '/': {pointer!r}")
    for token in pointer.split("/")[1:]:
        if token == "":
            raise PatchValidationError(f"{what} has an empty segment: {pointer!r}")
        # "~" may only appear as the escapes ~0 or ~1
        stripped = token.replace("~0", "").replace("~1", "")
        if "~" in stripped:
            raise PatchValidationError(f"{what} has an invalid escape: {pointer!r}")


@dataclass(frozen=True)
class PatchOperation:
    """A single JSON patch operation."""

    op: str
    path: str
    value: Any = _MISSING
    from_path: str = ""

    def validate(self) -> None:
        """Raise PatchValidationError if the operation is malformed."""
        if self.op not in VALID_OPS:
            raise PatchValidationError(f"Unsupported patch op: {self.op!r}")
        _check_pointer(self.path, "path")
        if self.op in VALUE_OPS and self.value is _MISSING:
            raise PatchValidationError(f"'{self.op}' operation on {self.path} requires a value")
        if self.op not in VALUE_OPS and self.value is not _MISSING:
            raise PatchValidationError(f"'{self.op}' operation on {self.path} takes no value")
        if self.op in FROM_OPS:
            _check_pointer(self.from_path, "from")
        elif self.from_path:
            raise PatchValidationError(f"'{self.op}' operation on {self.path} takes no 'from'")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the RFC 6902 wire shape."""
        result: Dict[str, Any] = {"op": self.op, "path": self.path}
        if self.value is not _MISSING:
            result["value"] = self.value
        if self.from_path:
            result["from"] = self.from_path
        return result


@dataclass
class JsonPatch:
    """An ordered list of patch operations."""

    operations: List[PatchOperation] = field(default_factory=list)

    def add(self, path: str, value: Any) -> "JsonPatch":
        """Append an ``add`` operation and return self for chaining."""
        self.operations.append(PatchOperation(op="add", path=path, value=value))
        return self

    def validate(self) -> None:
        if not self.operations:
            raise PatchValidationError("Patch contains no operations")
        for operation in self.operations:
            operation.validate()

    def to_list(self) -> List[Dict[str, Any]]:
        self.validate()
        return [operation.to_dict() for operation in self.operations]

    def to_json(self) -> str:
        """Validate and serialize for ``kubectl patch -p``."""
        return json.dumps(self.to_list())
