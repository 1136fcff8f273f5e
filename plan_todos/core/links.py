from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LinkKind(str, Enum):
    PLAN = "plan"
    TASK = "task"
    TARGET = "target"
    CIRCULATION = "circulation"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class LinkRef:
    """Reference from a milestone to exactly one entity, or to nothing."""

    kind: LinkKind
    biz_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind is LinkKind.NONE and self.biz_id is not None:
            raise ValueError("Unlinked reference cannot carry an id")
        if self.kind is not LinkKind.NONE and not self.biz_id:
            raise ValueError(f"Link of kind '{self.kind.value}' requires an id")

    @classmethod
    def none(cls) -> LinkRef:
        return cls(LinkKind.NONE)

    @classmethod
    def parse(cls, kind: str | None, biz_id: str | None) -> LinkRef:
        kind_norm = (kind or "").strip().lower()
        biz_id = (biz_id or "").strip() or None
        if kind_norm in {"", LinkKind.NONE.value}:
            if biz_id is not None:
                raise ValueError("Both link kind and id must be set together, or neither")
            return cls.none()
        try:
            link_kind = LinkKind(kind_norm)
        except ValueError:
            raise ValueError(f"Unsupported link kind: {kind}") from None
        if biz_id is None:
            raise ValueError("Both link kind and id must be set together, or neither")
        return cls(link_kind, biz_id)

    @property
    def is_linked(self) -> bool:
        return self.kind is not LinkKind.NONE
