"""Template tree model: the element-only view of a host template."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Union

AttrValue = Union[str, bool]


@dataclass(frozen=True)
class ConditionalTag:
    """Membership in one branch of an if / else-if / else chain."""

    chain_id: int
    branch_idx: int


@dataclass(eq=False)
class TemplateNode:
    """A single element in the template tree.

    Nodes compare and hash by identity so they can key per-node result maps.
    Ownership runs top-down through ``children``; ``parent`` is a weak,
    non-owning back-reference and is ``None`` for root nodes.
    """

    tag: str
    id: str | None = None
    classes: list[str] = field(default_factory=list)
    attributes: dict[str, AttrValue] = field(default_factory=dict)
    children: list[TemplateNode] = field(default_factory=list)
    conditional: ConditionalTag | None = None
    has_dynamic_class: bool = False

    def __post_init__(self) -> None:
        self._parent_ref: weakref.ref[TemplateNode] | None = None
        for child in self.children:
            child._parent_ref = weakref.ref(self)

    @property
    def parent(self) -> TemplateNode | None:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def append_child(self, child: TemplateNode) -> TemplateNode:
        """Attach *child* as the last child and point its parent here."""
        child._parent_ref = weakref.ref(self)
        self.children.append(child)
        return child

    def iter_subtree(self):
        """Yield this node and all of its descendants in document order."""
        yield self
        for child in self.children:
            yield from child.iter_subtree()

    def __repr__(self) -> str:
        parts = [self.tag]
        if self.id:
            parts.append(f"#{self.id}")
        parts.extend(f".{c}" for c in self.classes)
        return f"<TemplateNode {''.join(parts)}>"
