"""Conditional sibling model.

Branches of one if / else-if / else chain sit side by side in the template
but only one of them ever renders. Sibling combinators and structural
pseudo-classes therefore look at a node's *runtime* siblings: its parent's
children minus the alternatives of the node's own chain.
"""

from __future__ import annotations

from tailnest.model.template import TemplateNode


def is_conditional_alternative(a: TemplateNode, b: TemplateNode) -> bool:
    """True when *a* and *b* are different branches of the same chain."""
    if a.conditional is None or b.conditional is None:
        return False
    return (
        a.conditional.chain_id == b.conditional.chain_id
        and a.conditional.branch_idx != b.conditional.branch_idx
    )


def runtime_siblings(node: TemplateNode) -> list[TemplateNode]:
    """The sibling list *node* would see at runtime, including itself.

    A root node has no parent and is its own only sibling.
    """
    parent = node.parent
    if parent is None:
        return [node]
    return [s for s in parent.children if not is_conditional_alternative(node, s)]


def sibling_position(node: TemplateNode) -> tuple[list[TemplateNode], int]:
    siblings = runtime_siblings(node)
    return siblings, _index(siblings, node)


def following_siblings(node: TemplateNode) -> list[TemplateNode]:
    siblings, idx = sibling_position(node)
    return siblings[idx + 1:]


def preceding_siblings(node: TemplateNode) -> list[TemplateNode]:
    """Runtime siblings before *node*, nearest first."""
    siblings, idx = sibling_position(node)
    return siblings[:idx][::-1]


def _index(nodes: list[TemplateNode], node: TemplateNode) -> int:
    for i, candidate in enumerate(nodes):
        if candidate is node:
            return i
    raise ValueError(f"{node!r} is not among its parent's children")
