"""Reference template-tree builder over ``xml.etree.ElementTree`` elements.

Host frameworks normally supply their own builder; this one understands the
common single-file-component conventions and is what the test-suite and
``compile_template`` callers use for markup held in ElementTree form:

- ``v-if`` / ``v-else-if`` / ``v-else`` attributes tag mutually exclusive
  siblings with a :class:`ConditionalTag`.
- ``<slot>`` placeholders are dropped.
- ``<template>`` and transparent built-ins (``Transition`` and friends) are
  flattened, their children hoisted into the parent's child list.
- ``:class``, ``v-bind:class`` and a bare ``v-bind`` mark a dynamic class.
- ``v-html`` replaces the element's children at runtime, so they are skipped.
"""

from __future__ import annotations

import itertools
from typing import Iterable, Iterator
from xml.etree.ElementTree import Element

from tailnest.model.template import ConditionalTag, TemplateNode

TRANSPARENT_TAGS = frozenset({
    "template",
    "Transition",
    "transition",
    "KeepAlive",
    "keep-alive",
    "Suspense",
    "suspense",
    "Teleport",
    "teleport",
})

SLOT_TAG = "slot"

_DYNAMIC_CLASS_ATTRS = frozenset({":class", "v-bind:class", "v-bind"})


def _conditional_directive(element: Element) -> str | None:
    for name in ("v-if", "v-else-if", "v-else"):
        if name in element.attrib:
            return name[2:]
    return None


def _build_node(element: Element, chain_ids: Iterator[int]) -> TemplateNode:
    attributes: dict[str, str | bool] = {}
    for name, value in element.attrib.items():
        attributes[name] = value if value else True

    class_value = element.get("class") or ""
    node = TemplateNode(
        tag=element.tag,
        id=element.get("id") or None,
        classes=class_value.split(),
        attributes=attributes,
        has_dynamic_class=any(a in _DYNAMIC_CLASS_ATTRS for a in element.attrib),
    )
    if "v-html" not in element.attrib:
        for child in _extract(list(element), chain_ids):
            node.append_child(child)
    return node


def _extract(elements: Iterable[Element], chain_ids: Iterator[int]) -> list[TemplateNode]:
    result: list[TemplateNode] = []
    chain_id: int | None = None
    branch_idx = 0

    for element in elements:
        if not isinstance(element.tag, str) or element.tag == SLOT_TAG:
            # Comments and processing instructions have callable tags.
            continue

        directive = _conditional_directive(element)
        if directive == "if":
            chain_id = next(chain_ids)
            branch_idx = 0
        elif directive is not None:
            branch_idx += 1
        else:
            chain_id = None

        conditional = ConditionalTag(chain_id, branch_idx) if chain_id is not None else None

        if element.tag in TRANSPARENT_TAGS:
            hoisted = _extract(list(element), chain_ids)
            if conditional is not None:
                for node in hoisted:
                    if node.conditional is None:
                        node.conditional = conditional
            result.extend(hoisted)
            continue

        node = _build_node(element, chain_ids)
        node.conditional = conditional
        result.append(node)

    return result


def build_template_tree(elements: Iterable[Element]) -> list[TemplateNode]:
    """Convert top-level template elements into root :class:`TemplateNode`s.

    The returned list owns the tree; keep it alive while nodes are in use,
    since ``parent`` links are weak.
    """
    return _extract(elements, itertools.count())


def contains_slot(elements: Iterable[Element]) -> bool:
    """Whether any ``<slot>`` element appears among *elements* or below them."""
    return any(el.tag == SLOT_TAG for element in elements for el in element.iter())
