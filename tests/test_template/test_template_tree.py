"""Tests for the ElementTree-backed template tree builder."""

import gc
import xml.etree.ElementTree as ET

from tailnest.model import ConditionalTag
from tailnest.template import build_template_tree, contains_slot


def _build(markup: str):
    """Build roots from the children of a wrapping <root> element."""
    wrapper = ET.fromstring(f"<root>{markup}</root>")
    return build_template_tree(list(wrapper)), wrapper


# ---------------------------------------------------------------------------
# Elements and attributes
# ---------------------------------------------------------------------------


class TestElements:
    def test_classes_id_and_attributes(self):
        roots, _ = _build('<div id="main" class="a  b" data-x="1" hidden=""/>')
        [div] = roots
        assert div.tag == "div"
        assert div.id == "main"
        assert div.classes == ["a", "b"]
        assert div.attributes["data-x"] == "1"
        assert div.attributes["hidden"] is True
        assert div.parent is None

    def test_children_and_parents(self):
        roots, _ = _build("<ul><li/><li><a/></li></ul>")
        [ul] = roots
        assert [c.tag for c in ul.children] == ["li", "li"]
        link = ul.children[1].children[0]
        assert link.parent is ul.children[1]
        assert link.parent.parent is ul

    def test_multiple_roots(self):
        roots, _ = _build("<header/><main/><footer/>")
        assert [r.tag for r in roots] == ["header", "main", "footer"]

    def test_text_and_comments_ignored(self):
        roots, _ = _build("<p>hello <b>bold</b> <!-- note --> tail</p>")
        [p] = roots
        assert [c.tag for c in p.children] == ["b"]

    def test_slot_dropped(self):
        roots, wrapper = _build("<div><slot/><span/></div>")
        assert [c.tag for c in roots[0].children] == ["span"]
        assert contains_slot(list(wrapper))

    def test_contains_slot_false(self):
        _, wrapper = _build("<div><span/></div>")
        assert not contains_slot(list(wrapper))

    def test_v_html_skips_children(self):
        roots, _ = _build('<div v-html="raw"><p/></div>')
        assert roots[0].children == []

    def test_dynamic_class(self):
        bound = ET.Element("div", {":class": "{ active: on }"})
        spread = ET.Element("div", {"v-bind": "attrs"})
        plain = ET.Element("div", {"class": "x"})
        roots = build_template_tree([bound, spread, plain])
        assert [r.has_dynamic_class for r in roots] == [True, True, False]

    def test_parent_link_is_weak(self):
        roots, _ = _build("<div><span/></div>")
        span = roots[0].children[0]
        assert span.parent is not None
        del roots
        gc.collect()
        assert span.parent is None


# ---------------------------------------------------------------------------
# Conditional chains
# ---------------------------------------------------------------------------


class TestConditionals:
    def test_if_else_chain(self):
        roots, _ = _build('<div v-if="a"/><div v-else-if="b"/><div v-else=""/><p/>')
        assert [r.conditional for r in roots] == [
            ConditionalTag(0, 0),
            ConditionalTag(0, 1),
            ConditionalTag(0, 2),
            None,
        ]

    def test_new_if_starts_new_chain(self):
        roots, _ = _build('<a v-if="x"/><b v-else=""/><c v-if="y"/><d v-else=""/>')
        assert [r.conditional for r in roots] == [
            ConditionalTag(0, 0),
            ConditionalTag(0, 1),
            ConditionalTag(1, 0),
            ConditionalTag(1, 1),
        ]

    def test_unconditioned_sibling_ends_chain(self):
        roots, _ = _build('<a v-if="x"/><hr/><b v-else=""/>')
        assert roots[0].conditional == ConditionalTag(0, 0)
        assert roots[1].conditional is None
        assert roots[2].conditional is None

    def test_chains_inside_children(self):
        roots, _ = _build('<div><a v-if="x"/><b v-else=""/></div>')
        a, b = roots[0].children
        assert a.conditional.chain_id == b.conditional.chain_id
        assert (a.conditional.branch_idx, b.conditional.branch_idx) == (0, 1)


# ---------------------------------------------------------------------------
# Transparent wrappers
# ---------------------------------------------------------------------------


class TestFlattening:
    def test_template_children_hoisted(self):
        roots, _ = _build("<div><template><a/><b/></template><p/></div>")
        [div] = roots
        assert [c.tag for c in div.children] == ["a", "b", "p"]
        assert all(c.parent is div for c in div.children)

    def test_conditional_template_propagates_tag(self):
        roots, _ = _build('<div><template v-if="x"><a/><b/></template><p v-else=""/></div>')
        a, b, p = roots[0].children
        assert a.conditional == ConditionalTag(0, 0)
        assert b.conditional == ConditionalTag(0, 0)
        assert p.conditional == ConditionalTag(0, 1)

    def test_transition_flattened(self):
        roots, _ = _build("<div><Transition><span/></Transition><keep-alive><em/></keep-alive></div>")
        assert [c.tag for c in roots[0].children] == ["span", "em"]

    def test_root_template_hoists_to_roots(self):
        roots, _ = _build("<template><header/><main/></template>")
        assert [r.tag for r in roots] == ["header", "main"]
        assert all(r.parent is None for r in roots)
