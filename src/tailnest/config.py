"""Compiler configuration: the word lists that drive parsing and matching."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

# Words that are both HTML tag names and utility class names. Alone before
# a `{` with no selector syntax they are read as classes, not selectors.
AMBIGUOUS_WORDS = frozenset({
    "flex",
    "grid",
    "table",
    "hidden",
    "block",
    "inline",
    "contents",
    "fixed",
    "absolute",
    "relative",
    "sticky",
    "static",
    "visible",
    "invisible",
    "collapse",
})

# Pseudo-classes that only resolve in the browser; they always match here.
RUNTIME_PSEUDO_CLASSES = frozenset({
    "hover",
    "focus",
    "active",
    "visited",
    "link",
    "focus-within",
    "focus-visible",
    "checked",
    "disabled",
    "enabled",
    "required",
    "optional",
    "valid",
    "invalid",
    "in-range",
    "out-of-range",
    "placeholder-shown",
    "autofill",
    "read-only",
    "read-write",
    "target",
    "scope",
    "defined",
    "fullscreen",
    "modal",
    "picture-in-picture",
    "any-link",
    "local-link",
    "default",
    "indeterminate",
})

UNSUPPORTED_AT_RULES = frozenset({
    "media",
    "keyframes",
    "supports",
    "layer",
    "container",
    "font-face",
    "property",
    "page",
    "counter-style",
})


@dataclass(frozen=True)
class CompilerConfig:
    ambiguous_words: frozenset[str] = field(default=AMBIGUOUS_WORDS)
    runtime_pseudo_classes: frozenset[str] = field(default=RUNTIME_PSEUDO_CLASSES)
    unsupported_at_rules: frozenset[str] = field(default=UNSUPPORTED_AT_RULES)
    dynamic_component_tag: str = "component"

    def extend(
        self,
        *,
        ambiguous_words: frozenset[str] | set[str] | tuple[str, ...] = (),
        runtime_pseudo_classes: frozenset[str] | set[str] | tuple[str, ...] = (),
        unsupported_at_rules: frozenset[str] | set[str] | tuple[str, ...] = (),
    ) -> CompilerConfig:
        """Return a copy with the given words added to each list."""
        return replace(
            self,
            ambiguous_words=self.ambiguous_words | frozenset(ambiguous_words),
            runtime_pseudo_classes=self.runtime_pseudo_classes
            | frozenset(p.lstrip(":") for p in runtime_pseudo_classes),
            unsupported_at_rules=self.unsupported_at_rules
            | frozenset(a.lstrip("@") for a in unsupported_at_rules),
        )


DEFAULT_CONFIG = CompilerConfig()
