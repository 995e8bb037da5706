"""tailnest matching -- selectors evaluated against the template tree."""

from tailnest.matching.engine import MatchResult, SelectorMatcher, match, match_all
from tailnest.matching.pseudo import an_plus_b_matches, nth_matches
from tailnest.matching.selectors import (
    CompiledSelector,
    ComplexSelector,
    Segment,
    SimpleSelector,
    compile_selector,
)
from tailnest.matching.siblings import is_conditional_alternative, runtime_siblings

__all__ = [
    # engine
    "match",
    "match_all",
    "MatchResult",
    "SelectorMatcher",
    # selectors
    "compile_selector",
    "CompiledSelector",
    "ComplexSelector",
    "Segment",
    "SimpleSelector",
    # structural
    "nth_matches",
    "an_plus_b_matches",
    "is_conditional_alternative",
    "runtime_siblings",
]
