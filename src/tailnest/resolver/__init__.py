from tailnest.resolver.loader import ExportLoader
from tailnest.resolver.resolve import (
    LoadExports,
    clone_rule,
    resolve,
    resolve_exports,
    resolve_with_dependencies,
)
from tailnest.resolver.state import DEFAULT_STATE, ResolverState, absolute_path

__all__ = [
    "DEFAULT_STATE",
    "ExportLoader",
    "LoadExports",
    "ResolverState",
    "absolute_path",
    "clone_rule",
    "resolve",
    "resolve_exports",
    "resolve_with_dependencies",
]
