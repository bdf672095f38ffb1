"""Deciding which imports are walked file by file."""

import posixpath
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from funcpack.config_runtime import DEFAULTS
from funcpack.node_dependencies.module_name import is_local_specifier


@dataclass(frozen=True)
class TreeShakePolicy:
    """Allow-list of package internals that are safe to walk individually.

    `trigger_basenames` name internal entry points, compared against the
    specifier's base name without `.js`. Reaching one switches propagation on
    for everything imported below it. `allowed_prefixes` are package
    sub-paths that are always shaken.
    """

    trigger_basenames: tuple[str, ...] = tuple(DEFAULTS["tree_shake"]["trigger_basenames"])
    allowed_prefixes: tuple[str, ...] = tuple(DEFAULTS["tree_shake"]["allowed_prefixes"])

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None) -> "TreeShakePolicy":
        section = (config or {}).get("tree_shake", {})
        return cls(
            trigger_basenames=tuple(section.get("trigger_basenames", cls.trigger_basenames)),
            allowed_prefixes=tuple(section.get("allowed_prefixes", cls.allowed_prefixes)),
        )

    def triggers_propagation(self, specifier: str) -> bool:
        name = posixpath.basename(specifier.replace("\\", "/"))
        if name.endswith(".js"):
            name = name[:-3]
        return name in self.trigger_basenames

    def matches_allow_list(self, specifier: str) -> bool:
        return specifier.replace("\\", "/").startswith(self.allowed_prefixes)

    def should_tree_shake(self, specifier: str, propagate: bool) -> bool:
        """Whether `specifier` is resolved to a single file and walked.

        Local and allow-listed specifiers always are. With propagation active
        every other import is too.
        """
        if propagate:
            return True
        return is_local_specifier(specifier) or self.matches_allow_list(specifier)


def should_tree_shake(specifier: str, propagate: bool, policy: TreeShakePolicy | None = None) -> bool:
    return (policy or TreeShakePolicy()).should_tree_shake(specifier, propagate)
