"""Classifying and normalizing module specifiers."""

import re

# Node.js built-in modules. `node:`-prefixed specifiers are always built-ins.
BUILTIN_MODULES = frozenset(
    {
        "assert",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "diagnostics_channel",
        "dns",
        "domain",
        "events",
        "fs",
        "http",
        "http2",
        "https",
        "inspector",
        "module",
        "net",
        "os",
        "path",
        "perf_hooks",
        "process",
        "punycode",
        "querystring",
        "readline",
        "repl",
        "stream",
        "string_decoder",
        "sys",
        "timers",
        "tls",
        "trace_events",
        "tty",
        "url",
        "util",
        "v8",
        "vm",
        "wasi",
        "worker_threads",
        "zlib",
    }
)

_LOCAL_SPECIFIER_RE = re.compile(r"^(\.|/)")


def is_local_specifier(specifier: str) -> bool:
    """Relative (`./x`, `../x`, `.`) or absolute (`/x`) specifiers."""
    return bool(_LOCAL_SPECIFIER_RE.match(specifier.replace("\\", "/")))


def is_builtin_module(specifier: str) -> bool:
    if specifier.startswith("node:"):
        return True
    return specifier.split("/", 1)[0] in BUILTIN_MODULES


def get_module_name(specifier: str) -> str | None:
    """Package name owning `specifier`, with any sub-path dropped.

    `lodash/fp` -> `lodash`, `@scope/pkg/a/b` -> `@scope/pkg`. Returns None
    for specifiers naming no package, such as a bare `@scope`, local paths
    or empty strings.
    """
    normalized = specifier.replace("\\", "/")
    if not normalized or is_local_specifier(normalized):
        return None

    segments = normalized.split("/")

    if normalized.startswith("@"):
        if len(segments) < 2 or segments[0] == "@" or not segments[1]:
            return None
        return f"{segments[0]}/{segments[1]}"

    return segments[0] or None


def split_subpath(specifier: str, module_name: str) -> str:
    """Sub-path of `specifier` below its package, in `exports` key form (`.` or `./x`)."""
    rest = specifier.replace("\\", "/")[len(module_name):].strip("/")
    return f"./{rest}" if rest else "."
