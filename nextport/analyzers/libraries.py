"""Known third-party packages and how they migrate."""
from __future__ import annotations

from ..rules import Rule, first_match, member_of

CATEGORY_ROUTING = "routing"
CATEGORY_STATE = "state"
CATEGORY_DATA_FETCHING = "data-fetching"
CATEGORY_STYLING = "styling"
CATEGORY_TESTING = "testing"
CATEGORY_UI = "ui-component"
CATEGORY_UTILITY = "utility"
CATEGORY_SERVER = "server-side"
CATEGORY_OTHER = "other"

LIBRARY_RULES: tuple[Rule[str, str], ...] = (
    Rule("react-router", lambda name: name.startswith("react-router"), CATEGORY_ROUTING),
    Rule("state", member_of(
        "redux", "react-redux", "@reduxjs/toolkit", "zustand", "jotai", "recoil",
        "mobx", "mobx-react", "mobx-react-lite", "valtio",
    ), CATEGORY_STATE),
    Rule("data-fetching", member_of(
        "axios", "swr", "react-query", "@tanstack/react-query", "@apollo/client",
        "graphql-request", "ky", "superagent",
    ), CATEGORY_DATA_FETCHING),
    Rule("styling", lambda name: name.startswith("@emotion/") or name in (
        "styled-components", "emotion", "tailwindcss", "sass", "classnames", "clsx",
    ), CATEGORY_STYLING),
    Rule("testing", lambda name: name.startswith("@testing-library/") or name in (
        "jest", "cypress", "vitest", "enzyme", "msw",
    ), CATEGORY_TESTING),
    Rule("ui", lambda name: name.startswith("@mui/") or name.startswith("@chakra-ui/") or name in (
        "react", "react-dom", "antd", "react-bootstrap", "@headlessui/react", "framer-motion",
    ), CATEGORY_UI),
    Rule("utility", member_of(
        "lodash", "lodash-es", "ramda", "date-fns", "moment", "dayjs", "uuid",
    ), CATEGORY_UTILITY),
    Rule("server", member_of("next", "express", "koa", "fastify"), CATEGORY_SERVER),
)

# Packages that only work inside client components
CLIENT_LIBRARIES = frozenset({
    "react-router", "react-router-dom", "react-redux", "@reduxjs/toolkit", "redux",
    "zustand", "jotai", "recoil", "mobx-react", "mobx-react-lite", "valtio", "swr",
    "react-query", "@tanstack/react-query", "@apollo/client", "styled-components",
    "@emotion/react", "@emotion/styled", "framer-motion",
})

LARGE_LIBRARIES = frozenset({"moment", "lodash", "chart.js", "three", "monaco-editor"})

# Removed when the manifest is rewritten for Next.js
REPLACED_PACKAGES = frozenset({
    "react-router", "react-router-dom", "react-scripts", "react-helmet",
    "react-helmet-async", "vite", "@vitejs/plugin-react", "web-vitals",
})

NODE_BUILTINS = frozenset({
    "fs", "path", "os", "url", "util", "http", "https", "crypto", "events",
    "stream", "child_process", "buffer", "querystring", "zlib",
})


def is_bare_specifier(specifier: str) -> bool:
    return not specifier.startswith((".", "/"))


def package_name(specifier: str) -> str:
    """Main package of an import specifier (``@scope/pkg/sub`` -> ``@scope/pkg``)."""
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def library_category(name: str) -> str:
    return first_match(LIBRARY_RULES, name, CATEGORY_OTHER)


def requires_client_directive(name: str) -> bool:
    return name in CLIENT_LIBRARIES
