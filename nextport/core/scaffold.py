"""Generated Next.js project files: _app, next.config.js, package.json, tsconfig.json."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional
from urllib.parse import urlsplit

from ..analyzers.libraries import REPLACED_PACKAGES

logger = logging.getLogger("nextport.core.scaffold")

NEXT_VERSION = "^14.2.0"
REACT_VERSION = "^18.2.0"

NEXT_SCRIPTS = {
    "dev": "next dev",
    "build": "next build",
    "start": "next start",
    "lint": "next lint",
}

TYPESCRIPT_DEV_DEPENDENCIES = {
    "typescript": "^5.4.0",
    "@types/node": "^20.11.0",
    "@types/react": "^18.2.0",
    "@types/react-dom": "^18.2.0",
}

GITIGNORE = """\
# dependencies
/node_modules

# next.js
/.next/
/out/

# production
/build

# misc
.DS_Store
*.pem

# debug
npm-debug.log*
yarn-debug.log*
yarn-error.log*

# local env files
.env*.local

# typescript
*.tsbuildinfo
next-env.d.ts
"""

GLOBALS_CSS = """\
*,
*::before,
*::after {
  box-sizing: border-box;
}

html,
body {
  padding: 0;
  margin: 0;
  font-family: -apple-system, BlinkMacSystemFont, Segoe UI, Roboto, Oxygen, Ubuntu, Cantarell, Fira Sans,
    Droid Sans, Helvetica Neue, sans-serif;
}

a {
  color: inherit;
  text-decoration: none;
}
"""

TSCONFIG_COMPILER_OPTIONS = {
    "target": "es5",
    "lib": ["dom", "dom.iterable", "esnext"],
    "allowJs": True,
    "skipLibCheck": True,
    "strict": False,
    "noEmit": True,
    "esModuleInterop": True,
    "module": "esnext",
    "moduleResolution": "node",
    "resolveJsonModule": True,
    "isolatedModules": True,
    "jsx": "preserve",
    "incremental": True,
}


@dataclass(frozen=True)
class Provider:
    """A wrapper component mounted around every page in _app."""
    imports: tuple[str, ...]
    open_tag: str
    close_tag: str
    setup: tuple[str, ...] = ()


def _wrap(providers: list[Provider], indent: str = "    ") -> list[str]:
    lines: list[str] = []
    depth = 0
    for provider in providers:
        lines.append(f"{indent}{'  ' * depth}{provider.open_tag}")
        depth += 1
    lines.append(f"{indent}{'  ' * depth}<Component {{...pageProps}} />")
    for provider in reversed(providers):
        depth -= 1
        lines.append(f"{indent}{'  ' * depth}{provider.close_tag}")
    return lines


def app_component(
    stylesheets: Iterable[str],
    providers: Iterable[Provider] = (),
    typescript: bool = False,
) -> str:
    """pages/_app with global stylesheet imports and provider wrappers."""
    providers = list(providers)
    lines: list[str] = []
    for stylesheet in stylesheets:
        lines.append(f"import '{stylesheet}';")
    if typescript:
        lines.append("import type { AppProps } from 'next/app';")
    seen: set[str] = set()
    for provider in providers:
        for line in provider.imports:
            if line not in seen:
                seen.add(line)
                lines.append(line)
    lines.append("")
    for provider in providers:
        lines.extend(provider.setup)
    if any(provider.setup for provider in providers):
        lines.append("")

    signature = "{ Component, pageProps }: AppProps" if typescript else "{ Component, pageProps }"
    lines.append(f"export default function App({signature}) {{")
    lines.append("  return (")
    lines.extend(_wrap(providers))
    lines.append("  );")
    lines.append("}")
    return "\n".join(lines) + "\n"


def remote_image_hosts(image_references: Iterable[str]) -> list[str]:
    hosts = set()
    for reference in image_references:
        parts = urlsplit(reference)
        if parts.scheme in ("http", "https") and parts.hostname:
            hosts.add(parts.hostname)
    return sorted(hosts)


def next_config(image_hosts: Iterable[str] = ()) -> str:
    lines = [
        "/** @type {import('next').NextConfig} */",
        "const nextConfig = {",
        "  reactStrictMode: true,",
    ]
    hosts = list(image_hosts)
    if hosts:
        lines.append("  images: {")
        lines.append("    remotePatterns: [")
        for host in hosts:
            lines.append(f"      {{ protocol: 'https', hostname: '{host}' }},")
        lines.append("    ],")
        lines.append("  },")
    lines.extend(["};", "", "module.exports = nextConfig;"])
    return "\n".join(lines) + "\n"


def migrate_package_json(
    manifest: Optional[Mapping],
    app_name: str,
    typescript: bool = False,
    keep: Iterable[str] = (),
) -> str:
    """package.json for the Next.js project.

    Keeps the source dependencies except the ones Next.js replaces (router,
    bundler, head manager), pins next/react/react-dom and swaps the scripts.
    Replaced packages named in ``keep`` are still imported and stay.
    """
    manifest = dict(manifest or {})
    replaced = REPLACED_PACKAGES - set(keep)
    dependencies = {
        name: version
        for name, version in (manifest.get("dependencies") or {}).items()
        if name not in replaced
    }
    dev_dependencies = {
        name: version
        for name, version in (manifest.get("devDependencies") or {}).items()
        if name not in replaced
    }
    dependencies["next"] = NEXT_VERSION
    dependencies.setdefault("react", REACT_VERSION)
    dependencies.setdefault("react-dom", REACT_VERSION)
    if typescript:
        for name, version in TYPESCRIPT_DEV_DEPENDENCIES.items():
            if name not in dependencies:
                dev_dependencies.setdefault(name, version)
    if "eslint" in dev_dependencies:
        dev_dependencies.setdefault("eslint-config-next", NEXT_VERSION)

    removed = sorted(
        name for section in ("dependencies", "devDependencies")
        for name in (manifest.get(section) or {}) if name in replaced
    )
    if removed:
        logger.debug("Dropped replaced packages: %s", ", ".join(removed))

    data = {
        "name": manifest.get("name") or app_name,
        "version": manifest.get("version") or "0.1.0",
        "private": True,
        "scripts": dict(NEXT_SCRIPTS),
        "dependencies": dict(sorted(dependencies.items())),
    }
    if dev_dependencies:
        data["devDependencies"] = dict(sorted(dev_dependencies.items()))
    return json.dumps(data, indent=2) + "\n"


def tsconfig_json(source: Optional[Mapping] = None) -> str:
    """tsconfig.json for Next.js, keeping the source strictness.

    Path aliases are not carried over: imports are rewritten to relative paths.
    """
    options = dict(TSCONFIG_COMPILER_OPTIONS)
    source_options = (source or {}).get("compilerOptions") or {}
    if "strict" in source_options:
        options["strict"] = source_options["strict"]
    data = {
        "compilerOptions": options,
        "include": ["next-env.d.ts", "**/*.ts", "**/*.tsx"],
        "exclude": ["node_modules"],
    }
    return json.dumps(data, indent=2) + "\n"


def gitignore() -> str:
    return GITIGNORE


def globals_css() -> str:
    return GLOBALS_CSS
