"""Single-pass component analysis.

Walks a file's syntax tree once and fills an AnalysisResult: hook usage,
browser-only APIs, event handlers, data fetching, routing, shared state,
export shape, asset references, route declarations and a few security
and performance findings. Failures stay scoped to the file: the caller
gets a minimal fallback result plus a warning.
"""
from __future__ import annotations

import logging
import re

from ..errors import AnalysisError, ParseFailure
from ..models import (
    ROLE_COMPONENT,
    AnalysisResult,
    AssetHint,
    Diagnostic,
    Issue,
    RouteDeclaration,
    SourceFile,
)
from ..rules import Rule, all_matches, member_of
from .libraries import (
    CATEGORY_OTHER,
    CATEGORY_ROUTING,
    LARGE_LIBRARIES,
    is_bare_specifier,
    library_category,
    package_name,
)
from .module_resolver import scan_import_specifiers
from .parser import SyntaxTree, parse
from .rendering import recommend_strategy

logger = logging.getLogger(__name__)

HOOK_PATTERN = re.compile(r"^use[A-Z0-9]")
EVENT_HANDLER_PATTERN = re.compile(r"^on[A-Z]")

ROUTER_HOOKS = ("useParams", "useNavigate", "useHistory", "useLocation", "useRouteMatch", "useSearchParams", "useMatch")
CLIENT_HOOKS = (
    "useState", "useEffect", "useLayoutEffect", "useReducer", "useRef", "useCallback",
    "useMemo", "useImperativeHandle", "useTransition", "useDeferredValue",
    "useSyncExternalStore", "useInsertionEffect",
)
DATA_HOOKS = ("useFetch", "useQuery", "useMutation", "useInfiniteQuery", "useSWR", "useSWRInfinite")
STORE_HOOKS = ("useSelector", "useDispatch", "useStore", "useAppSelector", "useAppDispatch")

# Each matching row sets the named flag on the result (or on its details)
HOOK_RULES: tuple[Rule[str, str], ...] = (
    Rule("router-hook", member_of(*ROUTER_HOOKS), "has_routing"),
    Rule("client-hook", member_of(*CLIENT_HOOKS), "is_client_only"),
    Rule("data-hook", member_of(*DATA_HOOKS), "has_data_fetching"),
    Rule("context-hook", member_of("useContext"), "uses_shared_context"),
    Rule("store-hook", member_of(*STORE_HOOKS), "uses_store"),
)

BROWSER_GLOBALS = frozenset({
    "window", "document", "navigator", "location", "history", "localStorage",
    "sessionStorage", "cookies", "addEventListener", "removeEventListener",
    "querySelector", "querySelectorAll", "getElementById", "getElementsByClassName",
    "getElementsByTagName", "fetch", "XMLHttpRequest", "WebSocket", "Worker", "Blob",
    "File", "FileReader", "URL", "URLSearchParams", "performance", "console", "Audio",
    "Image", "Video", "MediaStream", "MediaRecorder", "HTMLCanvasElement", "setTimeout",
    "clearTimeout", "setInterval", "clearInterval", "requestAnimationFrame",
    "cancelAnimationFrame", "MouseEvent", "KeyboardEvent", "TouchEvent", "CustomEvent",
})
STORAGE_APIS = ("localStorage", "sessionStorage")

# Client-feature rows over JSX tag names
TAG_RULES: tuple[Rule[str, str], ...] = (
    Rule("seo-markup", member_of("Head", "Helmet", "title", "meta"), "has_seo_markup"),
    Rule("router-markup", member_of(
        "Route", "Routes", "Switch", "Router", "BrowserRouter", "HashRouter",
        "MemoryRouter", "Link", "NavLink", "Navigate", "Redirect", "Outlet",
    ), "has_routing"),
    Rule("context-provider", lambda tag: tag.endswith(".Provider"), "uses_shared_context"),
)

STORE_IMPORTS = ("redux", "react-redux", "@reduxjs/toolkit")
SEO_IMPORTS = ("next/head", "react-helmet", "react-helmet-async")

ROUTE_FACTORIES = ("createBrowserRouter", "createHashRouter", "createMemoryRouter", "useRoutes")
ROUTE_ARRAY_NAME = re.compile(r"^(?:routes|routeConfig|routesConfig|appRoutes|routeList)$", re.I)

HTTP_CLIENT_OBJECTS = ("api", "http", "client", "apiClient", "httpClient", "request", "ky", "superagent")
HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "request")
EFFECT_SCOPES = ("useEffect", "useLayoutEffect", "componentDidMount", "componentDidUpdate")
LIFECYCLE_METHODS = (
    "componentDidMount", "componentDidUpdate", "componentWillUnmount",
    "shouldComponentUpdate", "getSnapshotBeforeUpdate",
)
DATA_LOADERS = ("getServerSideProps", "getStaticProps", "getStaticPaths", "getInitialProps")
DEPS_WARNING_HOOKS = ("useEffect", "useLayoutEffect", "useCallback", "useMemo")
MAX_HOOK_DEPENDENCIES = 5

PAGINATION_NAMES = frozenset({"page", "limit", "offset", "cursor", "pageSize", "perPage", "pageNumber"})
PAGINATION_MARKERS = ("page=", "limit=", "offset=", "[id]", ":id")

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".avif", ".ico", ".bmp")
STYLE_EXTENSIONS = (".css", ".scss", ".sass", ".less")
FONT_HOSTS = ("fonts.googleapis.com", "fonts.gstatic.com")

SECRET_PREFIXED = re.compile(r"^(?:sk|pk|api|key|token|secret|password|auth)_[A-Za-z0-9_]+$", re.I)
OPAQUE_TOKEN = re.compile(r"^[A-Za-z0-9._~-]+$")
MIN_TOKEN_LENGTH = 21

_SKIP = object()


def looks_like_secret(value: str) -> bool:
    """Credential-shaped string literal: ``sk_...`` style, or a long opaque token."""
    if SECRET_PREFIXED.match(value):
        return True
    return (
        len(value) >= MIN_TOKEN_LENGTH
        and bool(OPAQUE_TOKEN.match(value))
        and any(c.isdigit() for c in value)
        and any(c.isalpha() for c in value)
    )


def _mask(value: str) -> str:
    return value[:4] + "****" if len(value) > 4 else "****"


def pascal_case_basename(path: str) -> str:
    stem = path.rsplit("/", 1)[-1].split(".", 1)[0]
    if stem[:1].isupper():
        return stem
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_\s]+", stem) if part)


def join_route_path(parent: str, child: str) -> str:
    """Resolve a possibly relative route path against its parent route."""
    if child.startswith("/"):
        return child
    if not child:
        return parent or "/"
    if not parent or parent == "/":
        return "/" + child
    return parent.rstrip("/") + "/" + child


def _append_unique(items: list, value) -> None:
    if value not in items:
        items.append(value)


class ComponentWalker:
    """One recursive pass over a syntax tree.

    Handlers are looked up by node type (``_on_<type>``). A handler may
    return ``_SKIP`` to stop descent, or a new scope tuple that applies to
    the node's children (used to know when a call sits inside an effect).
    """

    def __init__(self, tree: SyntaxTree, path: str):
        self.tree = tree
        self.path = path
        self.result = AnalysisResult()
        self.details = self.result.details
        self._issue_keys: set[tuple[str, str]] = set()

    def run(self) -> AnalysisResult:
        self._visit(self.tree.root, ())
        self._finish()
        return self.result

    def _visit(self, node, scope: tuple[str, ...]) -> None:
        handler = getattr(self, f"_on_{node.type}", None)
        child_scope = scope
        if handler is not None:
            outcome = handler(node, scope)
            if outcome is _SKIP:
                return
            if isinstance(outcome, tuple):
                child_scope = outcome
        for child in node.children:
            self._visit(child, child_scope)

    # ── helpers ──

    def _text(self, node) -> str:
        return self.tree.text(node)

    def _line(self, node) -> int:
        return node.start_point[0] + 1

    def _set_flag(self, flag: str) -> None:
        target = self.result if hasattr(self.result, flag) else self.details
        setattr(target, flag, True)

    def _issue(self, group: list[Issue], kind: str, message: str, severity: str, node, suggestion: str, key: str = "") -> None:
        dedupe = (kind, key or message)
        if dedupe in self._issue_keys:
            return
        self._issue_keys.add(dedupe)
        group.append(Issue(
            kind=kind,
            message=message,
            severity=severity,
            location=f"{self.path}:{self._line(node)}",
            suggestion=suggestion,
        ))

    def _jsx_name(self, element) -> str:
        name_node = element.child_by_field_name("name")
        if name_node is None:
            named = element.named_children
            name_node = named[0] if named else None
        return self._text(name_node)

    def _jsx_attributes(self, element) -> dict:
        """Attribute name -> value node (None for bare boolean attributes)."""
        attributes: dict = {}
        for child in element.named_children:
            if child.type != "jsx_attribute":
                continue
            parts = child.named_children
            if not parts:
                continue
            attributes[self._text(parts[0])] = parts[-1] if len(parts) > 1 else None
        return attributes

    def _element_component(self, value) -> str:
        """Component name referenced by ``element={<X/>}`` or ``component={X}``."""
        if value is None:
            return ""
        if value.type == "jsx_expression":
            inner = value.named_children
            if not inner:
                return ""
            value = inner[0]
        if value.type in ("jsx_self_closing_element", "jsx_element"):
            opening = value if value.type == "jsx_self_closing_element" else (
                value.child_by_field_name("open_tag") or value.named_children[0]
            )
            return self._jsx_name(opening)
        if value.type in ("identifier", "member_expression"):
            return self._text(value)
        if value.type == "call_expression":
            # lazy(() => import('./X')) and friends keep the callee text
            return self._text(value.child_by_field_name("function"))
        return ""

    # ── imports & exports ──

    def _add_import(self, specifier: str, node) -> None:
        if not specifier:
            return
        _append_unique(self.result.imports, specifier)
        lower = specifier.lower()
        if lower.endswith(IMAGE_EXTENSIONS):
            self.result.assets.append(AssetHint("image", specifier, self._line(node)))
        elif lower.endswith(STYLE_EXTENSIONS):
            self.result.assets.append(AssetHint("stylesheet", specifier, self._line(node)))
        if not is_bare_specifier(specifier):
            return
        name = package_name(specifier)
        category = library_category(name)
        if category != CATEGORY_OTHER:
            _append_unique(self.details.library_categories, category)
        if category == CATEGORY_ROUTING:
            self.result.has_routing = True
        if name in STORE_IMPORTS:
            self.details.uses_store = True
        if specifier in SEO_IMPORTS:
            self.details.has_seo_markup = True
        if name in LARGE_LIBRARIES:
            self._issue(
                self.result.performance, "large-bundle",
                f"Imports {name}, which adds significant bundle weight",
                "medium", node,
                "Import only the functions you need or switch to a lighter alternative",
                key=name,
            )

    def _on_import_statement(self, node, scope):
        self._add_import(self.tree.literal(node.child_by_field_name("source")) or "", node)
        return _SKIP

    def _on_export_statement(self, node, scope):
        source = node.child_by_field_name("source")
        if source is not None:
            self._add_import(self.tree.literal(source) or "", node)

        is_default = any(child.type == "default" for child in node.children)
        declaration = node.child_by_field_name("declaration")
        if is_default:
            value = node.child_by_field_name("value")
            name = self._declared_names(declaration)[:1] if declaration is not None else []
            self._set_default_export(name[0] if name else self._expression_name(value))
            return None

        if declaration is not None:
            for name in self._declared_names(declaration):
                self._add_export(name)
            return None

        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                local = spec.child_by_field_name("name")
                alias = spec.child_by_field_name("alias")
                exported = self._text(alias if alias is not None else local)
                if exported == "default":
                    self._set_default_export(self._text(local))
                else:
                    self._add_export(exported)
        return None

    def _add_export(self, name: str) -> None:
        if not name:
            return
        _append_unique(self.result.exports, name)
        if name in DATA_LOADERS:
            self.details.has_data_loader = True

    def _set_default_export(self, name: str | None) -> None:
        self.details.has_default_export = True
        _append_unique(self.result.exports, "default")
        if name:
            self.result.main_export_name = name

    def _declared_names(self, declaration) -> list[str]:
        if declaration is None:
            return []
        name = declaration.child_by_field_name("name")
        if name is not None:
            return [self._text(name)]
        names = []
        for child in declaration.named_children:
            if child.type == "variable_declarator":
                target = child.child_by_field_name("name")
                if target is not None and target.type == "identifier":
                    names.append(self._text(target))
        return names

    def _expression_name(self, value) -> str | None:
        """Name behind ``export default <expr>``, unwrapping memo()/connect()() wrappers."""
        if value is None:
            return None
        if value.type == "identifier":
            return self._text(value)
        if value.type in ("parenthesized_expression", "as_expression", "satisfies_expression"):
            inner = value.named_children
            return self._expression_name(inner[0]) if inner else None
        if value.type in ("class", "function", "function_expression"):
            name = value.child_by_field_name("name")
            return self._text(name) if name is not None else None
        if value.type == "call_expression":
            self.details.component_kind = "hoc"
            arguments = value.child_by_field_name("arguments")
            for arg in reversed(arguments.named_children if arguments is not None else []):
                if arg.type == "identifier" and self._text(arg)[:1].isupper():
                    return self._text(arg)
            return self._expression_name(value.child_by_field_name("function"))
        return None

    # ── calls ──

    def _on_call_expression(self, node, scope):
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if function is None:
            return None

        if function.type == "import":
            first = arguments.named_children[0] if arguments is not None and arguments.named_children else None
            self._add_import(self.tree.literal(first) or "", node)
            return None

        if function.type == "identifier":
            name = self._text(function)
            _append_unique(self.details.calls, name)
            if name == "require" and arguments is not None and arguments.named_children:
                self._add_import(self.tree.literal(arguments.named_children[0]) or "", node)
            if name == "fetch":
                self._record_fetch(node, scope)
            if name in ROUTE_FACTORIES and arguments is not None and arguments.named_children:
                self._collect_route_array(arguments.named_children[0], "")
            if HOOK_PATTERN.match(name):
                self._record_hook(name, arguments, node)
                if name in EFFECT_SCOPES:
                    return scope + (name,)
            return None

        if function.type == "member_expression":
            owner = self._text(function.child_by_field_name("object"))
            prop = self._text(function.child_by_field_name("property"))
            _append_unique(self.details.calls, prop)
            if owner == "axios" or (owner in HTTP_CLIENT_OBJECTS and prop in HTTP_METHODS):
                self._record_fetch(node, scope)
            if owner == "Date" and prop == "now":
                self.details.uses_time_sensitive_call = True
            if owner == "React" and HOOK_PATTERN.match(prop):
                self._record_hook(prop, arguments, node)
                if prop in EFFECT_SCOPES:
                    return scope + (prop,)
        return None

    def _record_hook(self, name: str, arguments, node) -> None:
        _append_unique(self.details.hooks, name)
        self.result.uses_state_binding = True
        for flag in all_matches(HOOK_RULES, name):
            self._set_flag(flag)
        if name in DEPS_WARNING_HOOKS and arguments is not None:
            args = arguments.named_children
            if len(args) > 1 and args[1].type == "array" and len(args[1].named_children) > MAX_HOOK_DEPENDENCIES:
                self._issue(
                    self.result.performance, "render-blocking",
                    f"Hook {name} has {len(args[1].named_children)} dependencies",
                    "medium", node,
                    "Split this hook into smaller hooks with fewer dependencies",
                    key=f"{name}:{self._line(node)}",
                )

    def _record_fetch(self, node, scope: tuple[str, ...]) -> None:
        self.result.has_data_fetching = True
        if any(entry in EFFECT_SCOPES for entry in scope):
            self._issue(
                self.result.performance, "inefficient-data-fetching",
                "Data is fetched on the client after the first render",
                "high", node,
                "Move the request into getServerSideProps or getStaticProps",
            )

    def _on_new_expression(self, node, scope):
        constructor = node.child_by_field_name("constructor")
        arguments = node.child_by_field_name("arguments")
        if self._text(constructor) == "Date" and (arguments is None or not arguments.named_children):
            self.details.uses_time_sensitive_call = True
        return None

    # ── member access ──

    def _on_member_expression(self, node, scope):
        owner_node = node.child_by_field_name("object")
        prop = self._text(node.child_by_field_name("property"))
        owner = self._text(owner_node)

        if owner_node is not None and owner_node.type == "identifier":
            if owner in BROWSER_GLOBALS:
                self._record_browser_api(owner, node)
            if owner in ("history", "navigate") and prop in ("push", "replace", "goBack"):
                self.result.has_routing = True
            if owner == "store" and prop in ("dispatch", "getState", "subscribe"):
                self.details.uses_store = True
        if owner == "window" and prop in BROWSER_GLOBALS:
            self._record_browser_api(prop, node)
        if owner == "this" and prop == "setState":
            self.result.is_client_only = True
        if owner in ("process.env", "import.meta.env") and prop:
            _append_unique(self.details.env_vars, prop)
        return None

    def _record_browser_api(self, name: str, node) -> None:
        self.result.is_client_only = True
        _append_unique(self.details.browser_apis, name)
        if name in STORAGE_APIS:
            self._issue(
                self.result.security, "client-secret",
                f"Uses {name} to store potentially sensitive data",
                "medium", node,
                "Prefer server-side sessions or httpOnly cookies",
                key=name,
            )

    # ── markup ──

    def _on_jsx_opening_element(self, node, scope):
        self._record_tag(node)
        return None

    def _on_jsx_self_closing_element(self, node, scope):
        tag = self._record_tag(node)
        if tag == "Route" and "Route" not in scope:
            self._collect_jsx_route(node, "")
        return None

    def _on_jsx_element(self, node, scope):
        opening = node.child_by_field_name("open_tag")
        if opening is None or self._jsx_name(opening) != "Route" or "Route" in scope:
            return None
        self._collect_jsx_route(node, "")
        return scope + ("Route",)

    def _record_tag(self, element) -> str:
        tag = self._jsx_name(element)
        _append_unique(self.details.jsx_elements, tag)
        for flag in all_matches(TAG_RULES, tag):
            self._set_flag(flag)

        attributes = self._jsx_attributes(element)
        for attr in attributes:
            if EVENT_HANDLER_PATTERN.match(attr):
                _append_unique(self.details.event_handlers, attr)
                self.result.is_client_only = True

        line = self._line(element)
        if tag == "img":
            src = attributes.get("src")
            self.result.assets.append(AssetHint("image", self.tree.literal(src) or self._text(src), line))
        elif tag == "script":
            src = attributes.get("src")
            self.result.assets.append(AssetHint("script", self.tree.literal(src) or self._text(src), line))
        elif tag == "link":
            href = self.tree.literal(attributes.get("href")) or ""
            if any(host in href for host in FONT_HOSTS):
                self.result.assets.append(AssetHint("font", href, line))
        elif tag == "a":
            href = self.tree.literal(attributes.get("href")) or ""
            if href.startswith("/"):
                self._issue(
                    self.result.performance, "full-page-navigation",
                    f"Internal link to {href} uses a plain anchor",
                    "low", element,
                    "Use next/link for client-side navigation",
                    key=href,
                )
        return tag

    # ── routes ──

    def _collect_jsx_route(self, element, parent_path: str) -> None:
        opening = element if element.type == "jsx_self_closing_element" else (
            element.child_by_field_name("open_tag") or element.named_children[0]
        )
        attributes = self._jsx_attributes(opening)
        raw_path = self.tree.literal(attributes.get("path")) if "path" in attributes else None
        is_index = "index" in attributes

        full_path = parent_path
        if raw_path is not None:
            full_path = join_route_path(parent_path, raw_path)
        elif is_index:
            full_path = parent_path or "/"

        if raw_path is not None or is_index:
            component = ""
            for key in ("element", "component", "Component"):
                if key in attributes:
                    component = self._element_component(attributes[key])
                    break
            self.details.route_declarations.append(RouteDeclaration(full_path, component, self.path))

        if element.type != "jsx_element":
            return
        for child in element.named_children:
            if child.type == "jsx_self_closing_element" and self._jsx_name(child) == "Route":
                self._collect_jsx_route(child, full_path)
            elif child.type == "jsx_element":
                child_open = child.child_by_field_name("open_tag")
                if child_open is not None and self._jsx_name(child_open) == "Route":
                    self._collect_jsx_route(child, full_path)

    def _on_variable_declarator(self, node, scope):
        name = node.child_by_field_name("name")
        value = node.child_by_field_name("value")
        if (
            name is not None and value is not None and value.type == "array"
            and ROUTE_ARRAY_NAME.match(self._text(name))
        ):
            self._collect_route_array(value, "")
        return None

    def _collect_route_array(self, array, parent_path: str) -> None:
        if array is None or array.type != "array":
            return
        for item in array.named_children:
            if item.type != "object":
                continue
            props: dict = {}
            for pair in item.named_children:
                if pair.type != "pair":
                    continue
                key = pair.child_by_field_name("key")
                key_text = self.tree.literal(key) or self._text(key)
                props[key_text] = pair.child_by_field_name("value")

            raw_path = self.tree.literal(props.get("path")) if "path" in props else None
            is_index = self._text(props.get("index")) == "true"
            full_path = parent_path
            if raw_path is not None:
                full_path = join_route_path(parent_path, raw_path)
            elif is_index:
                full_path = parent_path or "/"

            if raw_path is not None or is_index:
                component = ""
                for key in ("element", "component", "Component"):
                    if key in props:
                        component = self._element_component(props[key])
                        break
                self.details.route_declarations.append(RouteDeclaration(full_path, component, self.path))

            self._collect_route_array(props.get("children"), full_path)

    # ── classes ──

    def _on_class_declaration(self, node, scope):
        self._record_class(node)
        return None

    def _on_class(self, node, scope):
        self._record_class(node)
        return None

    def _record_class(self, node) -> None:
        heritage = next((c for c in node.named_children if c.type == "class_heritage"), None)
        if heritage is None or "Component" not in self._text(heritage):
            return
        self.details.component_kind = "class"
        name = node.child_by_field_name("name")
        self._issue(
            self.result.performance, "unnecessary-client-side",
            f"Class component {self._text(name) or '(anonymous)'} cannot become a server component",
            "low", node,
            "Rewrite as a function component so it can render on the server",
            key=self._text(name),
        )

    def _on_method_definition(self, node, scope):
        name = self._text(node.child_by_field_name("name"))
        if name in LIFECYCLE_METHODS:
            self.result.is_client_only = True
            return scope + (name,)
        return None

    # ── literals & identifiers ──

    def _on_string(self, node, scope):
        self._check_literal(self.tree.literal(node), node)
        return _SKIP

    def _on_template_string(self, node, scope):
        value = self.tree.literal(node)
        if value is not None:
            self._check_literal(value, node)
            return _SKIP
        return None

    def _check_literal(self, value: str | None, node) -> None:
        if not value:
            return
        if any(marker in value for marker in PAGINATION_MARKERS):
            self.details.has_pagination_hint = True
        if looks_like_secret(value):
            self._issue(
                self.result.security, "api-key",
                f"String literal looks like a credential ({_mask(value)})",
                "medium", node,
                "Move the value into a server-side environment variable",
                key=f"{self._line(node)}:{value}",
            )

    def _on_identifier(self, node, scope):
        if self._text(node) in PAGINATION_NAMES:
            self.details.has_pagination_hint = True
        return None

    _on_property_identifier = _on_identifier
    _on_shorthand_property_identifier = _on_identifier
    _on_shorthand_property_identifier_pattern = _on_identifier

    # ── wrap-up ──

    def _finish(self) -> None:
        if not self.result.main_export_name and (self.details.jsx_elements or self.details.has_default_export):
            self.result.main_export_name = pascal_case_basename(self.path) or None
        if self.details.component_kind == "function" and not self.details.jsx_elements:
            self.details.component_kind = "none"


def analyze_component(source: SourceFile, role: str = ROLE_COMPONENT) -> tuple[AnalysisResult, list[Diagnostic]]:
    """Analyze one code file.

    Returns the fact sheet and the diagnostics produced along the way. A
    parse failure or analyzer error yields the minimal fallback result
    (role ``component``, all flags false, imports from a regex scan).
    """
    diagnostics: list[Diagnostic] = []
    try:
        tree = parse(source.content, source.path)
    except ParseFailure as e:
        logger.warning("Parse failure in %s: %s", source.path, e.reason)
        diagnostics.append(Diagnostic("warning", f"{e.reason}; content kept as written", source.path))
        return AnalysisResult.fallback(scan_import_specifiers(source.content)), diagnostics

    try:
        result = ComponentWalker(tree, source.path).run()
    except Exception as e:
        error = AnalysisError(source.path, f"Analysis failed: {e}", step="component")
        logger.warning("%s: %s", source.path, error, exc_info=True)
        diagnostics.append(Diagnostic("warning", str(error), source.path))
        return AnalysisResult.fallback(scan_import_specifiers(source.content)), diagnostics

    result.role = role
    if tree.recovered:
        result.details.parse_recovered = True
        diagnostics.append(Diagnostic(
            "info", f"parsed in recovery mode ({tree.error_count} syntax errors)", source.path,
        ))
    result.recommended_rendering_strategy = recommend_strategy(result, source.path)
    return result, diagnostics
