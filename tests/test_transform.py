"""Tests for the rewrite passes and the pipeline that runs them."""
import textwrap

import pytest

from nextport.analyzers.component_analyzer import analyze_component
from nextport.models import AnalysisResult, SourceFile
from nextport.transform import TransformContext, run_pipeline
from nextport.transform.api_routes import adapt_api_route, endpoint_for, module_name
from nextport.transform.assets import font_family, rewrite_assets
from nextport.transform.data_fetching import add_data_loader, endpoint_of
from nextport.transform.directive import add_client_directive
from nextport.transform.editing import find_tag_end, insert_after_imports, remove_span
from nextport.transform.env import rename_env_references
from nextport.transform.head import extract_head_metadata
from nextport.transform.hooks import rewrite_router_hooks
from nextport.transform.imports import normalize_import_paths, relative_specifier, rewrite_router_imports
from nextport.transform.links import rewrite_links
from nextport.transform.pipeline import PASSES, TransformPass

PAGE = TransformContext(path="src/pages/Page.jsx", output_path="pages/page.jsx", role="page")
COMPONENT = TransformContext(path="src/Widget.jsx", output_path="components/Widget.jsx")
EMPTY = AnalysisResult()


def dedent(text):
    return textwrap.dedent(text).lstrip("\n")


# ─── Editing helpers ───


class TestEditing:
    def test_insert_after_last_import(self):
        text = "import a from 'a';\nimport {\n  b,\n} from 'b';\n\nconst x = 1;\n"
        result = insert_after_imports(text, "import c from 'c';")
        assert result == "import a from 'a';\nimport {\n  b,\n} from 'b';\nimport c from 'c';\n\nconst x = 1;\n"

    def test_insert_without_imports_goes_after_directive(self):
        result = insert_after_imports('"use client";\nconst x = 1;\n', "import c from 'c';")
        assert result == '"use client";\n\nimport c from \'c\';\nconst x = 1;\n'

    def test_insert_at_top(self):
        assert insert_after_imports("const x = 1;\n", "import c from 'c';") == "import c from 'c';\n\nconst x = 1;\n"

    def test_remove_span_takes_whole_line(self):
        text = "a\n  <Helmet />\nb\n"
        start = text.index("<")
        assert remove_span(text, start, start + len("<Helmet />")) == "a\nb\n"

    def test_remove_span_inline(self):
        assert remove_span("a <x/> b", 2, 6) == "a  b"

    def test_find_tag_end_skips_arrow_functions(self):
        text = "<button onClick={() => a > b} disabled>go</button>"
        assert text[:find_tag_end(text, 0)] == "<button onClick={() => a > b} disabled>"

    def test_find_tag_end_unterminated(self):
        assert find_tag_end("<div className='x'", 0) == -1


# ─── Imports ───


class TestRouterImports:
    def test_hooks_and_links(self):
        text = "import { BrowserRouter, Link, useParams } from 'react-router-dom';\nconst x = 1;\n"
        result = rewrite_router_imports(text, EMPTY, COMPONENT)
        assert result == (
            "import { useRouter } from 'next/router';\n"
            "import Link from 'next/link';\n"
            "import { BrowserRouter } from 'react-router-dom';\n"
            "const x = 1;\n"
        )

    def test_routing_components_keep_their_import(self):
        text = "import { Routes, Route } from 'react-router-dom';\nexport default 1;\n"
        assert rewrite_router_imports(text, EMPTY, COMPONENT) is text

    def test_mixed_import_keeps_unconverted_names(self):
        text = dedent("""
            import { useParams, Outlet, Navigate } from 'react-router-dom';
            export default function Layout() {
              const { id } = useParams();
              return id ? <Outlet /> : <Navigate to="/" />;
            }
        """)
        result = rewrite_router_imports(text, EMPTY, COMPONENT)
        assert result.startswith(
            "import { useRouter } from 'next/router';\n"
            "import { Outlet, Navigate } from 'react-router-dom';\n"
        )

    def test_hook_used_outside_a_rewritten_call_keeps_import(self):
        text = "import { useNavigate } from 'react-router';\nexport const useGo = () => useNavigate();\n"
        assert rewrite_router_imports(text, EMPTY, COMPONENT) is text

    def test_aliased_and_non_jsx_links_are_kept(self):
        text = "import { Link as RouterLink, NavLink } from 'react-router-dom';\nconst items = [NavLink];\n<RouterLink to='/' />\n"
        assert rewrite_router_imports(text, EMPTY, COMPONENT) is text

    def test_search_params(self):
        text = dedent("""
            import { useSearchParams, Outlet } from 'react-router-dom';
            export default function Search() {
              const [params] = useSearchParams();
              return <div>{params.get('q')}<Outlet /></div>;
            }
        """)
        result = run_pipeline(text, EMPTY, COMPONENT)
        assert result.text == dedent("""
            import { useSearchParams } from 'next/navigation';
            import { Outlet } from 'react-router-dom';
            export default function Search() {
              const params = useSearchParams();
              return <div>{params.get('q')}<Outlet /></div>;
            }
        """)

    def test_search_params_setter_keeps_react_router(self):
        text = "import { useSearchParams } from 'react-router-dom';\nconst [params, setParams] = useSearchParams();\n"
        result = run_pipeline(text, EMPTY, COMPONENT)
        assert result.text == text

    def test_multiple_router_imports_merge(self):
        text = "import { Link } from 'react-router-dom';\nimport { useNavigate } from 'react-router';\nX\n"
        result = rewrite_router_imports(text, EMPTY, COMPONENT)
        assert result.count("next/router") == 1
        assert result.count("next/link") == 1
        assert "react-router" not in result

    def test_untouched_without_router(self):
        text = "import React from 'react';\n"
        assert rewrite_router_imports(text, EMPTY, COMPONENT) is text


class TestImportPaths:
    def test_rewrite_and_drop(self):
        context = TransformContext(
            import_targets={"./Button": "../components/Button"},
            dropped_imports=frozenset({"./index.css"}),
        )
        text = "import './index.css';\nimport Button from './Button';\nconst Lazy = import('./Button');\n"
        result = normalize_import_paths(text, EMPTY, context)
        assert result == "import Button from '../components/Button';\nconst Lazy = import('../components/Button');\n"

    def test_noop_without_targets(self):
        text = "import Button from './Button';\n"
        assert normalize_import_paths(text, EMPTY, COMPONENT) is text

    @pytest.mark.parametrize("source, target, original, expected", [
        ("pages/index.jsx", "components/Button.jsx", "./components/Button", "../components/Button"),
        ("components/App.jsx", "components/store/store.js", "./store", "./store/store"),
        ("pages/index.jsx", "components/ui/index.js", "./ui", "../components/ui"),
        ("pages/index.jsx", "components/ui/index.js", "./ui/index", "../components/ui/index"),
        ("pages/index.jsx", "styles/App.module.css", "./App.module.css", "../styles/App.module.css"),
        ("pages/index.jsx", "components/Button.jsx", "./Button.jsx", "../components/Button.jsx"),
    ])
    def test_relative_specifier(self, source, target, original, expected):
        assert relative_specifier(source, target, original) == expected


# ─── Hooks and links ───


class TestRouterHooks:
    def test_use_params(self):
        text = "const { id } = useParams();\n"
        result = rewrite_router_hooks(text, EMPTY, COMPONENT)
        assert result == "import { useRouter } from 'next/router';\n\nconst { id } = useRouter().query;\n"

    def test_navigate(self):
        text = dedent("""
            import { useRouter } from 'next/router';
            const navigate = useNavigate();
            navigate('/home');
            navigate(-1);
        """)
        result = rewrite_router_hooks(text, EMPTY, COMPONENT)
        assert "const router = useRouter();" in result
        assert "router.push('/home');" in result
        assert "router.back();" in result
        assert result.count("next/router") == 1

    def test_history(self):
        text = "const history = useHistory();\nhistory.push('/a');\nhistory.goBack();\n"
        result = rewrite_router_hooks(text, EMPTY, COMPONENT)
        assert "router.push('/a');" in result
        assert "router.back();" in result
        assert "history" not in result

    def test_location(self):
        result = rewrite_router_hooks("const location = useLocation();\n", EMPTY, COMPONENT)
        assert "const location = useRouter();" in result

    def test_untouched(self):
        text = "const x = useState(0);\n"
        assert rewrite_router_hooks(text, EMPTY, COMPONENT) == text

    def test_navigate_and_history_share_one_router(self):
        text = dedent("""
            function Checkout() {
              const navigate = useNavigate();
              const history = useHistory();
              history.push('/cart');
              navigate('/done');
            }
        """)
        result = rewrite_router_hooks(text, EMPTY, COMPONENT)
        assert result.count("const router = useRouter();") == 1
        assert "history" not in result
        assert "router.push('/cart');" in result
        assert "router.push('/done');" in result

    def test_separate_components_each_keep_a_router(self):
        text = dedent("""
            function A() {
              const navigate = useNavigate();
              return navigate('/a');
            }
            function B() {
              const navigate = useNavigate();
              return navigate('/b');
            }
        """)
        result = rewrite_router_hooks(text, EMPTY, COMPONENT)
        assert result.count("const router = useRouter();") == 2

    def test_location_redirects_use_router_in_scope(self):
        text = dedent("""
            function Guard() {
              const navigate = useNavigate();
              if (!user) window.location.href = '/login';
              window.location.replace("/home");
              window.location.href = 'https://example.com';
            }
        """)
        result = rewrite_router_hooks(text, EMPTY, COMPONENT)
        assert "router.push('/login');" in result
        assert 'router.replace("/home");' in result
        assert "window.location.href = 'https://example.com';" in result

    def test_location_redirect_without_router_untouched(self):
        text = "export function logout() {\n  window.location.href = '/login';\n}\n"
        assert rewrite_router_hooks(text, EMPTY, COMPONENT) is text

    def test_redirect_outside_router_scope_untouched(self):
        text = dedent("""
            function Page() {
              const navigate = useNavigate();
              navigate('/a');
            }
            export function logout() {
              window.location.href = '/login';
            }
        """)
        result = rewrite_router_hooks(text, EMPTY, COMPONENT)
        assert "window.location.href = '/login';" in result


class TestLinks:
    def test_link_to_href(self):
        text = '<Link to="/about" className="nav">About</Link>'
        result = rewrite_links(text, EMPTY, COMPONENT)
        assert result == "import Link from 'next/link';\n\n<Link href=\"/about\" className=\"nav\">About</Link>"

    def test_navlink_becomes_link(self):
        text = "import Link from 'next/link';\n<NavLink to={`/u/${id}`}>U</NavLink>\n"
        result = rewrite_links(text, EMPTY, COMPONENT)
        assert "<Link href={`/u/${id}`}>U</Link>" in result
        assert result.count("next/link") == 1

    def test_link_without_to_untouched(self):
        text = '<Link href="/x">x</Link>'
        assert rewrite_links(text, EMPTY, COMPONENT) is text


# ─── Directive, metadata, assets ───


class TestClientDirective:
    def test_added_for_client_component(self):
        result = add_client_directive("export default 1;\n", AnalysisResult(is_client_only=True), COMPONENT)
        assert result == '"use client";\n\nexport default 1;\n'

    def test_idempotent(self):
        once = add_client_directive("x\n", AnalysisResult(is_client_only=True), COMPONENT)
        assert add_client_directive(once, AnalysisResult(is_client_only=True), COMPONENT) == once

    def test_existing_single_quoted(self):
        text = "'use client';\nx\n"
        assert add_client_directive(text, AnalysisResult(is_client_only=True), COMPONENT) is text

    def test_not_for_api_routes(self):
        context = TransformContext(role="api")
        assert add_client_directive("x", AnalysisResult(is_client_only=True), context) == "x"

    def test_disabled(self):
        context = TransformContext(client_directive=False)
        assert add_client_directive("x", AnalysisResult(is_client_only=True), context) == "x"


class TestHeadMetadata:
    def test_helmet_block(self):
        text = dedent("""
            import { Helmet } from 'react-helmet';

            export default function About() {
              return (
                <div>
                  <Helmet>
                    <title>About us</title>
                    <meta name="description" content="Who we are" />
                  </Helmet>
                  <p>Hi</p>
                </div>
              );
            }
        """)
        result = extract_head_metadata(text, EMPTY, PAGE)
        assert 'title: "About us",' in result
        assert 'description: "Who we are",' in result
        assert "Helmet" not in result
        assert "<p>Hi</p>" in result

    def test_dynamic_title_left_alone(self):
        text = "<Head><title>{name}</title></Head>\n"
        assert extract_head_metadata(text, EMPTY, PAGE) is text

    def test_existing_metadata(self):
        text = "export const metadata = {};\n<Head><title>X</title></Head>\n"
        assert extract_head_metadata(text, EMPTY, PAGE) is text


class TestAssets:
    def test_img_gets_dimensions(self):
        result = rewrite_assets('<img src="/logo.png">', EMPTY, COMPONENT)
        assert '<Image src="/logo.png" width={500} height={300} alt="" />' in result
        assert result.startswith("import Image from 'next/image';")

    def test_img_keeps_existing_attributes(self):
        result = rewrite_assets('<img src="a.png" alt="A" width={10} />', EMPTY, COMPONENT)
        assert '<Image src="a.png" alt="A" width={10} height={300} />' in result

    def test_script(self):
        result = rewrite_assets('<script src="/a.js"></script>', EMPTY, COMPONENT)
        assert '<Script src="/a.js"></Script>' in result
        assert "import Script from 'next/script';" in result

    def test_google_font_link(self):
        href = "https://fonts.googleapis.com/css2?family=Open+Sans:wght@400&display=swap"
        result = rewrite_assets(f'<link href="{href}" rel="stylesheet" />', EMPTY, COMPONENT)
        assert "next/font: load Open_Sans from 'next/font/google'" in result
        assert "<link" not in result

    def test_other_links_untouched(self):
        text = '<link rel="icon" href="/favicon.ico" />'
        assert rewrite_assets(text, EMPTY, COMPONENT) is text

    def test_font_family(self):
        assert font_family("https://fonts.googleapis.com/css?family=Roboto:400,700|Lato") == "Roboto"
        assert font_family("https://fonts.googleapis.com/css") == ""


# ─── API routes ───


API = TransformContext(path="src/api/users.js", output_path="pages/api/users.js", role="api")


class TestApiRoutes:
    def test_named_request_function_becomes_default_handler(self):
        text = "export async function getUsers(req, res) {\n  res.json([]);\n}\n"
        result = adapt_api_route(text, EMPTY, API)
        assert result == "export default async function handler(req, res) {\n  res.json([]);\n}\n"

    def test_existing_handler_untouched(self):
        text = "export default function handler(req, res) { res.json([]); }\n"
        assert adapt_api_route(text, EMPTY, API) is text

    def test_handler_const_gets_default_export(self):
        text = "export const handler = (req, res) => res.end();\n"
        result = adapt_api_route(text, EMPTY, API)
        assert result == text + "\nexport default handler;\n"
        assert adapt_api_route(result, EMPTY, API) is result

    def test_client_service_gains_method_switch(self):
        text = "import axios from 'axios';\n\nexport const getUsers = () => axios.get('/users');\n"
        result = adapt_api_route(text, EMPTY, API)
        assert result.startswith(text)
        assert "// Route handler for /api/users\nexport default function handler(req, res) {" in result
        assert "case 'GET':" in result
        assert "res.status(405)" in result
        assert adapt_api_route(result, EMPTY, API) is result

    def test_default_export_is_demoted(self):
        text = "const api = axios.create();\nexport default api;\n"
        result = adapt_api_route(text, EMPTY, API)
        assert result.startswith("const api = axios.create();\nexport { api };\n")
        assert result.count("export default") == 1

    def test_anonymous_default_export_is_named(self):
        result = adapt_api_route("export default {\n  base: '/v1',\n};\n", EMPTY, API)
        assert result.startswith("export const usersApi = {\n")

    def test_typescript_handler_is_typed(self):
        context = TransformContext(path="src/api/orders.ts", output_path="pages/api/orders.ts", role="api")
        result = adapt_api_route("export const total = 1;\n", EMPTY, context)
        assert result.startswith("import type { NextApiRequest, NextApiResponse } from 'next';\n")
        assert "handler(req: NextApiRequest, res: NextApiResponse)" in result

    def test_only_api_role(self):
        text = "export const getUsers = () => fetch('/users');\n"
        assert adapt_api_route(text, EMPTY, COMPONENT) is text

    def test_endpoint_and_module_name(self):
        assert endpoint_for(TransformContext(output_path="pages/api/users/index.js")) == "/api/users"
        assert endpoint_for(TransformContext(path="src/api/login.js")) == "/api/login"
        assert module_name("src/api/user-service.js") == "userServiceApi"


# ─── Data loader and env ───


class TestDataLoader:
    def test_server_side_props(self):
        analysis = AnalysisResult(has_data_fetching=True, recommended_rendering_strategy="SSR")
        text = "export default function Page() { fetch('https://api.test/items'); }\n"
        result = add_data_loader(text, analysis, PAGE)
        assert result.startswith(text)
        assert "export async function getServerSideProps(context) {" in result
        assert "fetch('https://api.test/items')" in result.split("getServerSideProps")[1]
        assert add_data_loader(result, analysis, PAGE) == result

    def test_isr_with_query_gets_static_paths(self):
        analysis = AnalysisResult(has_data_fetching=True, recommended_rendering_strategy="ISR")
        text = "const { id } = useRouter().query;\nfetch(url);\n"
        result = add_data_loader(text, analysis, PAGE)
        assert "getStaticPaths" in result
        assert "revalidate: 60" in result
        assert "https://api.example.com/data" in result

    def test_ssg_without_paths(self):
        analysis = AnalysisResult(has_data_fetching=True, recommended_rendering_strategy="SSG")
        result = add_data_loader("axios.get('/api/posts');\n", analysis, PAGE)
        assert "getStaticProps()" in result
        assert "getStaticPaths" not in result
        assert "revalidate" not in result

    def test_components_are_skipped(self):
        analysis = AnalysisResult(has_data_fetching=True, recommended_rendering_strategy="SSR")
        assert add_data_loader("fetch('/x');\n", analysis, COMPONENT) == "fetch('/x');\n"

    def test_csr_is_skipped(self):
        analysis = AnalysisResult(has_data_fetching=True, recommended_rendering_strategy="CSR")
        assert add_data_loader("fetch('/x');\n", analysis, PAGE) == "fetch('/x');\n"

    def test_endpoint_of(self):
        assert endpoint_of("axios.get(`https://a.test/x`)") == "https://a.test/x"
        assert endpoint_of("fetch(`${base}/x`)") == "https://api.example.com/data"


class TestEnvRenames:
    def test_prefixes(self):
        text = "a = process.env.REACT_APP_KEY; b = import.meta.env.VITE_URL; c = process.env.SECRET;"
        result = rename_env_references(text, EMPTY, COMPONENT)
        assert result == "a = process.env.NEXT_PUBLIC_KEY; b = process.env.NEXT_PUBLIC_URL; c = process.env.SECRET;"

    def test_meta_builtins(self):
        result = rename_env_references("if (import.meta.env.DEV) log(import.meta.env.MODE);", EMPTY, COMPONENT)
        assert result == "if ((process.env.NODE_ENV !== 'production')) log(process.env.NODE_ENV);"

    def test_project_renames(self):
        context = TransformContext(env_renames={"API_URL": "NEXT_PUBLIC_API_URL"})
        assert rename_env_references("process.env.API_URL", EMPTY, context) == "process.env.NEXT_PUBLIC_API_URL"


# ─── Pipeline ───


PRODUCT = dedent("""
    import { useParams, useNavigate, Link } from 'react-router-dom';

    export default function Product() {
      const { id } = useParams();
      const navigate = useNavigate();
      return (
        <div>
          <img src="/product.png" />
          <Link to="/">Home</Link>
          <button onClick={() => navigate('/cart')}>{id}</button>
        </div>
      );
    }
""")


class TestPipeline:
    def _analysis(self, text, path="src/pages/Product.jsx"):
        result, _ = analyze_component(SourceFile(path, text), "page")
        return result

    def test_full_rewrite(self):
        result = run_pipeline(PRODUCT, self._analysis(PRODUCT), PAGE)
        text = result.text
        assert not result.failed
        assert text.startswith('"use client";\n\n')
        assert "react-router" not in text
        assert "useRouter().query" in text
        assert "router.push('/cart')" in text
        assert '<Link href="/">Home</Link>' in text
        assert "<Image" in text
        assert result.applied == ["imports", "hooks", "links", "client-directive", "assets"]

    def test_idempotent(self):
        analysis = self._analysis(PRODUCT)
        once = run_pipeline(PRODUCT, analysis, PAGE).text
        twice = run_pipeline(once, analysis, PAGE)
        assert twice.text == once
        assert twice.applied == []

    def test_untriggered_passes_leave_bytes_alone(self):
        text = "export default function Title() {\n  return <h1>Hello</h1>;\n}\n"
        result = run_pipeline(text, self._analysis(text, "src/Title.jsx"), COMPONENT)
        assert result.text == text
        assert result.applied == []

    def test_failing_pass_keeps_original(self):
        def boom(text, analysis, context):
            raise ValueError("bad input")

        passes = PASSES[:2] + (TransformPass("boom", boom),)
        text = "import { Link } from 'react-router-dom';\n"
        result = run_pipeline(text, EMPTY, COMPONENT, passes)
        assert result.failed
        assert result.text == text
        assert result.diagnostics[0].level == "warning"
        assert "Pass 'boom' failed: bad input" in result.diagnostics[0].message

    def test_pass_order(self):
        assert [p.name for p in PASSES] == [
            "import-paths", "imports", "hooks", "links", "client-directive",
            "metadata", "assets", "data-loader", "env", "api-handler",
        ]
