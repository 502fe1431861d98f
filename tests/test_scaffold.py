"""Tests for generated project files, reports and the output tree."""
import json

from nextport.core import reports, scaffold
from nextport.core.file_tree import build_file_tree, iter_leaves, output_path
from nextport.models import EnvVarInfo, ProjectAnalysis, RouteEntry, StateReport


# ─── _app ───


class TestAppComponent:
    def test_without_providers(self):
        app = scaffold.app_component(["../styles/globals.css"])
        assert app == (
            "import '../styles/globals.css';\n"
            "\n"
            "export default function App({ Component, pageProps }) {\n"
            "  return (\n"
            "    <Component {...pageProps} />\n"
            "  );\n"
            "}\n"
        )

    def test_nested_providers(self):
        outer = scaffold.Provider(
            imports=("import { QueryClient, QueryClientProvider } from 'react-query';",),
            open_tag="<QueryClientProvider client={queryClient}>",
            close_tag="</QueryClientProvider>",
            setup=("const queryClient = new QueryClient();",),
        )
        inner = scaffold.Provider(imports=("import { RecoilRoot } from 'recoil';",), open_tag="<RecoilRoot>", close_tag="</RecoilRoot>")
        lines = scaffold.app_component([], [outer, inner]).splitlines()
        assert "const queryClient = new QueryClient();" in lines
        start = lines.index("    <QueryClientProvider client={queryClient}>")
        assert lines[start:start + 5] == [
            "    <QueryClientProvider client={queryClient}>",
            "      <RecoilRoot>",
            "        <Component {...pageProps} />",
            "      </RecoilRoot>",
            "    </QueryClientProvider>",
        ]

    def test_typescript_signature(self):
        app = scaffold.app_component([], typescript=True)
        assert "import type { AppProps } from 'next/app';" in app
        assert "export default function App({ Component, pageProps }: AppProps) {" in app

    def test_duplicate_imports_once(self):
        provider = scaffold.Provider(imports=("import X from 'x';",), open_tag="<X>", close_tag="</X>")
        assert scaffold.app_component([], [provider, provider]).count("import X from 'x';") == 1


# ─── Config files ───


class TestConfigFiles:
    def test_next_config_without_hosts(self):
        config = scaffold.next_config()
        assert "reactStrictMode: true," in config
        assert "images" not in config
        assert config.endswith("module.exports = nextConfig;\n")

    def test_next_config_remote_patterns(self):
        hosts = scaffold.remote_image_hosts([
            "https://cdn.test/a.png", "/logo.png", "http://img.test/b.jpg", "https://cdn.test/c.png",
        ])
        assert hosts == ["cdn.test", "img.test"]
        config = scaffold.next_config(hosts)
        assert "{ protocol: 'https', hostname: 'cdn.test' }," in config

    def test_migrate_package_json(self):
        manifest = {
            "name": "legacy",
            "dependencies": {"react": "^17.0.2", "react-router-dom": "^6.0.0", "axios": "^1.6.0"},
            "devDependencies": {"vite": "^5.0.0", "eslint": "^8.0.0"},
            "scripts": {"start": "vite"},
        }
        data = json.loads(scaffold.migrate_package_json(manifest, "next-app"))
        assert data["name"] == "legacy"
        assert data["version"] == "0.1.0"
        assert data["private"] is True
        assert data["scripts"] == scaffold.NEXT_SCRIPTS
        assert data["dependencies"] == {
            "axios": "^1.6.0",
            "next": scaffold.NEXT_VERSION,
            "react": "^17.0.2",
            "react-dom": scaffold.REACT_VERSION,
        }
        assert data["devDependencies"] == {"eslint": "^8.0.0", "eslint-config-next": scaffold.NEXT_VERSION}

    def test_still_imported_packages_are_kept(self):
        manifest = {"dependencies": {"react-router-dom": "^6.0.0", "react-scripts": "5.0.1"}}
        data = json.loads(scaffold.migrate_package_json(manifest, "next-app", keep={"react-router-dom"}))
        assert data["dependencies"]["react-router-dom"] == "^6.0.0"
        assert "react-scripts" not in data["dependencies"]

    def test_package_json_without_manifest(self):
        data = json.loads(scaffold.migrate_package_json(None, "my-app", typescript=True))
        assert data["name"] == "my-app"
        assert "typescript" in data["devDependencies"]

    def test_tsconfig_keeps_strict_only(self):
        source = {"compilerOptions": {"strict": True, "paths": {"@/*": ["src/*"]}, "target": "es2022"}}
        options = json.loads(scaffold.tsconfig_json(source))["compilerOptions"]
        assert options["strict"] is True
        assert options["target"] == "es5"
        assert "paths" not in options

    def test_tsconfig_default(self):
        assert json.loads(scaffold.tsconfig_json())["compilerOptions"]["strict"] is False

    def test_gitignore(self):
        assert "/.next/" in scaffold.gitignore()


# ─── Reports ───


class TestReports:
    def test_env_local_example(self):
        variables = {
            "REACT_APP_URL": EnvVarInfo(name="REACT_APP_URL", target_name="NEXT_PUBLIC_URL", is_public=True),
            "DB_PASSWORD": EnvVarInfo(name="DB_PASSWORD", target_name="DB_PASSWORD", is_public=False),
        }
        assert reports.env_local_example(variables) == (
            "# Copy to .env.local and fill in the values\n"
            "\n"
            "# Exposed to the browser\n"
            "NEXT_PUBLIC_URL=\n"
            "\n"
            "# Server only\n"
            "DB_PASSWORD=\n"
        )

    def test_state_guide(self):
        report = StateReport(
            counts={"redux": 2},
            files_by_pattern={"redux": ["src/a.js", "src/b.js"]},
            dominant="redux",
            recommendations=["Wrap pages/_app in the store provider"],
        )
        guide = reports.state_migration_guide(report)
        assert guide.startswith("# State Management Migration Guide\n")
        assert "- Wrap pages/_app in the store provider" in guide
        assert "- `src/b.js`" in guide
        assert guide.endswith("\n") and not guide.endswith("\n\n")

    def test_analysis_report(self):
        project = ProjectAnalysis(
            route_table=[RouteEntry(
                source_path="/users", target_path="users", component="Users",
                nested=[RouteEntry(source_path="/users/:id", target_path="users/[id]", component="User", params=["id"])],
            )],
            unresolved_imports={"src/App.jsx": ["./Missing"]},
            pairwise_cycles=[("src/a.js", "src/b.js")],
        )
        report = reports.analysis_report(project, {"src/App.jsx": "page"}, {}, title="shop")
        assert report.startswith("# shop: Conversion Analysis\n")
        assert "**Routes:** 2  " in report
        assert "- `/users` -> `pages/users` renders `Users`" in report
        assert "  - `/users/:id` -> `pages/users/[id]` renders `User` (params: id)" in report
        assert "- `src/App.jsx`: `./Missing`" in report
        assert "- `src/a.js` <-> `src/b.js`" in report

    def test_analysis_report_without_routes(self):
        report = reports.analysis_report(ProjectAnalysis(), {}, {})
        assert "No react-router routes found." in report


# ─── File tree ───


class TestFileTree:
    def test_directories_first_then_names(self):
        root = build_file_tree({
            "package.json": "{}",
            "pages/index.jsx": "a",
            "components/ui/Button.jsx": "b",
            ".env": "c",
        }, root_name="shop")
        assert root.name == "shop"
        assert [child.name for child in root.children] == ["components", "pages", ".env", "package.json"]
        button = root.children[0].children[0].children[0]
        assert button.path == "components/ui/Button.jsx"
        assert button.content == "b"

    def test_leaves(self):
        root = build_file_tree({"a/b.txt": "1", "c.txt": "2"})
        assert sorted(leaf.path for leaf in iter_leaves(root)) == ["a/b.txt", "c.txt"]

    def test_to_dict(self):
        data = build_file_tree({"a.txt": "x"}).to_dict()
        assert data["children"] == [{"name": "a.txt", "path": "a.txt", "type": "file", "content": "x"}]
        assert "content" not in data

    def test_output_path(self):
        assert output_path("api", "users.js") == "pages/api/users.js"
        assert output_path("config", ".env") == ".env"
        assert output_path("public_assets", "logo.png") == "public/logo.png"
