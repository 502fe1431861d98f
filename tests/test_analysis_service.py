"""Tests for analysis-only runs and their serialized summary."""
import json

import yaml

from nextport.core.analysis_service import analysis_summary, analyze_files, summary_to_yaml


class TestAnalyzeFiles:
    def test_router_project(self, router_project):
        run = analyze_files(router_project)
        assert run.binary_paths == ["public/logo.png"]
        assert "src/App.jsx" in run.analyses
        assert "package.json" not in run.analyses

    def test_input_diagnostics_come_first(self):
        run = analyze_files({"../outside.js": "x", "src/a.js": "export const a = 1;"})
        assert run.diagnostics[0].level == "warning"
        assert run.diagnostics[0].path == "../outside.js"


class TestSummary:
    def test_fields(self, router_project):
        summary = analysis_summary(analyze_files(router_project))
        assert summary["flatRoutes"] == 2
        assert [route["sourcePath"] for route in summary["routes"]] == ["/", "/products/:id"]
        assert summary["reactRouterVersion"] == "^6.22.0"
        assert summary["statePattern"] == "redux"
        assert summary["libraries"]["react-redux"]["version"] == "^9.1.0"
        assert summary["envVariables"]["REACT_APP_API_URL"] == {"target": "NEXT_PUBLIC_API_URL", "public": True}
        assert "clientOnly" in summary["files"]["src/pages/Product.jsx"]
        assert "clientOnly" not in summary["files"]["package.json"]

    def test_plain_data(self, router_project):
        summary = analysis_summary(analyze_files(router_project))
        assert json.loads(json.dumps(summary)) == summary
        assert yaml.safe_load(summary_to_yaml(summary)) == summary

    def test_yaml_keeps_key_order(self):
        text = summary_to_yaml({"files": {}, "roles": {"page": 1}})
        assert text.index("files") < text.index("roles")
