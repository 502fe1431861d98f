"""Tests for stylesheet and static asset categorization."""
import pytest

from nextport.analyzers.asset_analyzer import analyze_assets, css_category, is_static_asset, is_stylesheet
from nextport.models import AnalysisResult, AssetHint, SourceFile


class TestCssCategory:
    @pytest.mark.parametrize("path, category", [
        ("src/index.css", "global"),
        ("src/App.css", "global"),
        ("src/styles/globals.scss", "global"),
        ("src/Button.module.css", "module"),
        ("node_modules/lib/dist/lib.css", "library"),
        ("vendor/bootstrap.css", "library"),
        ("src/components/Card.css", "component"),
    ])
    def test_category(self, path, category):
        assert css_category(path) == category

    def test_library_beats_module(self):
        assert css_category("src/vendor/x.module.css") == "library"


class TestPredicates:
    def test_is_stylesheet(self):
        assert is_stylesheet("a.SCSS")
        assert not is_stylesheet("a.js")

    def test_is_static_asset(self):
        assert is_static_asset("src/assets/logo.png")
        assert is_static_asset("public/robots.txt")
        assert is_static_asset("src/fonts/Inter.woff2")
        assert not is_static_asset("src/App.jsx")


class TestAnalyzeAssets:
    def test_buckets(self):
        sources = [
            SourceFile("src/index.css", ""),
            SourceFile("src/Card.module.css", ""),
            SourceFile("src/components/Nav.css", ""),
            SourceFile("public/index.html", "<html></html>"),
            SourceFile("public/robots.txt", ""),
        ]
        binaries = ["public/logo.png", "src/assets/hero.jpg", "src/fonts/Inter.woff2"]
        analyses = {
            "src/App.jsx": AnalysisResult(assets=[
                AssetHint("image", "./assets/hero.jpg"),
                AssetHint("image", "/logo.png"),
                AssetHint("image", "https://cdn.test/x.png"),
            ]),
        }
        buckets = analyze_assets(sources, binaries, analyses)
        assert buckets.global_css == ["src/index.css"]
        assert buckets.css_modules == ["src/Card.module.css"]
        assert buckets.component_css == ["src/components/Nav.css"]
        assert "public/index.html" not in buckets.public_assets
        assert "public/robots.txt" in buckets.public_assets
        assert buckets.fonts == ["src/fonts/Inter.woff2"]
        assert buckets.images == ["public/logo.png", "src/assets/hero.jpg"]
