"""Tests for react-router path conversion and the nested route table."""
import pytest

from nextport.analyzers.routing_analyzer import (
    build_route_table,
    convert_path,
    extract_params,
    flatten_routes,
    make_entry,
    nest_routes,
)
from nextport.models import AnalysisResult, ComponentDetails, RouteDeclaration


def with_routes(*declarations):
    return AnalysisResult(details=ComponentDetails(route_declarations=list(declarations)))


class TestConvertPath:
    @pytest.mark.parametrize("source, target", [
        ("/", "index"),
        ("", "index"),
        ("/about", "about"),
        ("/users/:id", "users/[id]"),
        ("/users/:userId/posts/:postId", "users/[userId]/posts/[postId]"),
        ("/docs/*", "docs/[...catchAll]"),
        ("*", "[...catchAll]"),
        ("/items/:id?", "items/[id]"),
        ("/about/", "about"),
    ])
    def test_convert(self, source, target):
        assert convert_path(source) == target

    def test_star_in_the_middle_is_kept(self):
        assert convert_path("/a/*/b") == "a/*/b"


class TestExtractParams:
    def test_named_params(self):
        assert extract_params("/users/:id") == ["id"]

    def test_optional_param(self):
        assert extract_params("/items/:id?") == ["id"]

    def test_catch_all(self):
        assert extract_params("/docs/*") == ["catchAll"]

    def test_none(self):
        assert extract_params("/about") == []


class TestNesting:
    def test_children_attach_to_longest_prefix(self):
        entries = [
            make_entry(RouteDeclaration("/users/:id/edit", "Edit", "src/App.jsx")),
            make_entry(RouteDeclaration("/users", "Users", "src/App.jsx")),
            make_entry(RouteDeclaration("/users/:id", "User", "src/App.jsx")),
        ]
        roots = nest_routes(entries)
        assert [r.source_path for r in roots] == ["/users"]
        user = roots[0].nested[0]
        assert user.source_path == "/users/:id"
        assert user.parent_path == "/users"
        assert user.nested[0].source_path == "/users/:id/edit"
        assert user.nested[0].parent_path == "/users/:id"

    def test_root_is_not_a_parent(self):
        entries = [
            make_entry(RouteDeclaration("/", "Home")),
            make_entry(RouteDeclaration("/about", "About")),
        ]
        roots = nest_routes(entries)
        assert [r.source_path for r in roots] == ["/", "/about"]
        assert roots[1].parent_path is None

    def test_prefix_must_end_at_segment(self):
        entries = [
            make_entry(RouteDeclaration("/user", "User")),
            make_entry(RouteDeclaration("/users", "Users")),
        ]
        assert len(nest_routes(entries)) == 2

    def test_flatten_is_depth_first(self):
        entries = [
            make_entry(RouteDeclaration("/a", "A")),
            make_entry(RouteDeclaration("/a/b", "B")),
            make_entry(RouteDeclaration("/c", "C")),
        ]
        flat = flatten_routes(nest_routes(entries))
        assert [e.source_path for e in flat] == ["/a", "/a/b", "/c"]


class TestBuildRouteTable:
    def test_entries_carry_params_and_source(self):
        report = build_route_table({
            "src/App.jsx": with_routes(RouteDeclaration("/users/:id", "User", "src/App.jsx")),
        })
        entry = report.routes[0]
        assert entry.target_path == "users/[id]"
        assert entry.params == ["id"]
        assert entry.component == "User"
        assert entry.declared_in == "src/App.jsx"
        assert report.diagnostics == []

    def test_duplicate_keeps_first_declaration(self):
        report = build_route_table({
            "src/b.jsx": with_routes(RouteDeclaration("/about", "AboutB", "src/b.jsx")),
            "src/a.jsx": with_routes(RouteDeclaration("/about", "AboutA", "src/a.jsx")),
        })
        assert [e.component for e in report.routes] == ["AboutA"]
        assert report.diagnostics[0].level == "info"
        assert report.diagnostics[0].path == "src/b.jsx"
        assert "src/a.jsx" in report.diagnostics[0].message

    def test_target_collision_is_a_duplicate(self):
        report = build_route_table({
            "src/App.jsx": with_routes(
                RouteDeclaration("/items/:id", "Item", "src/App.jsx"),
                RouteDeclaration("/items/:id?", "MaybeItem", "src/App.jsx"),
            ),
        })
        assert len(flatten_routes(report.routes)) == 1

    def test_to_dict(self):
        report = build_route_table({
            "src/App.jsx": with_routes(
                RouteDeclaration("/a", "A", "src/App.jsx"),
                RouteDeclaration("/a/:id", "B", "src/App.jsx"),
            ),
        })
        data = report.routes[0].to_dict()
        assert data["sourcePath"] == "/a"
        assert data["nested"][0]["targetPath"] == "a/[id]"
        assert data["nested"][0]["parentPath"] == "/a"
        assert "parentPath" not in data
