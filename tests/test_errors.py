"""Tests for custom exception hierarchy."""

from nextport.errors import (
    AnalysisError,
    ConfigError,
    FatalRunError,
    InputAdmissionError,
    NextportError,
    ParseFailure,
    ResolutionWarning,
    TransformError,
)


class TestNextportErrorBase:
    def test_message(self):
        e = NextportError("test error")
        assert str(e) == "test error"

    def test_empty_context_by_default(self):
        e = NextportError("test error")
        assert e.context == {}

    def test_context_passed_through(self):
        e = NextportError("test error", context={"file": "src/App.jsx"})
        assert e.context == {"file": "src/App.jsx"}

    def test_exit_code_default(self):
        assert NextportError("x").exit_code == 1

    def test_is_exception(self):
        assert issubclass(NextportError, Exception)


class TestFileScopedErrors:
    def test_parse_failure(self):
        e = ParseFailure("src/App.jsx", "unexpected token", language="javascript")
        assert "src/App.jsx" in str(e)
        assert "unexpected token" in str(e)
        assert e.reason == "unexpected token"
        assert e.context == {"file": "src/App.jsx", "language": "javascript"}
        assert isinstance(e, NextportError)

    def test_parse_failure_without_path(self):
        e = ParseFailure("", "boom")
        assert "<input>" in str(e)

    def test_analysis_error(self):
        e = AnalysisError("src/a.js", "Analysis failed: bad node", step="component")
        assert str(e) == "Analysis failed: bad node"
        assert e.path == "src/a.js"
        assert e.context["step"] == "component"

    def test_resolution_warning(self):
        e = ResolutionWarning("src/App.jsx", "./Missing")
        assert str(e) == "Unresolved import './Missing'"
        assert e.specifier == "./Missing"
        assert e.exit_code == 0

    def test_transform_error_names_pass(self):
        e = TransformError("src/App.jsx", "links", ValueError("bad tag"))
        assert "links" in str(e)
        assert "bad tag" in str(e)
        assert e.pass_name == "links"
        assert e.context == {"file": "src/App.jsx", "pass": "links"}


class TestRunErrors:
    def test_fatal_run_error_exit_code(self):
        assert FatalRunError("boom").exit_code == 2

    def test_input_admission_error(self):
        e = InputAdmissionError("too big", path="src/huge.js", limit=10)
        assert str(e) == "too big"
        assert e.context == {"file": "src/huge.js", "limit": 10}

    def test_config_error(self):
        e = ConfigError("bad value", context={"env_var": "NEXTPORT_MAX_WORKERS"})
        assert isinstance(e, NextportError)
        assert e.context["env_var"] == "NEXTPORT_MAX_WORKERS"
