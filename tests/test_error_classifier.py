from unittest.mock import Mock

from astrbot_plugin_drawio2image.application import error_classifier
from astrbot_plugin_drawio2image.application.error_classifier import ErrorClassifier
from astrbot_plugin_drawio2image.domain.errors import (
    DiagramSyntaxError,
    ErrorCode,
    RenderTimeoutError,
)


def test_timeout_is_not_reclassified(monkeypatch):
    monkeypatch.setattr(error_classifier, "logger", Mock())
    timeout = RenderTimeoutError(15000, "convert")

    assert ErrorClassifier().classify(timeout) is timeout


def test_render_failure_becomes_syntax_error(monkeypatch):
    logger = Mock()
    monkeypatch.setattr(error_classifier, "logger", logger)
    cause = RuntimeError("Not a diagram file")

    classified = ErrorClassifier().classify(cause)

    assert isinstance(classified, DiagramSyntaxError)
    assert str(classified) == "Not a diagram file"
    assert classified.code is ErrorCode.SYNTAX_ERROR
    assert classified.__cause__ is cause
    logger.error.assert_called_once()
    assert "Syntax error in graph" in logger.error.call_args[0][0]


def test_cause_message_attribute_is_preferred(monkeypatch):
    monkeypatch.setattr(error_classifier, "logger", Mock())
    cause = Exception("Error: Invalid mxfile\n    at render")
    cause.message = "Invalid mxfile"

    assert str(ErrorClassifier().classify(cause)) == "Invalid mxfile"


def page_evaluate_error(js_message):
    """按 Playwright 的方式构造 page.evaluate 抛出的异常"""
    from playwright._impl._errors import rewrite_error
    from playwright._impl._helper import parse_error

    raw = parse_error({"name": "Error", "message": js_message, "stack": ""})
    return rewrite_error(raw, f"Page.evaluate: {raw}")


def test_playwright_error_is_reduced_to_bare_message(monkeypatch):
    monkeypatch.setattr(error_classifier, "logger", Mock())
    cause = page_evaluate_error(
        "Error: Expected mxGraphModel but found nothing\n"
        "    at parseDiagram (file:///plugin/assets/index.html:16:15)\n"
        "    at render (file:///plugin/assets/index.html:30:7)"
    )
    assert str(cause).startswith("Page.evaluate: Error: ")

    classified = ErrorClassifier().classify(cause)

    assert str(classified) == "Expected mxGraphModel but found nothing"
    assert classified.__cause__ is cause


def test_playwright_type_error_name_is_stripped(monkeypatch):
    monkeypatch.setattr(error_classifier, "logger", Mock())
    cause = page_evaluate_error(
        "TypeError: Cannot read properties of null (reading 'nodeName')\n"
        "    at parseDiagram (file:///plugin/assets/index.html:12:9)"
    )

    classified = ErrorClassifier().classify(cause)

    assert str(classified) == "Cannot read properties of null (reading 'nodeName')"
