from __future__ import annotations

import logging

from mvcstarter.core.log_setup import TargetFilter, configure_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "message", None, None)


def test_target_filter_levels() -> None:
    target = TargetFilter(["error", "warning"])

    assert target.filter(_record("anything", logging.ERROR))
    assert target.filter(_record("anything", logging.WARNING))
    assert not target.filter(_record("anything", logging.INFO))


def test_target_filter_categories() -> None:
    target = TargetFilter(["info"], ["application"])

    assert target.filter(_record("mvcstarter", logging.INFO))
    assert target.filter(_record("mvcstarter.controllers.product", logging.INFO))
    assert not target.filter(_record("mvcstarterx", logging.INFO))
    assert not target.filter(_record("uvicorn", logging.INFO))


def test_configure_logging_writes_targets(web_config) -> None:
    configure_logging(web_config)

    logging.getLogger("mvcstarter.tests").info("application info")
    logging.getLogger("thirdparty").info("library info")
    logging.getLogger("thirdparty").warning("library warning")

    log_file = web_config.runtime_path / "logs" / "app.log"
    content = log_file.read_text(encoding="utf-8")
    assert "application info" in content
    assert "library warning" in content
    assert "library info" not in content
    assert " - mvcstarter.tests - INFO - application info" in content


def test_configure_logging_is_idempotent(web_config) -> None:
    configure_logging(web_config)
    handlers = configure_logging(web_config)

    installed = [h for h in logging.getLogger().handlers if getattr(h, "_mvcstarter", False)]
    assert len(installed) == len(handlers) == 3


def test_debug_enables_verbose_stream(web_config) -> None:
    stream = configure_logging(web_config)[0]
    assert stream.level == logging.WARNING

    stream = configure_logging(web_config, verbose=True)[0]
    assert stream.level == logging.DEBUG


def test_error_target_receives_critical(web_config) -> None:
    target = TargetFilter(["error", "warning"])
    assert target.filter(_record("anything", logging.CRITICAL))
    assert not TargetFilter(["warning"]).filter(_record("anything", logging.CRITICAL))

    configure_logging(web_config)
    logging.getLogger("thirdparty").critical("disk on fire")

    content = (web_config.runtime_path / "logs" / "app.log").read_text(encoding="utf-8")
    assert "CRITICAL - disk on fire" in content
