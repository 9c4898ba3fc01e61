import logging

import pytest

from bubble_art.config import Config
from bubble_art.logging_conf import setup_logging


@pytest.fixture
def restore_levels():
    names = ["bubble_art", "bubble_art.grid", "bubble_art.export", "PIL"]
    saved = {n: logging.getLogger(n).level for n in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_module_levels_override_package_level(tmp_path, restore_levels):
    cfg = Config(path=str(tmp_path / "c.json"))
    cfg.update({"logging": {
        "level": "warning",
        "modules": {"bubble_art.grid": "debug", "bubble_art.export": "loud"},
    }})
    assert cfg["logging"]["modules"] == {"bubble_art.grid": "DEBUG"}

    setup_logging(cfg)
    assert logging.getLogger("bubble_art").level == logging.WARNING
    assert logging.getLogger("bubble_art.grid").getEffectiveLevel() == logging.DEBUG
    assert logging.getLogger("bubble_art.export").getEffectiveLevel() == logging.WARNING
    assert logging.getLogger("PIL").level == logging.WARNING
