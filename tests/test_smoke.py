from __future__ import annotations

import importlib

import pytest


@pytest.mark.unit
def test_import_package() -> None:
    importlib.import_module("beatroot")


@pytest.mark.unit
def test_import_cli_main() -> None:
    importlib.import_module("beatroot.cli.main")


@pytest.mark.unit
def test_import_tracking_api() -> None:
    tracking = importlib.import_module("beatroot.tracking")
    for name in tracking.__all__:
        assert hasattr(tracking, name)
