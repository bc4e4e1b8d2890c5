#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

from pathlib import Path

import pytest

from usbids.catalog import Catalog, get_catalog, reset_catalog

USB_IDS_PATH = Path(__file__).parent / "usb.ids"


@pytest.fixture
def ids_path():
    return USB_IDS_PATH


@pytest.fixture
def catalog():
    return Catalog.from_file(USB_IDS_PATH)


@pytest.fixture
def process_catalog(monkeypatch):
    monkeypatch.setenv("USBIDS_PATH", str(USB_IDS_PATH))
    monkeypatch.delenv("USBIDS_MODULE", raising=False)
    reset_catalog()
    yield get_catalog()
    reset_catalog()
