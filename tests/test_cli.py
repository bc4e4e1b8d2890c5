#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

import pytest

from usbids.cli import main


@pytest.fixture
def run(ids_path, capsys):
    def run(*args):
        code = main(["--ids", str(ids_path), *args])
        return code, capsys.readouterr()

    return run


def test_vendor(run):
    code, result = run("vendor", "1d6b", "--devices")
    assert code == 0
    lines = result.out.splitlines()
    assert lines[0] == "1d6b  Linux Foundation"
    assert "\t0003  3.0 root hub" in lines


def test_device(run):
    code, result = run("device", "ffee", "0100")
    assert code == 0
    assert result.out == "ID ffee:0100 FNK Tech Card Reader Controller RTS5101/RTS5111/RTS5116\n"

    code, result = run("product", "05c6", "9001")
    assert code == 0
    assert result.out.splitlines()[1:] == ["\t00  Diagnostics", "\t01  Modem", "\t03  NMEA"]


def test_class(run):
    code, result = run("class", "03")
    assert code == 0
    assert result.out.splitlines() == ["03  Human Interface Device", "\t00  No Subclass", "\t01  Boot Interface Subclass"]


def test_subclass(run):
    code, result = run("subclass", "3", "1")
    assert code == 0
    assert result.out.splitlines()[0] == "Human Interface Device / Boot Interface Subclass"


def test_protocol(run):
    code, result = run("protocol", "07", "01", "03")
    assert code == 0
    assert result.out == "03  IEEE 1284.4 compatible bidirectional\n"


@pytest.mark.parametrize(
    "args, message",
    [
        (("vendor", "beef"), "Unknown vendor beef"),
        (("device", "1d6b", "beef"), "Unknown device 1d6b:beef"),
        (("class", "42"), "Unknown class 42"),
        (("subclass", "03", "42"), "Unknown subclass 03:42"),
        (("protocol", "ff", "ff", "fe"), "Unknown protocol ff:ff:fe"),
    ],
)
def test_unknown(run, args, message):
    code, result = run(*args)
    assert code == 1
    assert not result.out
    assert message in result.err


def test_ls(run):
    code, result = run("ls")
    assert code == 0
    lines = result.out.splitlines()
    assert lines[0] == "0001  Fry's Electronics"
    assert lines[-1] == "fff1  Hisense"

    code, result = run("ls", "--classes", "--match", "SPECIFIC")
    assert result.out.splitlines() == ["fe  Application Specific Interface", "ff  Vendor Specific Class"]


def test_gen(run, tmp_path):
    output = tmp_path / "db.py"
    code, _ = run("gen", "--no-format", "-o", str(output))
    assert code == 0
    assert "VENDORS = MappingProxyType(" in output.read_text()


def test_malformed(tmp_path, capsys):
    path = tmp_path / "usb.ids"
    path.write_text("\t0003  3.0 root hub\n")
    assert main(["--ids", str(path), "vendor", "1d6b"]) == 1
    assert "DeviceLine without parent vendor" in capsys.readouterr().err


def test_missing_registry(tmp_path, capsys):
    assert main(["--ids", str(tmp_path / "usb.ids"), "vendor", "1d6b"]) == 1
    assert "Error:" in capsys.readouterr().err
