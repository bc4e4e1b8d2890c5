#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

"""
Catalog compiler: emits the vendor and class forests as a python module of
constant maps, so the registry text does not need to be parsed at runtime.

The generated module can be loaded with
[`Catalog.from_module`][usbids.catalog.Catalog.from_module] or selected as
the process wide catalog with the `USBIDS_MODULE` environment variable.
"""

import datetime
import logging
import pathlib
import platform

import black

from .base import Class, Vendor
from .parser import parse_file
from .types import Iterable, Optional, PathLike

log = logging.getLogger(__name__)

TEMPLATE = """\
#
# This file is part of the usbids project
#
# Distributed under the GPLv3 license. See LICENSE for more info.

# This file has been generated by {name}
# Source: {source}
# Date: {date}
# System: {system}
# Release: {release}

from types import MappingProxyType

from usbids.base import Class, Device, Interface, Protocol, SubClass, Vendor

VENDORS = MappingProxyType({{
{vendors_body}
}})

CLASSES = MappingProxyType({{
{classes_body}
}})
"""


def _tuple(items: Iterable[str]) -> str:
    return "(" + "".join(f"{item}, " for item in items) + ")"


def render_vendor(vendor: Vendor) -> str:
    devices = _tuple(
        f"Device(0x{device.vendor_id:04X}, 0x{device.id:04X}, {device.name!r}, "
        + _tuple(f"Interface(0x{interface.id:02X}, {interface.name!r})" for interface in device.interfaces)
        + ")"
        for device in vendor.devices
    )
    return f"0x{vendor.id:04X}: Vendor(0x{vendor.id:04X}, {vendor.name!r}, {devices}),"


def render_class(klass: Class) -> str:
    sub_classes = _tuple(
        f"SubClass(0x{sub.class_id:02X}, 0x{sub.id:02X}, {sub.name!r}, "
        + _tuple(f"Protocol(0x{protocol.id:02X}, {protocol.name!r})" for protocol in sub.protocols)
        + ")"
        for sub in klass.sub_classes
    )
    return f"0x{klass.id:02X}: Class(0x{klass.id:02X}, {klass.name!r}, {sub_classes}),"


def render(vendors: Iterable[Vendor], classes: Iterable[Class], source="usb.ids", fmt=True) -> str:
    """
    Render the python source of a module holding `VENDORS` and `CLASSES`.

    Args:
        vendors: the vendor forest
        classes: the class forest
        source: registry name recorded in the module header
        fmt (bool): apply black to the result

    Returns:
        str: the module source
    """
    fields = {
        "name": __name__,
        "source": source,
        "date": datetime.datetime.now(),
        "system": platform.system(),
        "release": platform.release(),
        "vendors_body": "\n".join(render_vendor(vendor) for vendor in vendors),
        "classes_body": "\n".join(render_class(klass) for klass in classes),
    }
    text = TEMPLATE.format(**fields)
    if fmt:
        log.info("  Applying black...")
        text = black.format_str(text, mode=black.FileMode())
    return text


def run(source: PathLike, output: Optional[PathLike] = None, fmt=True):
    """Parse the registry `source` and write the generated module to `output` (stdout if None)"""
    log.info("Starting catalog generation from %s...", source)
    vendors, classes = parse_file(source)
    text = render(vendors, classes, source=pathlib.Path(source).name, fmt=fmt)
    if output is None:
        print(text)
    else:
        output = pathlib.Path(output)
        log.info("  Writing %s...", output)
        with output.open("w", encoding="utf-8") as fobj:
            print(text, file=fobj)
    log.info("Finished catalog generation!")
