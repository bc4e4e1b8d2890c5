#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

"""
Human friendly access to the [USB ID Repository](http://www.linux-usb.org/usb-ids.html).

The module level functions query the process wide catalog, built from the
system usb.ids on first use:

```python
import usbids

for vendor in usbids.iter_all_vendors():
    for device in vendor.devices:
        print(f"vendor: {vendor.name}, device: {device.name}")

print(usbids.device_by_vid_pid(0x1D6B, 0x0003).name)  # 3.0 root hub
```
"""

from .base import Class, Device, Interface, Protocol, SubClass, Vendor
from .catalog import Catalog, get_catalog
from .parser import MalformedRegistryError
from .types import Iterator, Optional

__all__ = [
    "Catalog",
    "Class",
    "Device",
    "Interface",
    "MalformedRegistryError",
    "Protocol",
    "SubClass",
    "Vendor",
    "device_by_vid_pid",
    "get_catalog",
    "iter_all_classes",
    "iter_all_vendors",
    "lookup_class",
    "lookup_vendor",
    "protocol_by_cid_scid_pid",
    "subclass_by_cid_scid",
    "vendor_of",
]


def lookup_vendor(vendor_id: int) -> Optional[Vendor]:
    return get_catalog().lookup_vendor(vendor_id)


def lookup_class(class_id: int) -> Optional[Class]:
    return get_catalog().lookup_class(class_id)


def device_by_vid_pid(vendor_id: int, product_id: int) -> Optional[Device]:
    return get_catalog().device_by_vid_pid(vendor_id, product_id)


def vendor_of(device: Device) -> Vendor:
    return get_catalog().vendor_of(device)


def subclass_by_cid_scid(class_id: int, sub_class_id: int) -> Optional[SubClass]:
    return get_catalog().subclass_by_cid_scid(class_id, sub_class_id)


def protocol_by_cid_scid_pid(class_id: int, sub_class_id: int, protocol_id: int) -> Optional[Protocol]:
    return get_catalog().protocol_by_cid_scid_pid(class_id, sub_class_id, protocol_id)


def iter_all_vendors() -> Iterator[Vendor]:
    return get_catalog().iter_vendors()


def iter_all_classes() -> Iterator[Class]:
    return get_catalog().iter_classes()
