#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

"""
Entities of the USB ID registry.

Every entity is an immutable named tuple. Children only keep the id of
their parent; resolving a parent always goes through a
[`Catalog`][usbids.catalog.Catalog].
"""

from .types import NamedTuple, Optional


def _find(items, item_id):
    for item in items:
        if item.id == item_id:
            return item


class Interface(NamedTuple):
    id: int
    name: str


class Device(NamedTuple):
    """
    A device (product) of a vendor.

    **NOTE**: The registry does not include interface information for
    most devices. The interfaces list is not authoritative.
    """

    vendor_id: int
    id: int
    name: str
    interfaces: tuple[Interface, ...] = ()

    def as_vid_pid(self) -> tuple[int, int]:
        """(vendor id, device/"product" id) pair, as most USB libraries expect it"""
        return self.vendor_id, self.id

    def interface(self, interface_id: int) -> Optional[Interface]:
        return _find(self.interfaces, interface_id)


class Vendor(NamedTuple):
    id: int
    name: str
    devices: tuple[Device, ...] = ()

    def device(self, device_id: int) -> Optional[Device]:
        return _find(self.devices, device_id)


class Protocol(NamedTuple):
    id: int
    name: str


class SubClass(NamedTuple):
    """
    A subclass of a device class.

    **NOTE**: Neither the registry nor USB-IF list protocols for every
    subclass. The protocols list is not authoritative.
    """

    class_id: int
    id: int
    name: str
    protocols: tuple[Protocol, ...] = ()

    def as_cid_scid(self) -> tuple[int, int]:
        """(class id, subclass id) pair"""
        return self.class_id, self.id

    def protocol(self, protocol_id: int) -> Optional[Protocol]:
        return _find(self.protocols, protocol_id)


class Class(NamedTuple):
    id: int
    name: str
    sub_classes: tuple[SubClass, ...] = ()

    def sub_class(self, sub_class_id: int) -> Optional[SubClass]:
        return _find(self.sub_classes, sub_class_id)
