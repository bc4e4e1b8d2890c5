#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

"""
Immutable, id indexed catalog of the USB ID registry.

A [`Catalog`][usbids.catalog.Catalog] is built once from the vendor and
class forests and never changes afterwards. Most applications use the
process wide catalog returned by [`get_catalog`][usbids.catalog.get_catalog]:

```python
from usbids.catalog import get_catalog

catalog = get_catalog()
device = catalog.device_by_vid_pid(0x1D6B, 0x0003)
print(f"{catalog.vendor_of(device).name} {device.name}")
```
"""

import importlib
import logging
import os
import pathlib
import threading
import types

from .base import Class, Device, Interface, Protocol, SubClass, Vendor
from .parser import parse_file
from .types import Iterable, Iterator, Mapping, Optional, PathLike, Self, Union
from .util import make_find

log = logging.getLogger(__name__)

USB_IDS_PATHS = (
    pathlib.Path("/usr/share/hwdata/usb.ids"),
    pathlib.Path("/usr/share/misc/usb.ids"),
    pathlib.Path("/usr/share/usb.ids"),
    pathlib.Path("/var/lib/usbutils/usb.ids"),
)

USBIDS_PATH_ENV = "USBIDS_PATH"
USBIDS_MODULE_ENV = "USBIDS_MODULE"

_catalog = None
_catalog_lock = threading.Lock()


def _index(entities, kind: str) -> types.MappingProxyType:
    result = {}
    for entity in entities:
        if entity.id in result:
            log.warning("Duplicate %s id 0x%X (%r replaces %r)", kind, entity.id, entity.name, result[entity.id].name)
        result[entity.id] = entity
    return types.MappingProxyType(result)


class Catalog:
    """
    Read-only view over the vendor and class maps.

    Lookups never raise: a missing id at any level gives `None`.
    """

    __slots__ = ["_vendors", "_classes", "find_vendor", "find_class"]

    def __init__(self, vendors: Iterable[Vendor] = (), classes: Iterable[Class] = ()):
        set_attr = super().__setattr__
        set_attr("_vendors", _index(vendors, "vendor"))
        set_attr("_classes", _index(classes, "class"))
        set_attr("find_vendor", make_find(self.iter_vendors))
        set_attr("find_class", make_find(self.iter_classes))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __repr__(self):
        return f"{type(self).__name__}(vendors={len(self._vendors)}, classes={len(self._classes)})"

    def __len__(self):
        return len(self._vendors) + len(self._classes)

    def __eq__(self, other):
        if not isinstance(other, Catalog):
            return NotImplemented
        return self._vendors == other._vendors and self._classes == other._classes

    __hash__ = None

    @classmethod
    def from_file(cls, path: PathLike) -> Self:
        """Build a catalog from a usb.ids registry file"""
        vendors, classes = parse_file(path)
        return cls(vendors, classes)

    @classmethod
    def from_module(cls, module: Union[str, types.ModuleType]) -> Self:
        """
        Build a catalog from a module generated by
        [`usbids.codegen`][usbids.codegen].

        Args:
            module (str | module): the module or its dotted name

        Returns:
            Catalog: the new catalog
        """
        if isinstance(module, str):
            module = importlib.import_module(module)
        log.info("Loading catalog from %s", module.__name__)
        return cls(module.VENDORS.values(), module.CLASSES.values())

    @property
    def vendors(self) -> Mapping[int, Vendor]:
        return self._vendors

    @property
    def classes(self) -> Mapping[int, Class]:
        return self._classes

    def iter_vendors(self) -> Iterator[Vendor]:
        return iter(self._vendors.values())

    def iter_classes(self) -> Iterator[Class]:
        return iter(self._classes.values())

    def lookup_vendor(self, vendor_id: int) -> Optional[Vendor]:
        return self._vendors.get(vendor_id)

    def lookup_class(self, class_id: int) -> Optional[Class]:
        return self._classes.get(class_id)

    def device_by_vid_pid(self, vendor_id: int, product_id: int) -> Optional[Device]:
        vendor = self.lookup_vendor(vendor_id)
        return None if vendor is None else vendor.device(product_id)

    def interface_by_vid_pid_iid(self, vendor_id: int, product_id: int, interface_id: int) -> Optional[Interface]:
        device = self.device_by_vid_pid(vendor_id, product_id)
        return None if device is None else device.interface(interface_id)

    def vendor_of(self, device: Device) -> Vendor:
        """The vendor the device belongs to. Looking it up is cheap (`O(1)`)."""
        return self._vendors[device.vendor_id]

    def class_of(self, sub_class: SubClass) -> Class:
        """The class the subclass belongs to. Looking it up is cheap (`O(1)`)."""
        return self._classes[sub_class.class_id]

    def subclass_by_cid_scid(self, class_id: int, sub_class_id: int) -> Optional[SubClass]:
        klass = self.lookup_class(class_id)
        return None if klass is None else klass.sub_class(sub_class_id)

    def protocol_by_cid_scid_pid(self, class_id: int, sub_class_id: int, protocol_id: int) -> Optional[Protocol]:
        sub_class = self.subclass_by_cid_scid(class_id, sub_class_id)
        return None if sub_class is None else sub_class.protocol(protocol_id)

    # Name helpers for diagnostic tools: "" when unknown

    def vendor_name(self, vendor_id: int) -> str:
        vendor = self.lookup_vendor(vendor_id)
        return "" if vendor is None else vendor.name

    def device_name(self, vendor_id: int, product_id: int) -> str:
        device = self.device_by_vid_pid(vendor_id, product_id)
        return "" if device is None else device.name

    def class_name(self, class_id: int) -> str:
        klass = self.lookup_class(class_id)
        return "" if klass is None else klass.name

    def subclass_name(self, class_id: int, sub_class_id: int) -> str:
        sub_class = self.subclass_by_cid_scid(class_id, sub_class_id)
        return "" if sub_class is None else sub_class.name

    def protocol_name(self, class_id: int, sub_class_id: int, protocol_id: int) -> str:
        protocol = self.protocol_by_cid_scid_pid(class_id, sub_class_id, protocol_id)
        return "" if protocol is None else protocol.name


def registry_path() -> pathlib.Path:
    """
    Location of the usb.ids registry: `$USBIDS_PATH` if set, otherwise the
    first existing file of `USB_IDS_PATHS`.

    Raises:
        FileNotFoundError: if no registry can be found
    """
    path = os.environ.get(USBIDS_PATH_ENV)
    if path:
        return pathlib.Path(path)
    for path in USB_IDS_PATHS:
        if path.exists():
            return path
    searched = ", ".join(str(path) for path in USB_IDS_PATHS)
    raise FileNotFoundError(f"Could not find usb.ids (set {USBIDS_PATH_ENV} or install it in one of: {searched})")


def build_catalog() -> Catalog:
    """
    Build a new catalog from the configured source.

    `$USBIDS_MODULE` selects a generated module; otherwise the registry
    text found by [`registry_path`][usbids.catalog.registry_path] is parsed.
    """
    module = os.environ.get(USBIDS_MODULE_ENV)
    if module:
        return Catalog.from_module(module)
    return Catalog.from_file(registry_path())


def get_catalog() -> Catalog:
    """
    The process wide catalog, built once on first call, even when the first
    calls come from several threads. A failed build leaves nothing behind
    and the next call tries again.
    """
    global _catalog
    catalog = _catalog
    if catalog is None:
        with _catalog_lock:
            if _catalog is None:
                _catalog = build_catalog()
            catalog = _catalog
    return catalog


def reset_catalog():
    """Forget the process wide catalog so the next call to get_catalog builds a new one"""
    global _catalog
    with _catalog_lock:
        _catalog = None
