#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

r"""
Parser for the USB ID registry (usb.ids).

The registry reuses the same line shapes for two unrelated hierarchies:

```
1d6b  Linux Foundation          <- vendor
\t0003  3.0 root hub            <- device
C 03  Human Interface Device    <- class
\t01  Boot Interface Subclass   <- subclass
\t\t01  Keyboard                <- protocol (same shape as an interface)
```

so [`classify`][usbids.parser.classify] only reports the shape of a line
and the [`Builder`][usbids.parser.Builder] resolves it against the section
it is currently in. Sections must come in registry order: vendors, then
classes, then the audio terminal types (`AT`) which end the parsing.
"""

import enum
import logging
import re

from .base import Class, Device, Interface, Protocol, SubClass, Vendor
from .types import Iterable, NamedTuple, Optional, PathLike

log = logging.getLogger(__name__)

VENDOR_RE = re.compile(r"(?P<id>[0-9a-fA-F]{4})  (?P<name>.*)")
CLASS_RE = re.compile(r"C (?P<id>[0-9a-fA-F]{2})  (?P<name>.*)")
CHILD_RE = re.compile(r"\t(?P<id>[0-9a-fA-F]{4}|[0-9a-fA-F]{2})  (?P<name>.*)")
GRANDCHILD_RE = re.compile(r"\t\t(?P<id>[0-9a-fA-F]{2})  (?P<name>.*)")

CLASS_PREFIX = "C "
TYPES_PREFIX = "AT "


class Shape(enum.Enum):
    BLANK = "blank"
    COMMENT = "comment"
    VENDOR = "vendor"
    CLASS = "class"
    TYPES = "types"
    CHILD = "child"
    GRANDCHILD = "grandchild"
    UNRECOGNIZED = "unrecognized"


class Kind(enum.Enum):
    VENDOR = "VendorLine"
    DEVICE = "DeviceLine"
    INTERFACE = "InterfaceLine"
    CLASS = "ClassHeaderLine"
    SUBCLASS = "SubClassLine"
    PROTOCOL = "ProtocolLine"
    TYPES = "TypeSectionMarker"
    BLANK = "Blank"
    COMMENT = "Comment"
    UNRECOGNIZED = "Unrecognized"


class Section(enum.Enum):
    VENDORS = "vendors"
    CLASSES = "classes"
    TYPES = "types"


class Line(NamedTuple):
    shape: Shape
    id: Optional[int] = None
    name: Optional[str] = None
    width: int = 0


class MalformedRegistryError(ValueError):
    """Raised when a line has no parent entity to attach to"""

    def __init__(self, message: str, line_number: int = 0, line: str = ""):
        self.line_number = line_number
        self.line = line
        super().__init__(f"line {line_number}: {message}: {line!r}")


def _match(shape: Shape, regex: re.Pattern, text: str) -> Line:
    match = regex.fullmatch(text)
    if match is None:
        return Line(Shape.UNRECOGNIZED)
    hex_id = match["id"]
    return Line(shape, int(hex_id, 16), match["name"], len(hex_id))


def classify(text: str) -> Line:
    """
    Classify a single registry line by its shape alone.

    Args:
        text (str): the line, with or without its line terminator

    Returns:
        Line: shape, id, name and hex width of the id field
    """
    text = text.rstrip("\r\n")
    if not text.strip():
        return Line(Shape.BLANK)
    if text.startswith("#"):
        return Line(Shape.COMMENT)
    if text.startswith(TYPES_PREFIX):
        return Line(Shape.TYPES)
    if text.startswith(CLASS_PREFIX):
        return _match(Shape.CLASS, CLASS_RE, text)
    if text.startswith("\t\t"):
        return _match(Shape.GRANDCHILD, GRANDCHILD_RE, text)
    if text.startswith("\t"):
        return _match(Shape.CHILD, CHILD_RE, text)
    return _match(Shape.VENDOR, VENDOR_RE, text)


_SIMPLE_KINDS = {
    Shape.BLANK: Kind.BLANK,
    Shape.COMMENT: Kind.COMMENT,
    Shape.CLASS: Kind.CLASS,
    Shape.TYPES: Kind.TYPES,
    Shape.UNRECOGNIZED: Kind.UNRECOGNIZED,
}

_SECTION_KINDS = {
    (Section.VENDORS, Shape.VENDOR, 4): Kind.VENDOR,
    (Section.VENDORS, Shape.CHILD, 4): Kind.DEVICE,
    (Section.VENDORS, Shape.GRANDCHILD, 2): Kind.INTERFACE,
    (Section.CLASSES, Shape.CHILD, 2): Kind.SUBCLASS,
    (Section.CLASSES, Shape.GRANDCHILD, 2): Kind.PROTOCOL,
}


def resolve(line: Line, section: Section) -> Kind:
    """Resolve the kind of a classified line in the context of the given section"""
    kind = _SIMPLE_KINDS.get(line.shape)
    if kind is None:
        kind = _SECTION_KINDS.get((section, line.shape, line.width), Kind.UNRECOGNIZED)
    return kind


class Node:
    """Entity under construction: children are appended until it is frozen"""

    __slots__ = ["id", "name", "children"]

    def __init__(self, nid: int, name: str):
        self.id = nid
        self.name = name
        self.children = []

    def child(self, child_id: Optional[int]):
        for child in self.children:
            if child.id == child_id:
                return child


def freeze_vendor(node: Node) -> Vendor:
    devices = tuple(Device(node.id, device.id, device.name, tuple(device.children)) for device in node.children)
    return Vendor(node.id, node.name, devices)


def freeze_class(node: Node) -> Class:
    sub_classes = tuple(SubClass(node.id, sub.id, sub.name, tuple(sub.children)) for sub in node.children)
    return Class(node.id, node.name, sub_classes)


class State(NamedTuple):
    section: Section
    parent: Optional[Node] = None
    last_child_id: Optional[int] = None


TYPES = State(Section.TYPES)


class Builder:
    """
    Stateful parser which assembles the vendor and class forests
    from registry lines fed in order.

    Child lines without an open parent raise a
    [`MalformedRegistryError`][usbids.parser.MalformedRegistryError].
    Lines of unknown shape are skipped.
    """

    def __init__(self):
        self.state = State(Section.VENDORS)
        self.vendors: list[Vendor] = []
        self.classes: list[Class] = []
        self.line_number = 0
        self.skipped = 0
        self._result = None

    @property
    def section(self) -> Section:
        return self.state.section

    @property
    def closed(self) -> bool:
        return self._result is not None

    def _flush(self):
        parent = self.state.parent
        if parent is None:
            return
        if self.section is Section.VENDORS:
            self.vendors.append(freeze_vendor(parent))
        elif self.section is Section.CLASSES:
            self.classes.append(freeze_class(parent))

    def _error(self, message: str, text: str):
        return MalformedRegistryError(message, self.line_number, text.rstrip("\r\n"))

    def feed(self, text: str):
        """Process the next registry line"""
        if self.closed:
            raise ValueError("Cannot feed a closed builder")
        self.line_number += 1
        if self.section is Section.TYPES:
            return
        line = classify(text)
        if line.shape is Shape.CLASS and self.section is not Section.CLASSES:
            self._flush()
            self.state = State(Section.CLASSES)
        elif line.shape is Shape.TYPES:
            self._flush()
            self.state = TYPES
            log.debug("Reached type section at line %d", self.line_number)
            return

        kind = resolve(line, self.section)
        if kind in {Kind.BLANK, Kind.COMMENT}:
            return
        elif kind in {Kind.VENDOR, Kind.CLASS}:
            self._flush()
            self.state = State(self.section, Node(line.id, line.name))
        elif kind in {Kind.DEVICE, Kind.SUBCLASS}:
            parent = self.state.parent
            if parent is None:
                parent_kind = "vendor" if kind is Kind.DEVICE else "class"
                raise self._error(f"{kind.value} without parent {parent_kind}", text)
            parent.children.append(Node(line.id, line.name))
            self.state = State(self.section, parent, line.id)
        elif kind is Kind.INTERFACE:
            self._add_leaf(kind, Interface(line.id, line.name), "device", text)
        elif kind is Kind.PROTOCOL:
            self._add_leaf(kind, Protocol(line.id, line.name), "subclass", text)
        else:
            self.skipped += 1
            log.debug("Skipping unrecognized line %d: %r", self.line_number, text)

    def _add_leaf(self, kind: Kind, leaf, parent_kind: str, text: str):
        parent = self.state.parent
        child = None if parent is None else parent.child(self.state.last_child_id)
        if child is None:
            raise self._error(f"{kind.value} without parent {parent_kind}", text)
        child.children.append(leaf)

    def close(self) -> tuple[tuple[Vendor, ...], tuple[Class, ...]]:
        """
        Flush any open vendor or class and return both forests.

        Returns:
            tuple: (vendors, classes) in registry order
        """
        if self._result is None:
            self._flush()
            self.state = TYPES
            self._result = tuple(self.vendors), tuple(self.classes)
            log.info(
                "Parsed %d vendors, %d classes (%d lines, %d skipped)",
                len(self.vendors),
                len(self.classes),
                self.line_number,
                self.skipped,
            )
        return self._result


def parse(lines: Iterable[str]) -> tuple[tuple[Vendor, ...], tuple[Class, ...]]:
    """Build the vendor and class forests from registry lines"""
    builder = Builder()
    for line in lines:
        builder.feed(line)
        if builder.section is Section.TYPES:
            break
    return builder.close()


def parse_file(path: PathLike) -> tuple[tuple[Vendor, ...], tuple[Class, ...]]:
    """Build the vendor and class forests from a registry file"""
    log.info("Parsing %s", path)
    with open(path, encoding="utf-8", errors="replace") as fobj:
        return parse(fobj)
