#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

import argparse
import logging
import sys

from .catalog import Catalog, get_catalog, registry_path
from .codegen import run as codegen_run
from .parser import MalformedRegistryError
from .util import int16


def get(args) -> Catalog:
    return Catalog.from_file(args.ids) if args.ids else get_catalog()


def not_found(what):
    print(f"Unknown {what}", file=sys.stderr)
    return 1


def ls(args):
    catalog = get(args)
    custom_match = None
    if args.match:
        text = args.match.lower()

        def custom_match(item):
            return text in item.name.lower()

    if args.classes:
        for klass in sorted(catalog.find_class(find_all=True, custom_match=custom_match)):
            print(f"{klass.id:02x}  {klass.name}")
    else:
        for vendor in sorted(catalog.find_vendor(find_all=True, custom_match=custom_match)):
            print(f"{vendor.id:04x}  {vendor.name}")


def vendor(args):
    vendor = get(args).lookup_vendor(args.vid)
    if vendor is None:
        return not_found(f"vendor {args.vid:04x}")
    print(f"{vendor.id:04x}  {vendor.name}")
    if args.devices:
        for device in vendor.devices:
            print(f"\t{device.id:04x}  {device.name}")


def device(args):
    catalog = get(args)
    device = catalog.device_by_vid_pid(args.vid, args.pid)
    if device is None:
        return not_found(f"device {args.vid:04x}:{args.pid:04x}")
    vendor = catalog.vendor_of(device)
    print(f"ID {device.vendor_id:04x}:{device.id:04x} {vendor.name} {device.name}")
    for interface in device.interfaces:
        print(f"\t{interface.id:02x}  {interface.name}")


def klass(args):
    klass = get(args).lookup_class(args.cid)
    if klass is None:
        return not_found(f"class {args.cid:02x}")
    print(f"{klass.id:02x}  {klass.name}")
    for sub_class in klass.sub_classes:
        print(f"\t{sub_class.id:02x}  {sub_class.name}")


def subclass(args):
    catalog = get(args)
    sub_class = catalog.subclass_by_cid_scid(args.cid, args.scid)
    if sub_class is None:
        return not_found(f"subclass {args.cid:02x}:{args.scid:02x}")
    print(f"{catalog.class_of(sub_class).name} / {sub_class.name}")
    for protocol in sub_class.protocols:
        print(f"\t{protocol.id:02x}  {protocol.name}")


def protocol(args):
    catalog = get(args)
    protocol = catalog.protocol_by_cid_scid_pid(args.cid, args.scid, args.pid)
    if protocol is None:
        return not_found(f"protocol {args.cid:02x}:{args.scid:02x}:{args.pid:02x}")
    print(f"{protocol.id:02x}  {protocol.name}")


def gen(args):
    source = args.ids or registry_path()
    codegen_run(source, output=args.output, fmt=args.format)


def cli():
    parser = argparse.ArgumentParser(prog="usbids", description="USB ID registry lookup")
    parser.add_argument("--ids", help="usb.ids registry file (default: system registry)")
    parser.add_argument(
        "--log-level",
        choices=["critical", "error", "warning", "info", "debug"],
        default="warning",
        help="log level",
    )
    sub_parsers = parser.add_subparsers(
        title="sub-commands", description="valid sub-commands", help="select one command", required=True, dest="command"
    )
    ls = sub_parsers.add_parser("ls", help="list vendors (or classes)")
    ls.add_argument("--classes", action="store_true", help="list classes instead of vendors")
    ls.add_argument("--match", help="only show entries which name contains the given text")
    vendor = sub_parsers.add_parser("vendor", help="show vendor")
    vendor.add_argument("vid", help="vendor id (hex)", type=int16)
    vendor.add_argument("--devices", action="store_true", help="also list the vendor devices")
    device = sub_parsers.add_parser("device", aliases=["product"], help="show device")
    device.add_argument("vid", help="vendor id (hex)", type=int16)
    device.add_argument("pid", help="product id (hex)", type=int16)
    klass = sub_parsers.add_parser("class", help="show class")
    klass.add_argument("cid", help="class id (hex)", type=int16)
    subclass = sub_parsers.add_parser("subclass", help="show subclass")
    subclass.add_argument("cid", help="class id (hex)", type=int16)
    subclass.add_argument("scid", help="subclass id (hex)", type=int16)
    protocol = sub_parsers.add_parser("protocol", help="show protocol")
    protocol.add_argument("cid", help="class id (hex)", type=int16)
    protocol.add_argument("scid", help="subclass id (hex)", type=int16)
    protocol.add_argument("pid", help="protocol id (hex)", type=int16)
    gen = sub_parsers.add_parser("gen", help="generate a python module with the compiled catalog")
    gen.add_argument("-o", "--output", help="output file (default: stdout)")
    gen.add_argument("--no-format", dest="format", action="store_false", help="do not apply black")
    return parser


COMMANDS = {
    "ls": ls,
    "vendor": vendor,
    "device": device,
    "product": device,
    "class": klass,
    "subclass": subclass,
    "protocol": protocol,
    "gen": gen,
}


def run(args):
    return COMMANDS[args.command](args)


def main(args=None):
    parser = cli()
    args = parser.parse_args(args=args)
    logging.basicConfig(level=args.log_level.upper())
    try:
        return run(args) or 0
    except KeyboardInterrupt:
        print("\rCtrl-C pressed. Bailing out")
        return 130
    except (MalformedRegistryError, FileNotFoundError) as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
