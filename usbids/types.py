#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

import collections.abc
import os
import pathlib
import typing

if hasattr(typing, "Self"):  # 3.11+
    Self = typing.Self
else:
    import typing_extensions

    Self = typing_extensions.Self

Union = typing.Union
Optional = typing.Optional
PathLike = Union[str, pathlib.Path, os.PathLike]

Iterable = collections.abc.Iterable
Iterator = collections.abc.Iterator
Callable = collections.abc.Callable
Mapping = collections.abc.Mapping
NamedTuple = typing.NamedTuple
