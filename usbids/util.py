#
# This file is part of the usbids project
#
# Copyright (c) 2024 Tiago Coutinho
# Distributed under the GPLv3 license. See LICENSE for more info.

"""Utility functions used by the library. Mostly for internal usage"""

import functools

from .types import Callable, Iterator

int16 = functools.partial(int, base=16)


def make_find(iter_items: Callable[[], Iterator]) -> Callable:
    """
    Create a find function for the given callable. The callable should
    return a new iterator over the candidate items each time it is called
    """

    def find(find_all=False, custom_match=None, **kwargs):
        items = iter_items()
        if kwargs or custom_match:

            def accept(item):
                result = all(getattr(item, key) == value for key, value in kwargs.items())
                if result and custom_match:
                    return custom_match(item)
                return result

            items = filter(accept, items)
        return items if find_all else next(items, None)

    return find
