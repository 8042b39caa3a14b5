#!/usr/bin/env python3
"""
shapes.py: Constructor Inheritance
==================================

Rectangle and Square built with guarded constructors. Square's prototype
delegates to Rectangle's, Square's routine borrows Rectangle's routine on
its own fresh host, and Square overrides `to_string` while still reaching
the parent version.

Key Concepts:
    - Constructor.inherit() links prototypes
    - safe_invoke() runs the parent routine only on a fresh host
    - An accidental call with a shared record builds a new instance instead
"""

import logging

from attrchain import ObjectRecord, constructor, instance_of


@constructor
def Rectangle(host, length, width):
    host.define_many({
        "length": {"value": length, "writable": True, "enumerable": True},
        "width": {"value": width, "writable": True, "enumerable": True},
    })


Rectangle.prototype.define_many({
    "get_area": {"value": lambda self: self.get("length") * self.get("width")},
    "to_string": {
        "value": lambda self: f"[Rectangle {self.get('length')}x{self.get('width')}]",
    },
})


@constructor
def Square(host, size):
    Rectangle.safe_invoke(host, size, size)


Square.inherit(Rectangle)
Square.prototype.define("to_string", {
    "value": lambda self: "Square from " + Rectangle.prototype.get("to_string")(self),
})


def main():
    rect = Rectangle(5, 10)
    square = Square(6)

    print(rect.call("to_string"), "area", rect.call("get_area"))
    print(square.call("to_string"), "area", square.call("get_area"))
    print(f"square instance of Rectangle: {instance_of(square, Rectangle)}")
    print()

    shared = ObjectRecord(label="global")
    stray = Rectangle.safe_invoke(shared, 1, 2)
    print(f"shared record after stray call: {shared.to_dict()}")
    print(f"stray call produced:            {stray.to_dict()}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    main()
