#!/usr/bin/env python3
"""
pet_elephant.py: Mixins Without Delegation
==========================================

Dumbo is a pet, not an elephant. Mixing an elephant into a pet gives the
pet the elephant's own attributes (accessors included) without making the
pet delegate to the elephant prototype.

Key Concepts:
    - mixin() copies whole descriptors, so `color` stays an accessor
    - Non-enumerable attributes (`_color`) are not copied
    - Methods on the elephant prototype stay unreachable from the pet
    - compose() reports partial failures instead of stopping
"""

import logging

from attrchain import (
    AttributeNotFoundError,
    constructor,
    compose,
    instance_of,
    mixin,
)


@constructor
def Elephant(host):
    host.define_many({
        "_color": {"value": "gray", "writable": True, "configurable": True},
        "color": {
            "get": lambda self: self.get("_color"),
            "set": lambda self, value: print("  You cannot change the color"),
            "enumerable": True,
            "configurable": True,
        },
        "weight": {
            "value": "very heavy",
            "writable": True,
            "enumerable": True,
            "configurable": True,
        },
    })


Elephant.prototype.define("make_noise", {"value": lambda self: "Trumpet"})


@constructor
def Pet(host, name):
    host.define("name", {
        "value": name, "writable": True, "enumerable": True, "configurable": True,
    })


def main():
    dumbo = Pet("Dumbo")
    mixin(dumbo, Elephant())

    print("Dumbo after mixin:")
    print(dumbo)
    print()

    print("Setting color to pink:")
    dumbo.set("color", "pink")
    print(f"  color is now {dumbo.get('color')!r} (no _color of its own)")
    print()

    print(f"Is Dumbo an elephant? {instance_of(dumbo, Elephant)}")
    print(f"Is Dumbo a pet?       {instance_of(dumbo, Pet)}")
    try:
        dumbo.call("make_noise")
    except AttributeNotFoundError as exc:
        print(f"  {exc}")
    print()

    print("Mixing into a sealed pet:")
    sealed_pet = Pet("Jumbo").seal()
    report = compose(sealed_pet, Elephant())
    print(f"  {report!r}")
    for name, error in report.failures.items():
        print(f"  {name}: {error.message}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    main()
