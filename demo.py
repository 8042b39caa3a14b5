"""
demo.py

Minimal CLI demo for the attrchain engine.
- Declares attributes with explicit descriptors
- Shadows a delegate attribute
- Walks through prevent_extensions, seal and freeze
- Shows that a frozen record still picks up delegate changes
"""

import logging

from attrchain import (
    AttributeModelError,
    ObjectRecord,
    format_error_for_user,
)


def attempt(label, action):
    try:
        result = action()
    except AttributeModelError as exc:
        print(f"  {label}: refused")
        print("    " + format_error_for_user(exc).replace("\n", "\n    "))
    else:
        print(f"  {label}: ok ({result!r})")


def main():
    # --- Delegate with shared behavior ---
    proto = ObjectRecord.literal({"greet": lambda self: f"Hello, {self.get('name')}"}, label="proto")

    # --- Receiver with explicit descriptors ---
    person = ObjectRecord(proto, label="person")
    person.define_many({
        "_name": {"value": "Josef", "writable": True, "configurable": True},
        "name": {
            "get": lambda self: self.get("_name"),
            "set": lambda self, value: self.set("_name", value),
            "enumerable": True,
            "configurable": True,
        },
        "_age": {"value": 0, "writable": False, "enumerable": True, "configurable": True},
    })

    print("Initial record:")
    print(person)
    print(f"  greet -> {person.call('greet')}")

    print("\nAssignments:")
    attempt("name = 'Josef Gisis'", lambda: person.set("name", "Josef Gisis"))
    attempt("_age = 1", lambda: person.set("_age", 1))
    attempt("greet shadowed", lambda: person.set("greet", lambda self: "Hi"))

    print("\nprevent_extensions:")
    person.prevent_extensions()
    attempt("add new_property", lambda: person.set("new_property", 1))

    print("\nseal:")
    person.seal()
    attempt("remove _age", lambda: person.remove("_age"))

    print("\nfreeze:")
    person.freeze()
    attempt("name = 'Josephina'", lambda: person.set("name", "Josephina"))
    print(f"  name is still {person.get('name')!r}")

    print("\nDelegate changes after freeze:")
    proto.set("farewell", lambda self: f"Bye, {self.get('name')}")
    print(f"  farewell -> {person.call('farewell')}")

    print("\nFinal record:")
    print(person)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    main()
