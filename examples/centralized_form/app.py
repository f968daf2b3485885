"""Centralized form error handler — one aggregate for a whole form.

A person form with four scalar fields and a "favorite foods" repeated
group. ``watch()`` keeps ``errors`` up to date as the user types; a
render pass would read ``errors`` directly.

Demonstrates:
- Building a control tree with ``required``, ``min_length``, ``email``
- ``watch()`` with a shorter quiescence window
- Per-item errors for a repeated group, index-aligned with the items
- Adding an item to the repeated group mid-session

Run:
    python app.py
"""

import logging

import anyio

from formwatch import ErrorAggregate, WatchConfig, watch
from formwatch.forms import FormArray, FormControl, FormGroup
from formwatch.forms.validators import email, min_length, required

# ---------------------------------------------------------------------------
# Form schema
# ---------------------------------------------------------------------------


def food_item() -> FormGroup:
    return FormGroup({
        "foodCal": FormControl("", [required]),
        "foodName": FormControl("", [required]),
    })


def build_form() -> FormGroup:
    return FormGroup({
        "firstName": FormControl("", [required, min_length(5)]),
        "lastName": FormControl("", [required, min_length(3)]),
        "ssn": FormControl("", [required]),
        "email": FormControl("", [email]),
        "favoriteFoods": FormArray([food_item(), food_item()]),
    })


# ---------------------------------------------------------------------------
# Scripted session standing in for a user typing
# ---------------------------------------------------------------------------


async def run_session(form: FormGroup, errors: ErrorAggregate, config: WatchConfig) -> None:
    settle = config.debounce * 3

    async with watch(form, errors, config):
        for partial in ("J", "Jo", "Joh"):
            form["firstName"].set_value(partial)  # type: ignore[attr-defined]
        await anyio.sleep(settle)

        form["email"].mark_as_touched()
        form["email"].set_value("jo@")  # type: ignore[attr-defined]
        await anyio.sleep(settle)

        foods = form["favoriteFoods"]
        foods.at(0)["foodName"].set_value("ramen")  # type: ignore[attr-defined]
        foods.at(1)["foodCal"].mark_as_touched()  # type: ignore[attr-defined]
        foods.append(food_item())  # type: ignore[attr-defined]
        await anyio.sleep(settle)


async def main() -> None:
    form = build_form()
    errors = ErrorAggregate()
    await run_session(form, errors, WatchConfig(debounce=0.2))
    for field, entry in errors.to_dict().items():
        print(f"{field}: {entry}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")
    anyio.run(main)
