"""Shared fixtures for formwatch tests."""

import pytest

from formwatch.forms import FormArray, FormControl, FormGroup
from formwatch.forms.validators import email, min_length, required


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def food_item(cal: str = "", name: str = "") -> FormGroup:
    return FormGroup({
        "foodCal": FormControl(cal, [required]),
        "foodName": FormControl(name, [required]),
    })


@pytest.fixture
def profile_form() -> FormGroup:
    """The person form: four scalar fields and a two-item repeated group."""
    return FormGroup({
        "firstName": FormControl("", [required, min_length(5)]),
        "lastName": FormControl("Doe", [required, min_length(3)]),
        "ssn": FormControl("1", [required]),
        "email": FormControl("", [email]),
        "favoriteFoods": FormArray([food_item(), food_item()]),
    })
