# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Sample families used by the walkthrough.

Each function returns a fresh object so a run can mutate its copy.
"""

from .models import Address, Child, Family, Parent, Pet


def andersen_family() -> Family:
    return Family(
        id="Andersen.1",
        last_name="Andersen",
        parents=[Parent(first_name="Thomas"), Parent(first_name="Mary Kay")],
        children=[
            Child(
                first_name="Henriette Thaulow",
                gender="female",
                grade=5,
                pets=[Pet(given_name="Fluffy")],
            )
        ],
        address=Address(state="WA", county="King", city="Seattle"),
        is_registered=True,
    )


def wakefield_family() -> Family:
    return Family(
        id="Wakefield.7",
        last_name="Wakefield",
        parents=[
            Parent(family_name="Wakefield", first_name="Robin"),
            Parent(family_name="Miller", first_name="Ben"),
        ],
        children=[
            Child(
                family_name="Merriam",
                first_name="Jesse",
                gender="female",
                grade=8,
                pets=[Pet(given_name="Goofy"), Pet(given_name="Shadow")],
            ),
            Child(family_name="Miller", first_name="Lisa", gender="female", grade=1),
        ],
        address=Address(state="NY", county="Manhattan", city="NY"),
        is_registered=False,
    )


def stanford_family_9() -> Family:
    return Family(
        id="Stanford.9",
        last_name="Stanford",
        parents=[
            Parent(family_name="Stanford", first_name="ellen"),
            Parent(family_name="Stanford", first_name="Ben"),
        ],
        children=[
            Child(
                family_name="webster",
                first_name="Martina",
                gender="female",
                grade=8,
                pets=[Pet(given_name="Scooby")],
            ),
            Child(family_name="Stanford", first_name="lauren", gender="female", grade=1),
        ],
        address=Address(state="AB", county="King", city="Calgary"),
        is_registered=False,
    )


def stanford_family_11() -> Family:
    return Family(
        id="Stanford.11",
        last_name="Stanford",
        parents=[
            Parent(family_name="Stanford", first_name="Brianna"),
            Parent(family_name="Stanford", first_name="Albert"),
        ],
        children=[
            Child(
                family_name="Stanford",
                first_name="Timothy",
                gender="male",
                grade=8,
                pets=[Pet(given_name="roadrunner")],
            )
        ],
        address=Address(state="OR", county="Queen", city="Portland"),
        is_registered=True,
    )
