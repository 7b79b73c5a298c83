# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Tests for family models and sample data."""

import json

from familydb_demo.models import Address, Child, Family, Parent, Pet
from familydb_demo.sample_data import andersen_family, stanford_family_9, stanford_family_11, wakefield_family


class TestFamily:
    def test_to_dict_uses_stored_names(self):
        family = Family(
            id="Andersen.1",
            last_name="Andersen",
            parents=[Parent(first_name="Thomas")],
            children=[Child(first_name="Henriette", grade=5, pets=[Pet(given_name="Fluffy")])],
            address=Address(state="WA", city="Seattle"),
            is_registered=True,
        )

        assert family.to_dict() == {
            "id": "Andersen.1",
            "LastName": "Andersen",
            "Parents": [{"FirstName": "Thomas"}],
            "Children": [{"FirstName": "Henriette", "Grade": 5, "Pets": [{"GivenName": "Fluffy"}]}],
            "Address": {"State": "WA", "City": "Seattle"},
            "IsRegistered": True,
        }

    def test_missing_address_is_omitted(self):
        assert "Address" not in Family(id="x", last_name="y").to_dict()

    def test_from_dict_ignores_unknown_fields(self):
        family = Family.from_dict({"id": "x", "LastName": "y", "_etag": "e", "Nickname": "z"})

        assert family == Family(id="x", last_name="y")

    def test_from_dict_restores_stored_document(self):
        for family in (andersen_family(), wakefield_family(), stanford_family_9(), stanford_family_11()):
            assert Family.from_dict(family.to_dict()) == family

    def test_str_is_json(self):
        family = wakefield_family()

        assert json.loads(str(family)) == family.to_dict()

    def test_child_grade_defaults_to_zero(self):
        assert Child.from_dict({"FirstName": "Lisa"}).grade == 0


class TestSampleData:
    def test_partition_keys(self):
        assert andersen_family().last_name == "Andersen"
        assert wakefield_family().last_name == "Wakefield"
        assert stanford_family_9().last_name == stanford_family_11().last_name == "Stanford"

    def test_registration_and_children(self):
        assert andersen_family().is_registered is True
        assert wakefield_family().is_registered is False
        assert len(wakefield_family().children) == 2
        assert stanford_family_9().is_registered is False
        assert len(stanford_family_9().children) == 2
        assert stanford_family_11().is_registered is True

    def test_andersen_child_grade(self):
        assert andersen_family().children[0].grade == 5

    def test_each_call_returns_a_fresh_object(self):
        first = andersen_family()
        first.children[0].grade = 6

        assert andersen_family().children[0].grade == 5
