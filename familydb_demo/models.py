# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Data models for family documents.

Documents are stored with PascalCase property names (``LastName``,
``IsRegistered``, ...) and the Cosmos DB ``id`` key. Members that are None are
left out of the stored document.
"""

import json
from dataclasses import dataclass, field
from typing import Any


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@dataclass
class Pet:
    given_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"GivenName": self.given_name})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pet":
        return cls(given_name=data.get("GivenName"))


@dataclass
class Parent:
    first_name: str | None = None
    family_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"FamilyName": self.family_name, "FirstName": self.first_name})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Parent":
        return cls(first_name=data.get("FirstName"), family_name=data.get("FamilyName"))


@dataclass
class Child:
    first_name: str | None = None
    family_name: str | None = None
    gender: str | None = None
    grade: int = 0
    pets: list[Pet] | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "FamilyName": self.family_name,
            "FirstName": self.first_name,
            "Gender": self.gender,
            "Grade": self.grade,
            "Pets": [pet.to_dict() for pet in self.pets] if self.pets is not None else None,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Child":
        pets = data.get("Pets")
        return cls(
            first_name=data.get("FirstName"),
            family_name=data.get("FamilyName"),
            gender=data.get("Gender"),
            grade=data.get("Grade", 0),
            pets=[Pet.from_dict(pet) for pet in pets] if pets is not None else None,
        )


@dataclass
class Address:
    state: str | None = None
    county: str | None = None
    city: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"State": self.state, "County": self.county, "City": self.city})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Address":
        return cls(state=data.get("State"), county=data.get("County"), city=data.get("City"))


@dataclass
class Family:
    """A family document.

    Attributes:
        id: Document id, unique within the collection
        last_name: Family name; the collection's partition key
        parents: Parents in the family
        children: Children with their grades and pets
        address: Home address
        is_registered: Whether the family has registered
    """
    id: str
    last_name: str
    parents: list[Parent] = field(default_factory=list)
    children: list[Child] = field(default_factory=list)
    address: Address | None = None
    is_registered: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored document shape."""
        return _compact({
            "id": self.id,
            "LastName": self.last_name,
            "Parents": [parent.to_dict() for parent in self.parents],
            "Children": [child.to_dict() for child in self.children],
            "Address": self.address.to_dict() if self.address is not None else None,
            "IsRegistered": self.is_registered,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Family":
        """Build a Family from a stored document, ignoring unknown fields."""
        address = data.get("Address")
        return cls(
            id=data["id"],
            last_name=data["LastName"],
            parents=[Parent.from_dict(parent) for parent in data.get("Parents") or []],
            children=[Child.from_dict(child) for child in data.get("Children") or []],
            address=Address.from_dict(address) if address is not None else None,
            is_registered=data.get("IsRegistered", False),
        )

    def __str__(self) -> str:
        return json.dumps(self.to_dict())
