#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Enumeration with numeric tag, label and description per member.

Used for the recognized serial baud rates and for the transport session
states, where both a machine value and a printable name are needed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from typing_extensions import Self

from fernvale_spi.exceptions import FernvaleValueError


@dataclass(frozen=True)
class FernvaleEnumMember:
    """Single enumeration member: numeric tag, label and optional description."""

    tag: int
    label: str
    description: Optional[str] = None


class FernvaleEnum(FernvaleEnumMember, Enum):
    """Enumeration comparable by both tag and label.

    Members are declared as ``NAME = (tag, "label", "description")``.
    """

    def __eq__(self, __value: object) -> bool:
        """Check equality of enum value with another object.

        :param __value: Object to compare with this enum value.
        :return: True if the object equals tag or label, False otherwise.
        """
        return self.tag == __value or self.label == __value

    def __hash__(self) -> int:
        """Calculate hash value for the enum instance.

        :return: Hash value as integer.
        """
        return hash((self.tag, self.label, self.description))

    @classmethod
    def labels(cls) -> list[str]:
        """Get list of labels of all enum members.

        :return: List of all labels.
        """
        return [value.label for value in cls.__members__.values()]

    @classmethod
    def tags(cls) -> list[int]:
        """Get list of tags of all enum members.

        :return: List of all tags.
        """
        return [value.tag for value in cls.__members__.values()]

    @classmethod
    def from_tag(cls, tag: int) -> Self:
        """Get enum member with given tag.

        :param tag: Tag to be used for searching
        :raises FernvaleValueError: If enum with given tag is not found
        :return: Found enum member
        """
        for item in cls.__members__.values():
            if item.tag == tag:
                return item
        raise FernvaleValueError(f"There is no {cls.__name__} item with tag {tag} defined")

    @classmethod
    def from_label(cls, label: str) -> Self:
        """Get enum member with given label, case-insensitive.

        :param label: Label to be used for searching
        :raises FernvaleValueError: If enum with given label is not found
        :return: Found enum member
        """
        for item in cls.__members__.values():
            if item.label.upper() == str(label).upper():
                return item
        raise FernvaleValueError(f"There is no {cls.__name__} item with label {label} defined")
