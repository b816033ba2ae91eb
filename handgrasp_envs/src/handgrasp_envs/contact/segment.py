# Copyright (C) 2020-2025 Motphys Technology Co., Ltd. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import enum
from dataclasses import dataclass


class SegmentClass(str, enum.Enum):
    """
    The kind of hand part a segment is. Reward terms are looked up by class,
    so e.g. the thumb base and the thumb tip share one set of constants.
    """

    BASE_JOINT = "base-joint"
    MID_JOINT = "mid-joint"
    END_JOINT = "end-joint"
    THUMB_JOINT = "thumb-joint"
    PALM = "palm"


@dataclass(frozen=True)
class Segment:
    """One rigid, independently contactable part of the hand."""

    name: str
    segment_class: SegmentClass

    def __post_init__(self):
        object.__setattr__(self, "segment_class", SegmentClass(self.segment_class))


# Six-segment hand used by the cylinder grasp task; order is observation order.
HAND_SEGMENTS: tuple[Segment, ...] = (
    Segment("FingerBase", SegmentClass.BASE_JOINT),
    Segment("FingerMiddle", SegmentClass.MID_JOINT),
    Segment("FingerEnd", SegmentClass.END_JOINT),
    Segment("ThumbBase", SegmentClass.THUMB_JOINT),
    Segment("ThumbEnd", SegmentClass.THUMB_JOINT),
    Segment("Palm", SegmentClass.PALM),
)


def validate_segments(segments) -> None:
    names = [segment.name for segment in segments]
    if not names:
        raise ValueError("At least one segment must be configured")
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate segment names: {duplicates}")
