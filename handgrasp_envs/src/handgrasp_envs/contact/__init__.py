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

from .events import ContactEvent, ContactKind
from .reward_policy import RewardPolicy, RewardTerms
from .segment import HAND_SEGMENTS, Segment, SegmentClass
from .state import ContactStateStore
from .tracker import SegmentContactTracker

__all__ = [
    "ContactEvent",
    "ContactKind",
    "ContactStateStore",
    "HAND_SEGMENTS",
    "RewardPolicy",
    "RewardTerms",
    "Segment",
    "SegmentClass",
    "SegmentContactTracker",
]
