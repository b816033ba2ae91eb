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

"""
Contact events reported by the physics layer once per physics step.

Example:
    ContactEvent("FingerEnd", ContactKind.STAY)
    ContactEvent("Palm", "end", other="Cylinder", env_id=3)
"""

import enum
from typing import NamedTuple, Optional, Union


class ContactKind(str, enum.Enum):
    BEGIN = "begin"
    STAY = "stay"
    END = "end"

    @property
    def touching(self) -> bool:
        return self is not ContactKind.END


class ContactEvent(NamedTuple):
    collider: str
    kind: Union[ContactKind, str]
    # tag of the touched object, None means the grasp target
    other: Optional[str] = None
    env_id: int = 0

    @classmethod
    def coerce(cls, event) -> "ContactEvent":
        """
        Accept a ContactEvent or a plain `(collider, kind, ...)` tuple and
        return a ContactEvent with a ContactKind.
        """
        if not isinstance(event, ContactEvent):
            event = cls(*event)
        if not isinstance(event.kind, ContactKind):
            event = event._replace(kind=ContactKind(event.kind))
        return event
