"""Kinds and decisions used across subsystem boundaries."""

from enum import StrEnum


class ArtifactKind(StrEnum):
    """Kind of module cache artifact, decoded from its filename tag."""

    OUTPUT = "output"
    STATE = "state"
    INDEX = "index"


class Decision(StrEnum):
    """Answer returned by a confirmation prompt.

    YES_TO_ALL proceeds with the current item and suppresses every
    later prompt for the remainder of the run.
    """

    YES = "yes"
    NO = "no"
    YES_TO_ALL = "all"
