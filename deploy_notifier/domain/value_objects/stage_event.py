from enum import Enum


class StageEvent(Enum):
    """
    Kind of inbound event reported by a pipeline step.
    Values match the first path segment of the HTTP route.
    """
    BUILDING = "building"
    DEPLOYING = "deploying"
    FAILED = "failed"
    SUCCEEDED = "succeeded"
    NOOP = "noop"
    DONE = "done"

    @classmethod
    def parse(cls, value: str) -> "StageEvent":
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"Unknown stage event: {value}") from None
