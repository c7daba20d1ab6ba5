from __future__ import annotations


class ScheduleError(ValueError):
    def __init__(self, prayer: str, message: str) -> None:
        super().__init__(message)
        self.prayer = prayer


class MissingScheduleData(ScheduleError):
    def __init__(self, prayer: str) -> None:
        super().__init__(prayer, f"No time of day for {prayer}")


class MalformedTimeOfDay(ScheduleError):
    def __init__(self, prayer: str, value: object) -> None:
        super().__init__(prayer, f"Malformed time of day for {prayer}: {value!r}")
        self.value = value


class UnknownPrayer(KeyError):
    pass


class TimingsUnavailable(RuntimeError):
    pass
