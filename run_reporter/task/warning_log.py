"""Warning log collected over a run and reported when the task is done."""


class WarningLog:
    """Collects warning messages, dropping exact duplicates."""

    def __init__(self) -> None:
        self._messages: list[str] = []

    def add_warning(self, message: str) -> None:
        if message not in self._messages:
            self._messages.append(message)

    @property
    def messages(self) -> list[str]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
