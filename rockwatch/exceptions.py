# rockwatch/exceptions.py
"""Domain errors surfaced to the HTTP layer."""


class MineNotFoundError(LookupError):
    def __init__(self, mine_id: str):
        super().__init__(f"Mine '{mine_id}' not found")
        self.mine_id = mine_id


class WeatherServiceError(RuntimeError):
    def __init__(self, message: str, status_code: int = 502, details: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
