"""Error types shared by the lookup, history and persistence layers."""


class CitycastError(Exception):
    pass


class ValidationError(CitycastError, ValueError):
    pass


class ProviderError(CitycastError):
    pass


class LookupFailed(CitycastError):
    def __init__(self, city: str):
        super().__init__("City not found or weather service unavailable.")
        self.city = city


class PersistenceError(CitycastError):
    pass
