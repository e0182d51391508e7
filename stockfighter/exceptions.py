__all__ = (
    "ContractViolation",
    "NoResponse",
    "OperatorError",
    "PayloadError",
    "SettingsError",
    "StockFighterError",
    "TransportError",
    "UnexpectedStatus",
    "UnobservedError",
)


class StockFighterError(Exception): ...


class TransportError(StockFighterError):
    __slots__ = ("__cause",)

    __cause: BaseException | None

    def __init__(self, cause: BaseException | None = None, /) -> None:
        if cause is None:
            super().__init__("Transport failure.")
        else:
            super().__init__(f"Transport failure: {cause!r}.")

        self.__cause = cause
        self.__cause__ = cause

    @property
    def cause(self) -> BaseException | None:
        return self.__cause


class UnexpectedStatus(StockFighterError):
    __slots__ = ("__status_code",)

    __status_code: int

    def __init__(self, status_code: int, /) -> None:
        super().__init__(f"Unexpected HTTP status code `{status_code}`.")
        self.__status_code = status_code

    @property
    def status_code(self) -> int:
        return self.__status_code


class NoResponse(StockFighterError): ...


class PayloadError(ValueError, StockFighterError): ...


class OperatorError(StockFighterError): ...


class UnobservedError(StockFighterError): ...


class ContractViolation(StockFighterError): ...


class SettingsError(StockFighterError): ...
