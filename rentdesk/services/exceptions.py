"""
Service-level errors. Routes translate these into HTTP responses.
"""


class RentDeskError(Exception):
    """Base class for business-rule failures"""


class NotFound(RentDeskError):
    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found" + (f": {entity_id}" if entity_id else ""))


class PaymentSumMismatch(RentDeskError):
    """Edited amounts no longer add up to the contract total."""

    def __init__(self, expected: float, actual: float):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Payments would total {actual:.2f} but the contract total is {expected:.2f}"
        )


class InvalidContractDates(RentDeskError):
    pass


class ReservationRejected(RentDeskError):
    """The reservation guard refused the unit; ``result`` carries the reason."""

    def __init__(self, result):
        self.result = result
        super().__init__(f"Unit reservation rejected: {result.reason}")
