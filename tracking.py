import random

PREFIX = "CARGO"


class TrackingIdGenerator:
    """Produces human-readable tracking codes such as CARGO482913.

    Codes are not guaranteed unique; the unique index on trackingId is the
    source of truth and the service retries on collision.
    """

    def __init__(self, prefix: str = PREFIX, digits: int = 6, rng=None):
        self.prefix = prefix
        self.digits = digits
        self._rng = rng or random.SystemRandom()

    def __call__(self) -> str:
        low = 10 ** (self.digits - 1)
        return f"{self.prefix}{self._rng.randint(low, 10 * low - 1)}"
