"""Base generator class for sample-data generators."""

from __future__ import annotations

import random
from abc import ABC

from faker import Faker


class BaseGenerator(ABC):
    """Base class for generators that produce sample property data.

    Provides common initialization: an injectable ``random.Random`` and a
    Faker instance seeded from it, so the same seed or RNG state always
    produces the same output.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility. Ignored when ``rng`` is given.
    locale : str
        Faker locale (default ``en_US``).
    rng : random.Random | None
        Random source. Tests inject one for deterministic output.
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "en_US",
        rng: random.Random | None = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random(seed)
        self.fake = Faker(locale)
        self.fake.seed_instance(self.rng.getrandbits(32))
