"""Particle records: the full tracking state and its compact, serialisable base."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from fcctransport.direction_cosine import DirectionCosine, Vector3
from fcctransport.location import Location

_UINT64_MAX = 0xFFFF_FFFF_FFFF_FFFF


class TallyEvent(IntEnum):
    """The last event a particle took part in."""

    COLLISION = 0
    FACET_CROSSING_TRANSIT_EXIT = 1
    CENSUS = 2
    FACET_CROSSING_TRACKING_ERROR = 3
    FACET_CROSSING_ESCAPE = 4
    FACET_CROSSING_REFLECTION = 5
    FACET_CROSSING_COMMUNICATION = 6


def long_to_char8(value: int) -> bytes:
    """Encode an unsigned 64-bit integer as 8 big-endian bytes."""
    if not 0 <= value <= _UINT64_MAX:
        raise ValueError(f"value {value} does not fit in an unsigned 64-bit integer")
    return value.to_bytes(8, "big")


def char8_to_long(data: bytes) -> int:
    """Decode 8 big-endian bytes into an unsigned 64-bit integer."""
    if len(data) != 8:
        raise ValueError(f"expected 8 bytes, got {len(data)}")
    return int.from_bytes(data, "big")


def _copy_vector(v: Vector3) -> Vector3:
    return Vector3(v.x, v.y, v.z)


@dataclass
class Particle:
    """The complete state of a particle while it is being tracked."""

    coordinate: Vector3 = field(default_factory=Vector3)
    velocity: Vector3 = field(default_factory=Vector3)
    direction_cosine: DirectionCosine = field(default_factory=DirectionCosine)
    kinetic_energy: float = 0.0
    weight: float = 0.0
    time_to_census: float = 0.0
    total_cross_section: float = 0.0
    age: float = 0.0
    num_mean_free_paths: float = 0.0
    mean_free_path: float = 0.0
    segment_path_length: float = 0.0
    random_number_seed: int = 0
    identifier: int = 0
    last_event: TallyEvent = TallyEvent.CENSUS
    num_collisions: int = 0
    num_segments: float = 0.0
    task: int = 0
    species: int = 0
    breed: int = 0
    energy_group: int = 0
    domain: int = 0
    cell: int = 0
    facet: int = 0
    normal_dot: float = 0.0

    def copy_from_base(self, base: BaseParticle) -> None:
        """Overwrite the fields this particle shares with a base particle.

        Direction, task, energy group, facet and the per-segment quantities
        are left as they are.
        """
        self.coordinate = _copy_vector(base.coordinate)
        self.velocity = _copy_vector(base.velocity)
        self.kinetic_energy = base.kinetic_energy
        self.weight = base.weight
        self.time_to_census = base.time_to_census
        self.age = base.age
        self.num_mean_free_paths = base.num_mean_free_paths
        self.random_number_seed = base.random_number_seed
        self.identifier = base.identifier
        self.last_event = base.last_event
        self.num_collisions = base.num_collisions
        self.num_segments = base.num_segments
        self.species = base.species
        self.breed = base.breed
        self.domain = base.domain
        self.cell = base.cell


_FLOAT_FIELDS = (
    "kinetic_energy",
    "weight",
    "time_to_census",
    "age",
    "num_mean_free_paths",
    "num_segments",
)
_INT_FIELDS = ("num_collisions", "breed", "species", "domain", "cell")
_NUM_INTS = 1 + len(_INT_FIELDS)
_NUM_FLOATS = 6 + len(_FLOAT_FIELDS)
_NUM_CHARS = 16


@dataclass
class BaseParticle:
    """The part of a particle that is stored in vaults and sent between ranks.

    A species of -1 marks an invalidated particle.
    """

    coordinate: Vector3 = field(default_factory=Vector3)
    velocity: Vector3 = field(default_factory=Vector3)
    kinetic_energy: float = 0.0
    weight: float = 0.0
    time_to_census: float = 0.0
    age: float = 0.0
    num_mean_free_paths: float = 0.0
    num_segments: float = 0.0
    random_number_seed: int = 0
    identifier: int = 0
    last_event: TallyEvent = TallyEvent.CENSUS
    num_collisions: int = 0
    breed: int = 0
    species: int = -1
    domain: int = 0
    cell: int = 0

    @classmethod
    def from_particle(cls, particle: Particle) -> BaseParticle:
        """The base part of a tracked particle."""
        return cls(
            coordinate=_copy_vector(particle.coordinate),
            velocity=_copy_vector(particle.velocity),
            kinetic_energy=particle.kinetic_energy,
            weight=particle.weight,
            time_to_census=particle.time_to_census,
            age=particle.age,
            num_mean_free_paths=particle.num_mean_free_paths,
            num_segments=particle.num_segments,
            random_number_seed=particle.random_number_seed,
            identifier=particle.identifier,
            last_event=particle.last_event,
            num_collisions=particle.num_collisions,
            breed=particle.breed,
            species=particle.species,
            domain=particle.domain,
            cell=particle.cell,
        )

    def to_particle(self) -> Particle:
        """A tracked particle whose direction is taken from this velocity.

        Raises ValueError if the velocity is zero.
        """
        speed = self.velocity.length()
        if speed <= 0.0:
            raise ValueError("cannot derive a direction from a zero velocity")
        factor = 1.0 / speed
        return Particle(
            coordinate=_copy_vector(self.coordinate),
            velocity=_copy_vector(self.velocity),
            direction_cosine=DirectionCosine(
                factor * self.velocity.x,
                factor * self.velocity.y,
                factor * self.velocity.z,
            ),
            kinetic_energy=self.kinetic_energy,
            weight=self.weight,
            time_to_census=self.time_to_census,
            age=self.age,
            num_mean_free_paths=self.num_mean_free_paths,
            random_number_seed=self.random_number_seed,
            identifier=self.identifier,
            last_event=self.last_event,
            num_collisions=self.num_collisions,
            num_segments=self.num_segments,
            species=self.species,
            breed=self.breed,
            domain=self.domain,
            cell=self.cell,
        )

    def is_valid(self) -> bool:
        """Whether the particle has not been invalidated."""
        return self.species >= 0

    def invalidate(self) -> bool:
        """Mark the particle invalid; False if it already was."""
        if not self.is_valid():
            return False
        self.species = -1
        return True

    def location(self) -> Location:
        """The particle's domain and cell, with facet 0."""
        return Location(self.domain, self.cell, 0)

    def pack(self) -> tuple[list[int], list[float], bytes]:
        """Split the particle into integer, float and byte payloads."""
        floats = [
            self.coordinate.x,
            self.coordinate.y,
            self.coordinate.z,
            self.velocity.x,
            self.velocity.y,
            self.velocity.z,
        ]
        floats.extend(getattr(self, name) for name in _FLOAT_FIELDS)
        chars = long_to_char8(self.random_number_seed) + long_to_char8(self.identifier)
        ints = [int(self.last_event)]
        ints.extend(getattr(self, name) for name in _INT_FIELDS)
        return ints, floats, chars

    @classmethod
    def unpack(cls, ints, floats, chars) -> BaseParticle:
        """Rebuild a particle from the payloads made by ``pack``."""
        ints, floats, chars = list(ints), list(floats), bytes(chars)
        if (len(ints), len(floats), len(chars)) != cls.counts():
            raise ValueError(
                f"expected {cls.counts()} values, got "
                f"{(len(ints), len(floats), len(chars))}"
            )
        particle = cls(
            coordinate=Vector3(*floats[0:3]),
            velocity=Vector3(*floats[3:6]),
            random_number_seed=char8_to_long(chars[:8]),
            identifier=char8_to_long(chars[8:]),
            last_event=TallyEvent(ints[0]),
        )
        for name, value in zip(_FLOAT_FIELDS, floats[6:]):
            setattr(particle, name, value)
        for name, value in zip(_INT_FIELDS, ints[1:]):
            setattr(particle, name, value)
        return particle

    @staticmethod
    def counts() -> tuple[int, int, int]:
        """Number of ints, floats and bytes in a packed particle."""
        return _NUM_INTS, _NUM_FLOATS, _NUM_CHARS