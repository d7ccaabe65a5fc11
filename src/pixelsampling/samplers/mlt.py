"""Primary sample space Markov chain sampler for Metropolis light transport.

An MLTSampler hands out the coordinates of a point in the unit hypercube
(the "primary sample space") and mutates that point between iterations of
a Markov chain:

- start_iteration() begins a proposal, choosing a large step (every
  coordinate resampled uniformly) with probability large_step_probability
  and a small step (a Gaussian perturbation of width sigma) otherwise.
- Coordinates are mutated lazily, when they are read during the iteration.
- accept() keeps the proposal; reject() restores every coordinate touched
  by the proposal and rewinds the iteration counter.

Coordinates are interleaved over `stream_count` logical streams (for
example camera and light subpaths): start_stream(i) selects a stream and
its j-th read uses coordinate `i + stream_count * j`.

Where the coordinate values come from is pluggable. MutatedCoordinates
holds live PrimarySample records; RecordedCoordinates plays back values
captured with MLTSampler.dump_state(), which is how a replay-only debug
sampler is built (create_debug_mlt_sampler).

Example:
    >>> from src.pixelsampling.samplers.mlt import MLTSampler
    >>> sampler = MLTSampler(100, 0, sigma=0.01, large_step_probability=0.3, stream_count=3)
    >>> sampler.start_iteration()
    >>> sampler.start_stream(0)
    >>> u = sampler.get_1d()
    >>> sampler.reject()  # u is forgotten
"""

import json
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from src.pixelsampling.core.lowdiscrepancy import ONE_MINUS_EPSILON
from src.pixelsampling.core.rng import pixel_stream
from src.pixelsampling.samplers.base import Sampler, SamplerType

# Parameters of the replay sampler; only the stream layout matters for playback
DEBUG_MLT_SIGMA = 0.5
DEBUG_MLT_LARGE_STEP_PROBABILITY = 0.5


@dataclass
class PrimarySample:
    """One coordinate of the primary sample space point.

    Attributes:
        value: The current coordinate value in [0, 1).
        last_modification_iteration: Iteration that last set the value.
        value_backup: Value before the current proposal.
        modify_backup: last_modification_iteration before the proposal.
    """

    value: float = 0.0
    last_modification_iteration: int = 0
    value_backup: float = 0.0
    modify_backup: int = 0

    def backup(self) -> None:
        """Save the value before mutating it."""
        self.value_backup = self.value
        self.modify_backup = self.last_modification_iteration

    def restore(self) -> None:
        """Undo the mutation since the last backup."""
        self.value = self.value_backup
        self.last_modification_iteration = self.modify_backup


class MutatedCoordinates:
    """Live coordinates that are created and mutated on demand."""

    def __init__(self) -> None:
        self._samples: list[PrimarySample | None] = []

    def __len__(self) -> int:
        return len(self._samples)

    def __getitem__(self, index: int) -> PrimarySample | None:
        return self._samples[index]

    def read(self, index: int, chain: "MLTSampler") -> float:
        self.ensure_ready(index, chain)
        return self._samples[index].value

    def ensure_ready(self, index: int, chain: "MLTSampler") -> None:
        """Bring coordinate `index` up to date with the chain's current iteration.

        A coordinate not read since an earlier iteration receives a single
        mutation, however many iterations have passed: it is resampled if
        the current or any accepted iteration since its last update was a
        large step, and perturbed once otherwise.
        """
        if index >= len(self._samples):
            self._samples.extend([None] * (index + 1 - len(self._samples)))
        sample = self._samples[index]
        if sample is None:
            sample = PrimarySample(
                value=chain.uniform(),
                last_modification_iteration=chain.last_large_step_iteration,
            )
            self._samples[index] = sample

        if sample.last_modification_iteration >= chain.current_iteration:
            return

        sample.backup()
        if chain.large_step or sample.last_modification_iteration < chain.last_large_step_iteration:
            sample.value = chain.uniform()
        else:
            value = sample.value + chain.sigma * chain.normal()
            sample.value = min(value - math.floor(value), ONE_MINUS_EPSILON)
        sample.last_modification_iteration = chain.current_iteration

    def restore(self, iteration: int) -> None:
        """Restore every coordinate modified during `iteration`."""
        for sample in self._samples:
            if sample is not None and sample.last_modification_iteration == iteration:
                sample.restore()

    def values(self) -> list[float | None]:
        return [None if sample is None else sample.value for sample in self._samples]


class RecordedCoordinates:
    """Coordinates played back from a recorded dump."""

    def __init__(self, values: Sequence[float | None]) -> None:
        self._values = list(values)

    def __len__(self) -> int:
        return len(self._values)

    def read(self, index: int, chain: "MLTSampler") -> float:
        """Return the recorded coordinate.

        Raises:
            RuntimeError: If the coordinate was not recorded, which means the
                replayed call sequence differs from the recorded one.
        """
        if index >= len(self._values) or self._values[index] is None:
            raise RuntimeError(
                f"Replay read coordinate {index} but only {len(self._values)} were recorded"
            )
        return self._values[index]

    def restore(self, iteration: int) -> None:
        pass

    def values(self) -> list[float | None]:
        return list(self._values)


class MLTSampler(Sampler):
    """Markov chain sampler over the primary sample space.

    Attributes:
        sigma: Standard deviation of small-step perturbations.
        large_step_probability: Probability that an iteration is a large step.
        stream_count: Number of interleaved coordinate streams.
        current_iteration: Number of the current (uncommitted) iteration.
        large_step: Whether the current iteration is a large step.
        last_large_step_iteration: Last accepted large-step iteration.
    """

    sampler_type = SamplerType.MLT

    def __init__(
        self,
        mutations_per_pixel: int,
        rng_sequence_index: int,
        sigma: float,
        large_step_probability: float,
        stream_count: int,
        coordinates: MutatedCoordinates | RecordedCoordinates | None = None,
    ) -> None:
        """Initialize the chain.

        Args:
            mutations_per_pixel: Average number of mutations per pixel.
            rng_sequence_index: Selects the chain's random stream.
            sigma: Standard deviation of small-step perturbations.
            large_step_probability: Probability of a large step, in [0, 1].
            stream_count: Number of interleaved coordinate streams.
            coordinates: Coordinate source. Defaults to fresh live
                coordinates.

        Raises:
            ValueError: If a parameter is out of range.
        """
        super().__init__(mutations_per_pixel)
        if stream_count <= 0:
            raise ValueError(f"stream_count must be positive, got {stream_count}")
        if not 0.0 <= large_step_probability <= 1.0:
            raise ValueError(f"large_step_probability must be in [0, 1], got {large_step_probability}")
        if sigma < 0.0:
            raise ValueError(f"sigma must be non-negative, got {sigma}")

        self.sigma = sigma
        self.large_step_probability = large_step_probability
        self.stream_count = stream_count
        self.coordinates = coordinates if coordinates is not None else MutatedCoordinates()
        if isinstance(self.coordinates, RecordedCoordinates):
            self.sampler_type = SamplerType.DEBUG_MLT

        self._rng: np.random.Generator = pixel_stream(rng_sequence_index)
        self.current_iteration = 0
        self.large_step = True
        self.last_large_step_iteration = 0
        self._stream_index = 0
        self._stream_sample_index = 0

    # =========================================================================
    # Random Draws
    # =========================================================================

    def uniform(self) -> float:
        """Draw a uniform value in [0, 1) from the chain's stream."""
        return float(self._rng.random())

    def normal(self) -> float:
        """Draw a standard normal value from the chain's stream."""
        return float(self._rng.standard_normal())

    # =========================================================================
    # Chain Control
    # =========================================================================

    def start_iteration(self) -> None:
        """Begin a new proposal and decide whether it is a large step.

        The stream cursor is rewound so the next read starts at the first
        coordinate of the selected stream.
        """
        self.current_iteration += 1
        self.large_step = self.uniform() < self.large_step_probability
        self._stream_sample_index = 0

    def accept(self) -> None:
        """Commit the current proposal."""
        if self.large_step:
            self.last_large_step_iteration = self.current_iteration

    def reject(self) -> None:
        """Discard the current proposal, restoring every coordinate it changed."""
        self.coordinates.restore(self.current_iteration)
        self.current_iteration -= 1

    def start_stream(self, index: int) -> None:
        """Select the coordinate stream for the following reads.

        Raises:
            ValueError: If index is not below stream_count.
        """
        if not 0 <= index < self.stream_count:
            raise ValueError(f"Stream {index} out of range for {self.stream_count} streams")
        self._stream_index = index
        self._stream_sample_index = 0

    def get_next_index(self) -> int:
        """Return the coordinate index of the next read in the current stream."""
        index = self._stream_index + self.stream_count * self._stream_sample_index
        self._stream_sample_index += 1
        return index

    # =========================================================================
    # Sampler Interface
    # =========================================================================

    def start_pixel_sample(self, pixel: tuple[int, int], sample_index: int, dimension: int = 0) -> None:
        """Reseed the chain's random stream from a pixel sample."""
        super().start_pixel_sample(pixel, sample_index, dimension)
        self._rng = pixel_stream(pixel[0] + pixel[1] * 65536, sample_index * 65536 + dimension * 8192)

    def get_1d(self) -> float:
        self._dimension += 1
        return self.coordinates.read(self.get_next_index(), self)

    def get_2d(self) -> tuple[float, float]:
        return self.get_1d(), self.get_1d()

    # =========================================================================
    # Debugging
    # =========================================================================

    def dump_state(self) -> str:
        """Serialize the chain to JSON for offline replay.

        Returns:
            A JSON document holding the random stream state, parameters,
            stream layout, coordinate values, iteration counters and flags.
        """
        state: dict[str, Any] = {
            "rng": self._rng.bit_generator.state,
            "sigma": self.sigma,
            "large_step_probability": self.large_step_probability,
            "mutations_per_pixel": self._samples_per_pixel,
            "stream_count": self.stream_count,
            "stream_index": self._stream_index,
            "stream_sample_index": self._stream_sample_index,
            "values": self.coordinates.values(),
            "current_iteration": self.current_iteration,
            "large_step": self.large_step,
            "last_large_step_iteration": self.last_large_step_iteration,
        }
        return json.dumps(state)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(sigma={self.sigma}, "
            f"large_step_probability={self.large_step_probability}, "
            f"stream_count={self.stream_count}, coordinates={len(self.coordinates)}, "
            f"current_iteration={self.current_iteration}, large_step={self.large_step}, "
            f"last_large_step_iteration={self.last_large_step_iteration}, "
            f"stream_index={self._stream_index}, sample_index={self._stream_sample_index})"
        )


def create_debug_mlt_sampler(state: str | Sequence[str], stream_count: int | None = None) -> MLTSampler:
    """Build a replay-only sampler from recorded coordinates.

    Args:
        state: Either a JSON document produced by MLTSampler.dump_state(),
            or a sequence of strings each holding one coordinate value.
        stream_count: Number of interleaved streams. Defaults to the value
            stored in a JSON dump; required for a plain value sequence.

    Returns:
        An MLTSampler whose reads return the recorded values in order.

    Raises:
        ValueError: If the state cannot be parsed or the stream count is
            unknown.
    """
    if isinstance(state, str):
        try:
            data = json.loads(state)
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed MLT sampler dump: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("values"), list):
            raise ValueError("MLT sampler dump has no 'values' list")
        values = data["values"]
        if stream_count is None:
            stream_count = data.get("stream_count")
    else:
        try:
            values = [float(v) for v in state]
        except ValueError as e:
            raise ValueError(f"Malformed MLT sampler coordinate: {e}") from e

    if not all(v is None or isinstance(v, (int, float)) for v in values):
        raise ValueError("MLT sampler dump values must be numbers or null")
    if not isinstance(stream_count, int):
        raise ValueError("Stream count of the recorded MLT sampler is unknown")

    return MLTSampler(
        1,
        0,
        DEBUG_MLT_SIGMA,
        DEBUG_MLT_LARGE_STEP_PROBABILITY,
        stream_count,
        coordinates=RecordedCoordinates(values),
    )
