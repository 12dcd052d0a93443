"""
Circuit Breaker Registry

Authoritative per-provider circuit breaker state for the fallback engine.

State Machine:
    CLOSED: Normal operation, the provider may be called
    OPEN: Circuit tripped, the provider is skipped until the cooldown elapses
    HALF_OPEN: Cooldown elapsed, exactly one trial call is allowed

Transitions:
    CLOSED    --failure_count reaches threshold-->  OPEN
    OPEN      --eligibility check after cooldown--> HALF_OPEN (trial claimed)
    HALF_OPEN --trial fails-->                       OPEN (immediately)
    any       --success-->                           CLOSED (count reset to 0)

The registry is shared by every concurrent request. Each provider record is
guarded by its own threading.Lock; no transition awaits or performs I/O while
holding it, so publishing, metrics and logging stay with the caller.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional


DEFAULT_FAILURE_THRESHOLD = 3
DEFAULT_COOLDOWN_SECONDS = 30.0


# =============================================================================
# State Enum
# =============================================================================


class CircuitState(Enum):
    """
    State of a provider circuit.

    States:
        CLOSED: Normal operation, calls pass through
        OPEN: Circuit is tripped, calls are skipped
        HALF_OPEN: Recovery testing, one trial call passes through
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class CircuitSnapshot:
    """
    Immutable view of one provider circuit.

    Attributes:
        provider: Provider name the circuit belongs to
        state: Current circuit state
        failure_count: Consecutive failures since the last success
        last_failure_time: Monotonic timestamp of the last failure, if any
        failure_threshold: Failures required to open the circuit
        cooldown_seconds: Seconds the circuit stays open before a trial
    """

    provider: str
    state: CircuitState
    failure_count: int
    last_failure_time: Optional[float]
    failure_threshold: int
    cooldown_seconds: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "provider": self.provider,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "failure_threshold": self.failure_threshold,
            "cooldown_seconds": self.cooldown_seconds,
        }


@dataclass(frozen=True)
class FailureOutcome:
    """
    Result of recording a failure.

    Attributes:
        snapshot: Circuit state after the failure was recorded
        previous_state: State before the failure was recorded
        opened: True only for the failure that moved the circuit into OPEN
    """

    snapshot: CircuitSnapshot
    previous_state: CircuitState
    opened: bool


@dataclass(frozen=True)
class Admission:
    """
    Result of an eligibility check.

    Attributes:
        allowed: True if the caller may attempt the provider
        trial: True if this call claimed the half-open trial
        previous_state: State observed before the check, under the same lock
    """

    allowed: bool
    trial: bool
    previous_state: CircuitState


class _ProviderCircuit:
    """Mutable per-provider record. Only touched while holding ``lock``."""

    __slots__ = (
        "provider",
        "state",
        "failure_count",
        "last_failure_time",
        "trial_started_at",
        "failure_threshold",
        "cooldown_seconds",
        "lock",
    )

    def __init__(self, provider: str, failure_threshold: int, cooldown_seconds: float) -> None:
        self.provider = provider
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self.trial_started_at: Optional[float] = None
        self.failure_threshold = failure_threshold
        self.cooldown_seconds = cooldown_seconds
        self.lock = threading.Lock()

    def snapshot(self) -> CircuitSnapshot:
        return CircuitSnapshot(
            provider=self.provider,
            state=self.state,
            failure_count=self.failure_count,
            last_failure_time=self.last_failure_time,
            failure_threshold=self.failure_threshold,
            cooldown_seconds=self.cooldown_seconds,
        )


# =============================================================================
# Registry
# =============================================================================


class CircuitBreakerRegistry:
    """
    Registry of circuit breakers keyed by provider name.

    Thresholds and cooldowns are per provider. The defaults apply only when a
    provider is registered without explicit values, and ``configure`` can
    change either at runtime.

    Example:
        >>> registry = CircuitBreakerRegistry()
        >>> registry.register("wttr", failure_threshold=3, cooldown_seconds=30.0)
        >>> if registry.is_eligible("wttr"):
        ...     registry.record_failure("wttr")
    """

    def __init__(
        self,
        default_failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        default_cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
    ) -> None:
        self._default_failure_threshold = default_failure_threshold
        self._default_cooldown_seconds = default_cooldown_seconds
        self._circuits: Dict[str, _ProviderCircuit] = {}
        # Guards the dict itself; per-provider state uses the record's lock.
        self._registry_lock = threading.Lock()

    # =========================================================================
    # Registration / Configuration
    # =========================================================================

    def register(
        self,
        provider: str,
        failure_threshold: Optional[int] = None,
        cooldown_seconds: Optional[float] = None,
    ) -> CircuitSnapshot:
        """
        Create a CLOSED circuit for a provider.

        Registering an existing provider is a no-op that returns its snapshot.

        Raises:
            ValueError: If the threshold or cooldown is not positive
        """
        threshold = failure_threshold if failure_threshold is not None else self._default_failure_threshold
        cooldown = cooldown_seconds if cooldown_seconds is not None else self._default_cooldown_seconds
        _validate(threshold, cooldown)

        with self._registry_lock:
            circuit = self._circuits.get(provider)
            if circuit is None:
                circuit = _ProviderCircuit(provider, threshold, cooldown)
                self._circuits[provider] = circuit
        with circuit.lock:
            return circuit.snapshot()

    def configure(
        self,
        provider: str,
        failure_threshold: Optional[int] = None,
        cooldown_seconds: Optional[float] = None,
    ) -> CircuitSnapshot:
        """
        Change a provider's threshold and/or cooldown without resetting its state.

        A lowered threshold takes effect on the next recorded failure.
        """
        circuit = self._get(provider)
        with circuit.lock:
            threshold = failure_threshold if failure_threshold is not None else circuit.failure_threshold
            cooldown = cooldown_seconds if cooldown_seconds is not None else circuit.cooldown_seconds
            _validate(threshold, cooldown)
            circuit.failure_threshold = threshold
            circuit.cooldown_seconds = cooldown
            return circuit.snapshot()

    @property
    def names(self) -> List[str]:
        """Registered provider names in registration order."""
        with self._registry_lock:
            return list(self._circuits)

    def __contains__(self, provider: object) -> bool:
        with self._registry_lock:
            return provider in self._circuits

    def __iter__(self) -> Iterator[CircuitSnapshot]:
        return iter(self.snapshots())

    # =========================================================================
    # State Queries / Transitions
    # =========================================================================

    def snapshot(self, provider: str) -> CircuitSnapshot:
        circuit = self._get(provider)
        with circuit.lock:
            return circuit.snapshot()

    def snapshots(self) -> List[CircuitSnapshot]:
        with self._registry_lock:
            circuits = list(self._circuits.values())
        result = []
        for circuit in circuits:
            with circuit.lock:
                result.append(circuit.snapshot())
        return result

    def is_eligible(self, provider: str, now: Optional[float] = None) -> bool:
        """
        Decide whether the provider may be attempted right now.

        CLOSED is always eligible. OPEN within the cooldown is not, and is left
        untouched. OPEN at or past the cooldown is promoted to HALF_OPEN and the
        caller holds the single trial. HALF_OPEN with the trial already claimed
        is not eligible until the outcome is recorded, or until a full cooldown
        has passed since the claim (the trial call was abandoned).

        Args:
            provider: Provider name
            now: Monotonic timestamp (default: time.monotonic())

        Returns:
            True if the caller should attempt the provider
        """
        return self.admit(provider, now).allowed

    def admit(self, provider: str, now: Optional[float] = None) -> Admission:
        """
        Eligibility check that also reports whether this call claimed the trial.

        Same transitions as ``is_eligible``. ``previous_state`` is read under
        the record's lock, so a claimed trial reports OPEN for a fresh
        promotion and HALF_OPEN for a re-granted abandoned trial.
        """
        now = time.monotonic() if now is None else now
        circuit = self._get(provider)

        with circuit.lock:
            previous = circuit.state

            if previous == CircuitState.CLOSED:
                return Admission(allowed=True, trial=False, previous_state=previous)

            if previous == CircuitState.OPEN:
                last_failure = circuit.last_failure_time
                if last_failure is not None and now - last_failure < circuit.cooldown_seconds:
                    return Admission(allowed=False, trial=False, previous_state=previous)
                circuit.state = CircuitState.HALF_OPEN
                circuit.trial_started_at = now
                return Admission(allowed=True, trial=True, previous_state=previous)

            # HALF_OPEN
            trial_started = circuit.trial_started_at
            if trial_started is None or now - trial_started >= circuit.cooldown_seconds:
                circuit.trial_started_at = now
                return Admission(allowed=True, trial=True, previous_state=previous)
            return Admission(allowed=False, trial=False, previous_state=previous)

    def record_success(self, provider: str) -> CircuitSnapshot:
        """
        Close the circuit and reset the failure count, regardless of prior state.

        Returns:
            Snapshot after the transition
        """
        circuit = self._get(provider)
        with circuit.lock:
            circuit.state = CircuitState.CLOSED
            circuit.failure_count = 0
            circuit.trial_started_at = None
            return circuit.snapshot()

    def record_failure(self, provider: str, now: Optional[float] = None) -> FailureOutcome:
        """
        Count a failure and open the circuit when required.

        The circuit opens when the consecutive failure count reaches the
        threshold, or immediately when the failure belongs to a half-open trial.

        Args:
            provider: Provider name
            now: Monotonic timestamp (default: time.monotonic())

        Returns:
            FailureOutcome with the new snapshot and whether this call opened it
        """
        now = time.monotonic() if now is None else now
        circuit = self._get(provider)

        with circuit.lock:
            previous = circuit.state
            circuit.failure_count += 1
            circuit.last_failure_time = now

            if previous == CircuitState.HALF_OPEN or (
                previous == CircuitState.CLOSED
                and circuit.failure_count >= circuit.failure_threshold
            ):
                circuit.state = CircuitState.OPEN
                circuit.trial_started_at = None

            return FailureOutcome(
                snapshot=circuit.snapshot(),
                previous_state=previous,
                opened=previous != CircuitState.OPEN and circuit.state == CircuitState.OPEN,
            )

    # =========================================================================
    # Internals
    # =========================================================================

    def _get(self, provider: str) -> _ProviderCircuit:
        with self._registry_lock:
            try:
                return self._circuits[provider]
            except KeyError:
                raise KeyError(f"No circuit registered for provider '{provider}'") from None


def _validate(failure_threshold: int, cooldown_seconds: float) -> None:
    if failure_threshold < 1:
        raise ValueError(f"failure_threshold must be >= 1, got {failure_threshold}")
    if cooldown_seconds <= 0:
        raise ValueError(f"cooldown_seconds must be > 0, got {cooldown_seconds}")
