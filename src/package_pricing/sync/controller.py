"""Keeps a quote's price in step with the package it was built from.

One controller per quote-editing session. Every command that can change what
the price should be bumps a sequence number; a calculation result is applied
only while its sequence is still the latest, so a slow lookup can never
overwrite the outcome of a newer edit. In-flight lookups are not cancelled,
their results are dropped.
"""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Coroutine, Deque, List, Optional, Set, Tuple

from package_pricing.packages.models import OnRequest, Package, parse_price
from package_pricing.pricing.calculator import (
    CalculationResult,
    OnRequestResult,
    PriceCalculator,
    calculate_price,
)
from package_pricing.pricing.errors import CatalogUnavailable, PricingError
from package_pricing.pricing.validation import ValidationEngine, ValidationWarning
from package_pricing.sync.state import (
    CustomReason,
    LinkedPackageInfo,
    PriceChangeReason,
    PriceHistoryEntry,
    QuoteParameters,
    SyncError,
    SyncSnapshot,
    SyncState,
    SyncStatus,
)

if TYPE_CHECKING:  # pragma: no cover
    from package_pricing.config.settings import Settings
    from package_pricing.packages.catalog import PackageCatalog

logger = logging.getLogger(__name__)

Observer = Callable[[SyncSnapshot], None]

DEFAULT_DEBOUNCE_S = 0.3
MAX_PRICE_HISTORY = 100


def _parse_events_total(value: Any) -> Decimal:
    amount = parse_price(value)
    if isinstance(amount, OnRequest):
        raise ValueError("The events total must be numeric")
    return amount


class PriceSyncController:
    """State machine behind the price shown on a quote linked to a package."""

    def __init__(
        self,
        calculator: PriceCalculator,
        *,
        validator: Optional[ValidationEngine] = None,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
        parameters: Optional[QuoteParameters] = None,
        price: Optional[Decimal] = None,
        events_total: Decimal = Decimal("0"),
    ) -> None:
        self._calculator = calculator
        self._validator = validator or ValidationEngine()
        self._debounce_s = max(debounce_s, 0.0)
        self._parameters = parameters
        self._price = price
        self._events_total = _parse_events_total(events_total)
        self._linked: Optional[LinkedPackageInfo] = None
        self._state: Optional[SyncState] = None
        self._package: Optional[Package] = None
        self._warnings: Tuple[ValidationWarning, ...] = ()
        self._sequence = 0
        self._history: Deque[PriceHistoryEntry] = deque(maxlen=MAX_PRICE_HISTORY)
        self._observers: List[Observer] = []
        self._tasks: Set[asyncio.Task[None]] = set()

    @classmethod
    def from_settings(cls, settings: "Settings", catalog: "PackageCatalog", **kwargs: Any) -> "PriceSyncController":
        calculator = PriceCalculator(catalog, lookup_timeout_s=settings.lookup_timeout_s)
        return cls(calculator, debounce_s=settings.debounce_seconds(), **kwargs)

    # ------------------------------------------------------------------
    # observation

    @property
    def status(self) -> Optional[SyncStatus]:
        return self._state.status if self._state else None

    @property
    def state(self) -> Optional[SyncState]:
        return self._state

    @property
    def linked_package(self) -> Optional[LinkedPackageInfo]:
        return self._linked

    @property
    def parameters(self) -> Optional[QuoteParameters]:
        return self._parameters

    @property
    def price(self) -> Optional[Decimal]:
        return self._price

    @property
    def events_total(self) -> Decimal:
        return self._events_total

    @property
    def price_history(self) -> List[PriceHistoryEntry]:
        return list(self._history)

    def snapshot(self) -> SyncSnapshot:
        state = self._state
        return SyncSnapshot(
            status=state.status if state else None,
            breakdown=state.last_breakdown if state else None,
            error=state.last_error if state else None,
            validation_warnings=self._warnings,
            linked_package=replace(self._linked) if self._linked else None,
            price=self._price,
            events_total=self._events_total,
            custom_reason=state.custom_reason if state else None,
            request_sequence=state.request_sequence if state else self._sequence,
        )

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer``; the returned callable unsubscribes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("Price sync observer %r failed", observer)

    # ------------------------------------------------------------------
    # commands

    async def select_package(
        self,
        package_id: str,
        parameters: Optional[QuoteParameters] = None,
        *,
        version: Optional[int] = None,
    ) -> SyncSnapshot:
        """Link the quote to a package and price it with the current parameters."""
        if parameters is not None:
            self._parameters = parameters
        if self._parameters is None:
            raise ValueError("Quote parameters must be set before selecting a package")
        if self._linked is not None:
            logger.info("Replacing linked package %s with %s", self._linked.package_id, package_id)
        self._linked = LinkedPackageInfo(package_id=package_id, package_version=version)
        self._state = SyncState(status=SyncStatus.CALCULATING)
        self._package = None
        self._warnings = ()
        sequence = self._next_sequence()
        await self._calculate(sequence, PriceChangeReason.PACKAGE_SELECTION, version=version)
        return self.snapshot()

    def parameters_changed(
        self,
        parameters: Optional[QuoteParameters] = None,
        *,
        number_of_people: Optional[int] = None,
        number_of_nights: Optional[int] = None,
        arrival_date: Optional[date] = None,
    ) -> SyncSnapshot:
        """Record new booking parameters and schedule a debounced recalculation.

        Must be called from a running event loop. Manual prices are left alone;
        everything else goes ``out-of-sync`` right away.
        """
        updated = parameters or self._merge_parameters(number_of_people, number_of_nights, arrival_date)
        if updated == self._parameters:
            return self.snapshot()
        self._parameters = updated
        state = self._state
        if state is None:
            return self.snapshot()

        self._refresh_warnings()
        if state.status is SyncStatus.CUSTOM and state.custom_reason is CustomReason.MANUAL:
            self._notify()
            return self.snapshot()

        sequence = self._next_sequence()
        self._transition(SyncStatus.OUT_OF_SYNC)
        self._notify()
        self._spawn(self._debounced_recalculate(sequence))
        return self.snapshot()

    def set_manual_price(self, price: Any) -> SyncSnapshot:
        """Override the quote price by hand; auto updates stop until a reset."""
        amount = parse_price(price)
        if isinstance(amount, OnRequest):
            raise ValueError("A manual price must be numeric")
        self._record_price(amount, PriceChangeReason.MANUAL_OVERRIDE)
        if self._state is not None:
            self._next_sequence()
            self._transition(SyncStatus.CUSTOM, CustomReason.MANUAL)
        self._notify()
        return self.snapshot()

    def events_changed(self, events_total: Any) -> SyncSnapshot:
        """Update the event add-ons priced on top of the package total.

        A synced quote is re-priced from the last breakdown without a catalog
        lookup. Custom prices are left alone; a pending calculation picks the
        new total up when it applies.
        """
        amount = _parse_events_total(events_total)
        if amount == self._events_total:
            return self.snapshot()
        self._events_total = amount
        state = self._state
        if state is not None and state.status is SyncStatus.SYNCED and state.last_breakdown is not None:
            self._record_price(state.last_breakdown.total_price + amount, PriceChangeReason.RECALCULATION)
        self._notify()
        return self.snapshot()

    async def reset_to_calculated(self) -> SyncSnapshot:
        """Drop a manual override and price the quote from the package again."""
        self._require_link()
        sequence = self._next_sequence()
        await self._calculate(sequence, PriceChangeReason.RECALCULATION)
        return self.snapshot()

    async def retry(self) -> SyncSnapshot:
        """Re-run a failed calculation with the current parameters."""
        self._require_link()
        if self._state is None or self._state.status is not SyncStatus.ERROR:
            logger.debug("Retry ignored; price sync is %s", self.status)
            return self.snapshot()
        sequence = self._next_sequence()
        await self._calculate(sequence, PriceChangeReason.RECALCULATION)
        return self.snapshot()

    def unlink(self) -> SyncSnapshot:
        """Detach the package; the quote keeps its last price as a plain manual price."""
        if self._linked is not None:
            logger.info("Unlinking package %s from quote", self._linked.package_id)
        self._sequence += 1
        self._linked = None
        self._state = None
        self._package = None
        self._warnings = ()
        self._notify()
        return self.snapshot()

    def resume(
        self,
        linked: LinkedPackageInfo,
        parameters: QuoteParameters,
        price: Optional[Decimal],
        *,
        custom: bool = False,
        events_total: Optional[Decimal] = None,
    ) -> SyncSnapshot:
        """Restore a saved quote without recalculating it."""
        if events_total is not None:
            self._events_total = _parse_events_total(events_total)
        self._linked = replace(linked)
        self._parameters = parameters
        self._price = price
        self._package = None
        self._warnings = ()
        if custom:
            state = SyncState(status=SyncStatus.CUSTOM, custom_reason=CustomReason.MANUAL)
        elif isinstance(linked.total_price, OnRequest):
            state = SyncState(status=SyncStatus.CUSTOM, custom_reason=CustomReason.ON_REQUEST)
        else:
            state = SyncState(status=SyncStatus.SYNCED)
        state.last_breakdown = linked.breakdown(parameters.number_of_people)
        self._state = state
        self._next_sequence()
        self._notify()
        return self.snapshot()

    async def wait_idle(self) -> None:
        """Wait for every scheduled recalculation to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def close(self) -> None:
        """End the editing session: sync state is discarded and observers dropped."""
        self._sequence += 1
        self._state = None
        self._observers.clear()

    # ------------------------------------------------------------------
    # internals

    def _merge_parameters(
        self,
        number_of_people: Optional[int],
        number_of_nights: Optional[int],
        arrival_date: Optional[date],
    ) -> QuoteParameters:
        current = self._parameters
        if current is None:
            if number_of_people is None or number_of_nights is None or arrival_date is None:
                raise ValueError("All quote parameters are required on the first change")
            return QuoteParameters(number_of_people, number_of_nights, arrival_date)
        return QuoteParameters(
            number_of_people=current.number_of_people if number_of_people is None else number_of_people,
            number_of_nights=current.number_of_nights if number_of_nights is None else number_of_nights,
            arrival_date=current.arrival_date if arrival_date is None else arrival_date,
        )

    def _require_link(self) -> Tuple[LinkedPackageInfo, SyncState]:
        if self._linked is None or self._state is None:
            raise RuntimeError("No package is linked to this quote")
        return self._linked, self._state

    def _next_sequence(self) -> int:
        self._sequence += 1
        if self._state is not None:
            self._state.request_sequence = self._sequence
        return self._sequence

    def _is_current(self, sequence: int) -> bool:
        return self._state is not None and self._state.request_sequence == sequence

    def _transition(self, status: SyncStatus, custom_reason: Optional[CustomReason] = None) -> None:
        _, state = self._require_link()
        state.status = status
        state.custom_reason = custom_reason if status is SyncStatus.CUSTOM else None

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _refresh_warnings(self) -> None:
        if self._package is None or self._parameters is None:
            return
        params = self._parameters
        self._warnings = tuple(
            self._validator.validate(
                params.number_of_people, params.number_of_nights, params.arrival_date, self._package
            )
        )

    def _record_price(self, price: Decimal, reason: PriceChangeReason) -> None:
        if self._price == price:
            return
        self._price = price
        self._history.append(PriceHistoryEntry(price=price, reason=reason))

    async def _debounced_recalculate(self, sequence: int) -> None:
        await asyncio.sleep(self._debounce_s)
        if not self._is_current(sequence):
            logger.debug("Recalculation %s superseded before it started", sequence)
            return
        await self._calculate(sequence, PriceChangeReason.RECALCULATION)

    async def _calculate(
        self,
        sequence: int,
        reason: PriceChangeReason,
        *,
        version: Optional[int] = None,
    ) -> None:
        linked, _ = self._require_link()
        params = self._parameters
        if params is None:
            raise RuntimeError("Quote parameters must be set before calculating")
        self._transition(SyncStatus.CALCULATING)
        self._notify()

        try:
            package = await self._calculator.load(linked.package_id, version)
        except PricingError as exc:
            self._apply_failure(sequence, exc)
            return
        except Exception as exc:
            logger.exception("Unexpected failure loading package %s", linked.package_id)
            failure = CatalogUnavailable(f"Package lookup failed: {exc}", package_id=linked.package_id)
            failure.__cause__ = exc
            self._apply_failure(sequence, failure)
            return
        if not self._is_current(sequence):
            logger.debug("Discarding stale package lookup %s for %s", sequence, linked.package_id)
            return

        self._package = package
        self._refresh_warnings()
        try:
            result = calculate_price(package, params.number_of_people, params.number_of_nights, params.arrival_date)
        except PricingError as exc:
            self._apply_failure(sequence, exc)
            return
        self._apply_result(sequence, package, result, reason)

    def _apply_failure(self, sequence: int, error: PricingError) -> None:
        if not self._is_current(sequence):
            logger.debug("Discarding stale failure %s: %s", sequence, error)
            return
        _, state = self._require_link()
        logger.warning("Price calculation failed (%s): %s", error.code, error)
        self._transition(SyncStatus.ERROR)
        state.last_error = SyncError.from_exception(error)
        self._notify()

    def _apply_result(
        self,
        sequence: int,
        package: Package,
        result: CalculationResult,
        reason: PriceChangeReason,
    ) -> None:
        if not self._is_current(sequence):
            logger.debug("Discarding stale result %s for %s", sequence, package.package_id)
            return
        linked, state = self._require_link()

        linked.package_version = package.version
        linked.package_name = package.name
        linked.tier_index = result.tier_index
        linked.tier_label = result.tier_used
        linked.period_used = result.period_used
        linked.currency = result.currency
        state.last_error = None

        if isinstance(result, OnRequestResult):
            linked.price_per_person = OnRequest.ON_REQUEST
            linked.total_price = OnRequest.ON_REQUEST
            state.last_breakdown = None
            self._transition(SyncStatus.CUSTOM, CustomReason.ON_REQUEST)
        else:
            linked.price_per_person = result.price_per_person
            linked.total_price = result.total_price
            state.last_breakdown = result
            self._record_price(result.total_price + self._events_total, reason)
            self._transition(SyncStatus.SYNCED)
        self._notify()
