"""The Timer decides whether it is day or night and tells everyone else.

Consumers connect to `Timer.state_changed` and read `Timer.time`.

Sun times come from the current location when one is available, otherwise
the manual schedule stored in the settings is used. A state forced by the
user (shortcut or a color scheme picked by hand) holds until the schedule
agrees with it again.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from nightswitch.common.exceptions import LocationUnavailableError
from nightswitch.common.signals import Signal, Subscription
from nightswitch.common.solar import compute_sun_times, is_valid_location
from nightswitch.config.store import SettingsStore
from nightswitch.desktop.keybindings import KeybindingRegistrar
from nightswitch.desktop.notifier import Notifier
from nightswitch.location.providers import Coordinates, LocationProvider
from nightswitch.runtime.scheduler import Handle, Scheduler
from nightswitch.schedule.models import (
    Authority,
    TimerState,
    TimeState,
    color_scheme_to_time,
    time_to_color_scheme,
)
from nightswitch.schedule.resolver import decimal_hour, resolve_time

logger = logging.getLogger(__name__)

ONDEMAND_KEYBINDING = "nightthemeswitcher-ondemand-keybinding"

UNKNOWN_LOCATION_TITLE = "Unknown Location"
UNKNOWN_LOCATION_BODY = (
    "A manual schedule will be used to switch the dark mode. "
    "Run 'nightswitch schedule' to edit it."
)


def local_now() -> datetime:
    return datetime.now().astimezone()


class Timer:
    """Day/night state machine fed by the clock, the location and the user."""

    def __init__(
        self,
        settings: SettingsStore,
        interface_settings: SettingsStore,
        scheduler: Scheduler,
        location_provider: LocationProvider,
        keybindings: KeybindingRegistrar,
        notifier: Notifier,
        clock: Callable[[], datetime] = local_now,
        poll_interval: float = 1.0,
        suntimes_interval: float = 3600.0,
    ):
        self._settings = settings
        self._interface = interface_settings
        self._scheduler = scheduler
        self._location_provider = location_provider
        self._keybindings = keybindings
        self._notifier = notifier
        self._clock = clock
        self._poll_interval = poll_interval
        self._suntimes_interval = suntimes_interval

        self.state_changed = Signal("timer::time")

        self._state = TimerState()
        self._enabled = False
        self._generation = 0
        self._advised = False
        self._pending_color_scheme: str | None = None

        self._time_handle: Handle | None = None
        self._suntimes_handle: Handle | None = None
        self._location_task: Handle | None = None
        self._location_subscription: Subscription | None = None
        self._registered_keybinding: str | None = None
        self._settings_connections: list[Subscription] = []

    @property
    def time(self) -> TimeState:
        return self._state.time

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def manually_set(self) -> bool:
        return self._state.manually_set

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        logger.debug("Enabling Timer...")
        self._generation += 1
        self._enabled = True
        self._advised = False
        self._connect_settings()
        self._track_time()
        if self._settings.get("manual-schedule"):
            logger.debug("Using the manual schedule.")
        else:
            logger.debug("Using location.")
            self._track_location()
            self._track_suntimes()
        self._add_keybinding()
        self._change_time(self._compute_time())
        logger.debug("Timer enabled.")

    def disable(self) -> None:
        logger.debug("Disabling Timer...")
        self._remove_keybinding()
        self._untrack_suntimes()
        self._untrack_location()
        self._untrack_time()
        self._disconnect_settings()
        # Location results still in flight belong to the old generation.
        self._generation += 1
        self._enabled = False
        self._state = TimerState()
        self._pending_color_scheme = None
        logger.debug("Timer disabled.")

    def toggle(self) -> None:
        """Force the opposite state, as the on-demand shortcut does."""
        self._change_time(self.time.opposite(), manual=True)

    def refresh(self) -> None:
        """Evaluate the schedule now."""
        self._change_time(self._compute_time())

    def _change_time(self, time: TimeState, manual: bool = False) -> None:
        now = self._clock()
        current = self._state

        if time is current.time:
            if current.manually_set:
                logger.debug("%s agrees with the manually set %s, switching automatically again.",
                             "Color scheme" if manual else "Schedule", time.value)
            self._state = replace(current, authority=Authority.AUTOMATIC, last_computed_at=now)
            return

        if not manual and current.manually_set:
            self._state = replace(current, last_computed_at=now)
            return

        authority = Authority.MANUAL_UNTIL_MATCH if manual else Authority.AUTOMATIC
        self._state = TimerState(time=time, authority=authority, last_computed_at=now)
        logger.debug("Time manually set to %s." if manual else "Time changed to %s.", time.value)

        self._sync_color_scheme(time)
        self.state_changed.emit(time)

    def _sync_color_scheme(self, time: TimeState) -> None:
        if color_scheme_to_time(self._interface.get("color-scheme")) is time:
            return
        scheme = time_to_color_scheme(time)
        self._pending_color_scheme = scheme
        self._interface.set("color-scheme", scheme)

    def _compute_time(self) -> TimeState:
        sunrise = self._settings.get("sunrise")
        sunset = self._settings.get("sunset")
        time = resolve_time(decimal_hour(self._clock()), sunrise, sunset)
        if time is not None:
            return time
        # Identical sunrise and sunset: keep the current state.
        if self._state.time is not TimeState.UNKNOWN:
            return self._state.time
        return color_scheme_to_time(self._interface.get("color-scheme"))

    def _connect_settings(self) -> None:
        logger.debug("Connecting Timer to settings...")
        self._settings_connections = [
            self._settings.connect("manual-schedule", self._on_manual_schedule_changed),
            self._settings.connect(ONDEMAND_KEYBINDING, self._on_ondemand_keybinding_changed),
            self._settings.connect("sunrise", self._on_schedule_changed),
            self._settings.connect("sunset", self._on_schedule_changed),
            self._interface.connect("color-scheme", self._on_color_scheme_changed),
        ]
        # Offset and location only matter when sun times are computed.
        if not self._settings.get("manual-schedule"):
            self._settings_connections.append(self._settings.connect("offset", self._on_sun_parameters_changed))
            self._settings_connections.append(self._settings.connect("location", self._on_sun_parameters_changed))

    def _disconnect_settings(self) -> None:
        for connection in self._settings_connections:
            connection.dispose()
        self._settings_connections = []
        logger.debug("Disconnected Timer from settings.")

    def _track_time(self) -> None:
        logger.debug("Watching for time change...")
        self._time_handle = self._scheduler.call_every(self._poll_interval, self.refresh)

    def _untrack_time(self) -> None:
        if self._time_handle is not None:
            self._time_handle.cancel()
            self._time_handle = None
        logger.debug("Stopped watching for time change.")

    def _track_location(self) -> None:
        logger.debug("Requesting location...")
        self._location_task = self._scheduler.spawn(self._locate(self._generation))

    def _untrack_location(self) -> None:
        if self._location_task is not None:
            self._location_task.cancel()
            self._location_task = None
        if self._location_subscription is not None:
            self._location_subscription.dispose()
            self._location_subscription = None
        logger.debug("Stopped tracking location.")

    def _track_suntimes(self) -> None:
        logger.debug("Regularly updating sun times...")
        self._suntimes_handle = self._scheduler.call_every(self._suntimes_interval, self._on_suntimes_tick)

    def _untrack_suntimes(self) -> None:
        if self._suntimes_handle is not None:
            self._suntimes_handle.cancel()
            self._suntimes_handle = None
        logger.debug("Stopped regularly updating sun times.")

    def _add_keybinding(self) -> None:
        accelerator = self._settings.get(ONDEMAND_KEYBINDING)
        if not accelerator:
            return
        logger.debug("Adding keybinding...")
        self._keybindings.add(ONDEMAND_KEYBINDING, accelerator, self.toggle)
        self._registered_keybinding = accelerator

    def _remove_keybinding(self) -> None:
        if self._registered_keybinding is None:
            return
        logger.debug("Removing keybinding...")
        self._keybindings.remove(ONDEMAND_KEYBINDING)
        self._registered_keybinding = None

    async def _locate(self, generation: int) -> None:
        try:
            coords = await self._location_provider.locate()
        except Exception as e:
            if generation != self._generation:
                return
            self._location_task = None
            self._on_location_unavailable(e)
            return

        if generation != self._generation:
            logger.debug("Dropping location result from a previous run.")
            return
        self._location_task = None
        self._location_subscription = self._location_provider.subscribe(self._on_location_changed)
        logger.debug("Connected to location provider.")
        self._on_location_changed(coords)

    async def _relocate(self, generation: int) -> None:
        try:
            await self._location_provider.locate()
        except LocationUnavailableError as e:
            logger.warning("Unable to refresh the location, keeping the last one: %s", e)
        finally:
            if generation == self._generation:
                self._location_task = None

    def _on_location_changed(self, coords: Coordinates) -> None:
        latitude, longitude = coords
        if not is_valid_location(latitude, longitude):
            logger.warning("Ignoring out of range location (%s;%s)", latitude, longitude)
            return
        logger.debug("Current location: (%s;%s)", latitude, longitude)
        if not self._settings.update({"location": (latitude, longitude)}):
            self._update_suntimes()

    def _on_location_unavailable(self, error: Exception) -> None:
        location = self._settings.get("location")
        if location is not None and is_valid_location(*location):
            logger.error("Unable to retrieve the location, using the last known location instead: %s", error)
            self._update_suntimes()
            return

        logger.error("Unable to retrieve the location, using the manual schedule times instead: %s", error)
        if not self._advised:
            self._advised = True
            self._notifier.notify(UNKNOWN_LOCATION_TITLE, UNKNOWN_LOCATION_BODY)
        self._settings.set("manual-schedule", True)

    def _update_suntimes(self) -> None:
        location = self._settings.get("location")
        if location is None or not is_valid_location(*location):
            return
        logger.debug("Updating sun times...")
        latitude, longitude = location
        times = compute_sun_times(self._clock(), latitude, longitude, self._settings.get("offset"))
        self._settings.update({"sunrise": times.sunrise, "sunset": times.sunset})
        logger.debug("New sun times: (sunrise: %.4f; sunset: %.4f)", times.sunrise, times.sunset)

    def _on_suntimes_tick(self) -> None:
        self._update_suntimes()
        # Moves are delivered through the provider subscription.
        if self._location_subscription is not None and self._location_task is None:
            self._location_task = self._scheduler.spawn(self._relocate(self._generation))

    def _on_manual_schedule_changed(self, _key: str) -> None:
        self.disable()
        self.enable()

    def _on_sun_parameters_changed(self, _key: str) -> None:
        self._update_suntimes()

    def _on_schedule_changed(self, _key: str) -> None:
        self.refresh()

    def _on_ondemand_keybinding_changed(self, _key: str) -> None:
        self._remove_keybinding()
        self._add_keybinding()

    def _on_color_scheme_changed(self, _key: str) -> None:
        scheme = self._interface.get("color-scheme")
        pending, self._pending_color_scheme = self._pending_color_scheme, None
        if scheme == pending:
            return
        self._change_time(color_scheme_to_time(scheme), manual=True)
