# sensordrone/runtime/drone.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Any, Callable, Optional

from sensordrone.core.errors import (
    LinkIOError,
    NotConnectedError,
    PayloadTooShortError,
    RejectedByExecutorError,
    SensordroneError,
)
from sensordrone.events.listeners import DroneEventHandler, DroneEventListener, DroneStatusListener, HandlerLike
from sensordrone.events.registry import Listener, ListenerKind, ListenerRegistry
from sensordrone.events.types import DroneEvent, EventType
from sensordrone.protocol.defs import Opcode
from sensordrone.protocol.executor import CommandExecutor
from sensordrone.protocol.frames import RequestFrame
from sensordrone.protocol.link import FrameLink
from sensordrone.runtime.state import DroneStatus, EnabledFlags, Readings
from sensordrone.sensors.registry import Capabilities, SensorKind, build_capabilities
from sensordrone.sensors.ring import ByteRing
from sensordrone.transport.base import Transport
from sensordrone.transport.errors import TransportError

API_LIBRARY_VERSION = "1.2.2"

HANDSHAKE = RequestFrame.command(Opcode.VERSION)


class QuickOp(Enum):
    ENABLE = "enable"
    DISABLE = "disable"
    STATUS = "status"
    MEASURE = "measure"


class Drone:
    """
    One client session with a Sensordrone.

    Public operations return True when the work was accepted (queued) and
    False otherwise; results arrive as events, with values in `readings`.
    All device I/O happens on a single worker thread owned by the session.
    """

    API_LIBRARY_VERSION = API_LIBRARY_VERSION

    def __init__(
        self,
        *,
        shutdown_grace_s: float = 5.0,
        low_battery_volts: float = 3.25,
        uart_buffer_size: int = 1024,
        logger: Optional[logging.Logger] = None,
    ):
        self._log = logger or logging.getLogger(__name__)
        self._cap_logger = logger
        self.shutdown_grace_s = float(shutdown_grace_s)
        self.low_battery_volts = float(low_battery_volts)
        self.uart_buffer_size = int(uart_buffer_size)

        self._lock = threading.RLock()
        self._listeners = ListenerRegistry(logger=self._log)

        self.readings = Readings()
        self.enabled = EnabledFlags()
        self.last_address = ""

        self._connected = False
        self._hardware_version = 0
        self._firmware_version = 0
        self._firmware_revision = 0

        self._transport: Optional[Transport] = None
        self._link: Optional[FrameLink] = None
        self._executor: Optional[CommandExecutor] = None
        self._caps: Optional[Capabilities] = None

    @classmethod
    def from_config(cls, config: Any, *, logger: Optional[logging.Logger] = None) -> "Drone":
        return cls(
            shutdown_grace_s=config.shutdown_grace_s,
            low_battery_volts=config.low_battery_volts,
            uart_buffer_size=config.uart_buffer_size,
            logger=logger,
        )

    # ---------------- State ----------------
    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._connected

    @property
    def hardware_version(self) -> int:
        with self._lock:
            return self._hardware_version

    @property
    def firmware_version(self) -> int:
        with self._lock:
            return self._firmware_version

    @property
    def firmware_revision(self) -> int:
        with self._lock:
            return self._firmware_revision

    def status(self) -> DroneStatus:
        with self._lock:
            return DroneStatus(
                connected=self._connected,
                last_address=self.last_address,
                hardware_version=self._hardware_version,
                firmware_version=self._firmware_version,
                firmware_revision=self._firmware_revision,
                enabled=self.enabled.as_dict(),
            )

    def _capabilities(self) -> Capabilities:
        with self._lock:
            caps = self._caps
            if caps is None or not self._connected:
                raise NotConnectedError("drone is not connected", hint="Call connect() first.")
            return caps

    # ---------------- Lifecycle ----------------
    def connect(self, transport: Transport) -> bool:
        """
        Open `transport` (if needed), read the version triple, build the
        capability set and start the worker. Returns False on any failure,
        leaving the session disconnected with the transport closed.
        """
        with self._lock:
            if self._transport is not None:
                self._log.warning("CONNECT_IGNORED reason=already_connected address=%s", self.last_address)
                return False
            self._transport = transport

        address = getattr(transport, "address", "") or ""
        self._log.info("CONNECT address=%s", address)

        try:
            if not transport.is_open():
                transport.open()
        except TransportError as e:
            self._log.warning("CONNECT_FAILED address=%s stage=open err=%s", address, e)
            with self._lock:
                self._transport = None
            return False

        link = FrameLink(transport, on_low_battery=self._on_low_battery, logger=self._log)
        executor = CommandExecutor(logger=self._log)
        with self._lock:
            self._link = link
            self._executor = executor
            self.readings = Readings()
            self.enabled.reset()

        # synchronous on the caller thread: the worker is not running yet
        try:
            triple = link.transact(HANDSHAKE)
            if len(triple) < 3:
                raise PayloadTooShortError(3, len(triple), what="version triple")
            hw, fw, rev = triple[0], triple[1], triple[2]
            self._log.info("HANDSHAKE hw=%d fw=%d rev=%d", hw, fw, rev)

            caps = build_capabilities(
                self,
                hw,
                low_battery_volts=self.low_battery_volts,
                uart_buffer_size=self.uart_buffer_size,
                logger=self._cap_logger,
            )
            caps.initialize()
        except SensordroneError as e:
            self._log.warning("CONNECT_FAILED address=%s code=%s err=%s", address, e.code, e)
            self._abort_connect(transport, executor)
            return False

        with self._lock:
            self._caps = caps
            self._hardware_version = hw
            self._firmware_version = fw
            self._firmware_revision = rev
            self.last_address = address
            self._connected = True

        executor.start()
        self._log.info("CONNECT_OK address=%s hw=%d fw=%d rev=%d", address, hw, fw, rev)
        self.broadcast(EventType.CONNECTED)
        return True

    def _abort_connect(self, transport: Transport, executor: CommandExecutor) -> None:
        executor.shutdown_now(0)
        with self._lock:
            self._transport = None
            self._link = None
            self._executor = None
        self._close_transport(transport)

    def disconnect(self) -> bool:
        """Queue a teardown behind pending work; DISCONNECTED fires when it runs."""
        with self._lock:
            executor = self._executor
            if not self._connected or executor is None or executor.is_shutdown:
                return False
        try:
            executor.submit(self._teardown, EventType.DISCONNECTED)
        except RejectedByExecutorError:
            return False
        executor.shutdown()
        self._log.info("DISCONNECT_QUEUED address=%s", self.last_address)
        return True

    def disconnect_now(self, grace_s: Optional[float] = None) -> bool:
        """Cancel queued work, wait at most grace_s for the running task, then tear down."""
        with self._lock:
            executor = self._executor
            if self._transport is None:
                return False
        grace = self.shutdown_grace_s if grace_s is None else float(grace_s)
        if executor is not None:
            executor.shutdown_now(grace)
        return self._teardown(EventType.DISCONNECTED)

    def _teardown(self, event_type: EventType) -> bool:
        with self._lock:
            transport = self._transport
            if transport is None:
                return False
            self._transport = None
            self._link = None
            self._caps = None
            self._connected = False
            self._hardware_version = 0
            self._firmware_version = 0
            self._firmware_revision = 0

        self._close_transport(transport)
        self._log.info("SESSION_CLOSED reason=%s address=%s", event_type.name, self.last_address)
        self.broadcast(event_type)
        return True

    def _close_transport(self, transport: Transport) -> None:
        try:
            transport.close()
        except (TransportError, OSError) as e:
            self._log.warning("TRANSPORT_CLOSE_FAILED err=%s", e)

    def _on_link_lost(self, exc: LinkIOError) -> None:
        self._log.error("CONNECTION_LOST address=%s err=%s", self.last_address, exc)
        executor = self._executor
        if executor is not None:
            executor.shutdown_now(0)
        self._teardown(EventType.CONNECTION_LOST)

    def _on_low_battery(self) -> None:
        self.broadcast(EventType.LOW_BATTERY)

    # ---------------- Worker plumbing ----------------
    def submit(self, task: Callable[[], Any]) -> Future:
        """Queue a task for the worker. Device and link failures inside it are handled here."""
        executor = self._executor
        if executor is None:
            raise NotConnectedError("drone is not connected")
        return executor.submit(self._run_guarded, task)

    def submit_and_wait(self, task: Callable[[], Any]) -> Any:
        executor = self._executor
        if executor is None:
            raise NotConnectedError("drone is not connected")
        return executor.submit_and_wait(self._run_guarded, task)

    def _run_guarded(self, task: Callable[[], Any]) -> Any:
        try:
            return task()
        except LinkIOError as e:
            self._on_link_lost(e)
        except SensordroneError as e:
            self._log.warning("TASK_ABORTED code=%s err=%s", e.code, e)
        return None

    def exchange(self, frame: RequestFrame) -> bytes:
        link = self._link
        if link is None:
            raise NotConnectedError("drone is not connected")
        return link.transact(frame)

    def broadcast(self, event_type: EventType) -> None:
        self._listeners.dispatch(DroneEvent(event_type, source=self))

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until everything queued so far has run. False on timeout."""
        executor = self._executor
        if executor is None:
            return True
        if executor.on_worker_thread():
            raise RuntimeError("wait_until_idle() called on the worker thread would deadlock")
        try:
            executor.submit(lambda: None).result(timeout)
        except (RejectedByExecutorError, CancelledError):
            # shut down meanwhile: idle once the worker has exited
            return executor.join(timeout)
        except FutureTimeoutError:
            return False
        return True

    # ---------------- Listeners ----------------
    def register_listener(self, listener: Any) -> bool:
        """Register by flavour; an object may be event listener, status listener and handler at once."""
        added = False
        matched = False
        if isinstance(listener, DroneEventListener):
            matched = True
            added |= self._listeners.add(Listener.event(listener))
        if isinstance(listener, DroneStatusListener):
            matched = True
            added |= self._listeners.add(Listener.status(listener))
        if isinstance(listener, DroneEventHandler) or (not matched and callable(listener)):
            matched = True
            added |= self._listeners.add(Listener.handler(listener))
        if not matched:
            raise TypeError(f"not a drone listener: {listener!r}")
        return added

    def register_event_listener(self, listener: DroneEventListener) -> bool:
        return self._listeners.add(Listener.event(listener))

    def register_status_listener(self, listener: DroneStatusListener) -> bool:
        return self._listeners.add(Listener.status(listener))

    def register_handler(self, handler: HandlerLike) -> bool:
        return self._listeners.add(Listener.handler(handler))

    def unregister_listener(self, listener: Any, kind: Optional[ListenerKind] = None) -> bool:
        return self._listeners.remove(listener, kind) > 0

    # ---------------- Public API boundary ----------------
    def _accept(self, what: str, action: Callable[[], Any]) -> bool:
        try:
            action()
        except SensordroneError as e:
            self._log.debug("REJECTED op=%s code=%s err=%s", what, e.code, e)
            return False
        return True

    def _sensor_op(self, op: str, kind: int) -> bool:
        try:
            kind = SensorKind(kind)
        except ValueError:
            self._log.debug("REJECTED op=%s kind=%r reason=unknown_kind", op, kind)
            return False
        return self._accept(f"{op}:{kind.name}", lambda: getattr(self._capabilities().ops(kind), op)())

    def enable(self, kind: SensorKind) -> bool:
        return self._sensor_op("enable", kind)

    def disable(self, kind: SensorKind) -> bool:
        return self._sensor_op("disable", kind)

    def check_status(self, kind: SensorKind) -> bool:
        return self._sensor_op("status", kind)

    def measure(self, kind: SensorKind) -> bool:
        return self._sensor_op("measure", kind)

    # ---------------- Quick system ----------------
    def quick(self, op: QuickOp | str, kind: int) -> bool:
        try:
            op = QuickOp(op)
            kind = SensorKind(kind)
        except ValueError:
            self._log.warning("QUICK_REJECTED op=%s kind=%s", op, kind)
            return False
        dispatch = {
            QuickOp.ENABLE: self.enable,
            QuickOp.DISABLE: self.disable,
            QuickOp.STATUS: self.check_status,
            QuickOp.MEASURE: self.measure,
        }
        return dispatch[op](kind)

    def quick_enable(self, kind: int) -> bool:
        return self.quick(QuickOp.ENABLE, kind)

    def quick_disable(self, kind: int) -> bool:
        return self.quick(QuickOp.DISABLE, kind)

    def quick_status(self, kind: int) -> bool:
        return self.quick(QuickOp.STATUS, kind)

    def quick_measure(self, kind: int) -> bool:
        return self.quick(QuickOp.MEASURE, kind)

    # ---------------- Temperature / humidity ----------------
    def enable_temperature(self) -> bool:
        return self.enable(SensorKind.TEMPERATURE)

    def disable_temperature(self) -> bool:
        return self.disable(SensorKind.TEMPERATURE)

    def check_temperature_status(self) -> bool:
        return self.check_status(SensorKind.TEMPERATURE)

    def measure_temperature(self) -> bool:
        return self.measure(SensorKind.TEMPERATURE)

    def enable_humidity(self) -> bool:
        return self.enable(SensorKind.HUMIDITY)

    def disable_humidity(self) -> bool:
        return self.disable(SensorKind.HUMIDITY)

    def check_humidity_status(self) -> bool:
        return self.check_status(SensorKind.HUMIDITY)

    def measure_humidity(self) -> bool:
        return self.measure(SensorKind.HUMIDITY)

    # ---------------- Pressure / altitude ----------------
    def enable_pressure(self) -> bool:
        return self.enable(SensorKind.PRESSURE)

    def disable_pressure(self) -> bool:
        return self.disable(SensorKind.PRESSURE)

    def check_pressure_status(self) -> bool:
        return self.check_status(SensorKind.PRESSURE)

    def measure_pressure(self) -> bool:
        return self.measure(SensorKind.PRESSURE)

    def enable_altitude(self) -> bool:
        return self.enable(SensorKind.ALTITUDE)

    def disable_altitude(self) -> bool:
        return self.disable(SensorKind.ALTITUDE)

    def check_altitude_status(self) -> bool:
        return self.check_status(SensorKind.ALTITUDE)

    def measure_altitude(self) -> bool:
        return self.measure(SensorKind.ALTITUDE)

    # ---------------- Light / proximity / IR ----------------
    def enable_rgbc(self) -> bool:
        return self.enable(SensorKind.RGBC)

    def disable_rgbc(self) -> bool:
        return self.disable(SensorKind.RGBC)

    def check_rgbc_status(self) -> bool:
        return self.check_status(SensorKind.RGBC)

    def measure_rgbc(self) -> bool:
        return self.measure(SensorKind.RGBC)

    def enable_capacitance(self) -> bool:
        return self.enable(SensorKind.CAPACITANCE)

    def disable_capacitance(self) -> bool:
        return self.disable(SensorKind.CAPACITANCE)

    def check_capacitance_status(self) -> bool:
        return self.check_status(SensorKind.CAPACITANCE)

    def measure_capacitance(self) -> bool:
        return self.measure(SensorKind.CAPACITANCE)

    def enable_ir_temperature(self) -> bool:
        return self.enable(SensorKind.IR_TEMPERATURE)

    def disable_ir_temperature(self) -> bool:
        return self.disable(SensorKind.IR_TEMPERATURE)

    def check_ir_temperature_status(self) -> bool:
        return self.check_status(SensorKind.IR_TEMPERATURE)

    def measure_ir_temperature(self) -> bool:
        return self.measure(SensorKind.IR_TEMPERATURE)

    # ---------------- Gas ----------------
    def enable_oxidizing_gas(self) -> bool:
        return self.enable(SensorKind.OXIDIZING_GAS)

    def disable_oxidizing_gas(self) -> bool:
        return self.disable(SensorKind.OXIDIZING_GAS)

    def check_oxidizing_gas_status(self) -> bool:
        return self.check_status(SensorKind.OXIDIZING_GAS)

    def measure_oxidizing_gas(self) -> bool:
        return self.measure(SensorKind.OXIDIZING_GAS)

    def enable_reducing_gas(self) -> bool:
        return self.enable(SensorKind.REDUCING_GAS)

    def disable_reducing_gas(self) -> bool:
        return self.disable(SensorKind.REDUCING_GAS)

    def check_reducing_gas_status(self) -> bool:
        return self.check_status(SensorKind.REDUCING_GAS)

    def measure_reducing_gas(self) -> bool:
        return self.measure(SensorKind.REDUCING_GAS)

    def enable_precision_gas(self) -> bool:
        return self.enable(SensorKind.PRECISION_GAS)

    def disable_precision_gas(self) -> bool:
        return self.disable(SensorKind.PRECISION_GAS)

    def check_precision_gas_status(self) -> bool:
        return self.check_status(SensorKind.PRECISION_GAS)

    def measure_precision_gas(self) -> bool:
        return self.measure(SensorKind.PRECISION_GAS)

    def measure_precision_gas_calibration(self, concentration_ppm: float = 50.0) -> bool:
        return self._accept(
            "precision_gas_calibration",
            lambda: self._capabilities().precision_gas.measure_calibration(concentration_ppm),
        )

    def write_precision_gas_calibration(self, block: bytes) -> bool:
        return self._accept(
            "precision_gas_write_calibration",
            lambda: self._capabilities().precision_gas.write_calibration(block),
        )

    def read_precision_gas_register(self, register: int) -> bool:
        return self._accept(
            "precision_gas_register",
            lambda: self._capabilities().precision_gas.read_register(register),
        )

    # ---------------- External ADC ----------------
    def enable_adc(self) -> bool:
        return self.enable(SensorKind.ADC)

    def disable_adc(self) -> bool:
        return self.disable(SensorKind.ADC)

    def check_adc_status(self) -> bool:
        return self.check_status(SensorKind.ADC)

    def measure_adc(self) -> bool:
        return self.measure(SensorKind.ADC)

    # ---------------- Power ----------------
    def measure_battery_voltage(self) -> bool:
        return self._accept("battery", lambda: self._capabilities().power.measure_battery_voltage())

    def check_charging_status(self) -> bool:
        return self._accept("charging", lambda: self._capabilities().power.check_charging())

    # ---------------- LEDs ----------------
    def set_left_led(self, red: int, green: int, blue: int) -> bool:
        return self._accept("led_left", lambda: self._capabilities().leds.set_left(red, green, blue))

    def set_right_led(self, red: int, green: int, blue: int) -> bool:
        return self._accept("led_right", lambda: self._capabilities().leds.set_right(red, green, blue))

    def set_leds(self, red: int, green: int, blue: int) -> bool:
        return self._accept("led_both", lambda: self._capabilities().leds.set_both(red, green, blue))

    # ---------------- External UART ----------------
    def uart_set_baud_rate(self, rate: int) -> bool:
        return self._accept("uart_baud", lambda: self._capabilities().uart.set_baud_rate(rate))

    def uart_read(self) -> bool:
        return self._accept("uart_read", lambda: self._capabilities().uart.read())

    def uart_write(self, data: bytes) -> bool:
        return self._accept("uart_write", lambda: self._capabilities().uart.write(data))

    def uart_write_for_read(self, data: bytes, delay_ms: int = 0) -> Optional[bytes]:
        return self._blocking(
            "uart_write_for_read",
            lambda: self._capabilities().uart.write_for_read(data, delay_ms),
        )

    @property
    def uart_input(self) -> Optional[ByteRing]:
        caps = self._caps
        return caps.uart.input if caps is not None else None

    # ---------------- USB UART ----------------
    def usb_uart_read(self) -> bool:
        return self._accept("usb_uart_read", lambda: self._capabilities().usb_uart.read())

    def usb_uart_write(self, data: bytes) -> bool:
        return self._accept("usb_uart_write", lambda: self._capabilities().usb_uart.write(data))

    @property
    def usb_uart_input(self) -> Optional[ByteRing]:
        caps = self._caps
        return caps.usb_uart.input if caps is not None else None

    def _blocking(self, what: str, action: Callable[[], Optional[bytes]]) -> Optional[bytes]:
        try:
            return action()
        except SensordroneError as e:
            self._log.warning("BLOCKING_CALL_FAILED op=%s code=%s err=%s", what, e.code, e)
        except CancelledError:
            self._log.warning("BLOCKING_CALL_FAILED op=%s reason=cancelled", what)
        except RuntimeError as e:
            self._log.warning("BLOCKING_CALL_FAILED op=%s err=%s", what, e)
        return None

    # ---------------- Custom notifications ----------------
    def custom_event_notify(self) -> bool:
        return self._accept("custom_event", lambda: self._notify_later(EventType.CUSTOM_EVENT))

    def custom_status_notify(self) -> bool:
        return self._accept("custom_status", lambda: self._notify_later(EventType.CUSTOM_STATUS))

    def _notify_later(self, event_type: EventType) -> Future:
        self._capabilities()
        return self.submit(lambda: self.broadcast(event_type))
