import argparse
import logging
import signal
import sys
from datetime import datetime

from PySide6 import QtCore

from cm160meter.core import AppSettings, Sample
from cm160meter.serial import SerialReader
from cm160meter.version import __version__, APP_NAME

logger = logging.getLogger("cm160meter")


class PowerLogger:
    """Logs the power drawn for every fresh sample."""

    def __init__(self, voltage: float, max_age: float):
        self.voltage = voltage
        self.max_age = max_age

    def on_sample(self, sample: Sample) -> None:
        try:
            age = (datetime.now() - sample.timestamp).total_seconds()
        except ValueError:
            logger.warning("Invalid date in %s, skip", sample)
            return
        if age > self.max_age:
            logger.warning("old date... skip %s", sample.timestamp)
            return

        watt = sample.power_watts(self.voltage)
        logger.info("%.2fA * %gV = %dW", sample.current_amps, self.voltage, watt)


def parse_args(argv, settings: AppSettings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="cm160meter", description=f"{APP_NAME} {__version__}")
    parser.add_argument("--port", default=settings.port)
    parser.add_argument("--voltage", type=float, default=settings.ac_voltage,
                        help="mains voltage used for power (V)")
    parser.add_argument("--max-age", type=int, default=settings.max_sample_age,
                        help="skip samples older than this many seconds")
    parser.add_argument("--baud", type=int, default=settings.device_baud,
                        help="custom device baud rate")
    parser.add_argument("--timeout", type=float, default=settings.read_timeout,
                        help="read timeout in seconds, 0 blocks")
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--save", action="store_true",
                        help="store these options as the new defaults")
    return parser.parse_args(argv)


def main(argv=None):
    settings = AppSettings.load()
    args = parse_args(argv, settings)

    settings.port = args.port
    settings.ac_voltage = args.voltage
    settings.max_sample_age = args.max_age
    settings.device_baud = args.baud
    settings.read_timeout = args.timeout
    settings.log_level = args.log_level.upper()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.save:
        settings.save()

    app = QtCore.QCoreApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_NAME)

    power = PowerLogger(settings.ac_voltage, settings.max_sample_age)
    reader = SerialReader(
        settings.port,
        native_baud=settings.native_baud,
        device_baud=settings.device_baud,
        timeout=settings.timeout,
    )

    errors = []

    def on_error(message: str) -> None:
        logger.error(message)
        errors.append(message)

    reader.negotiated.connect(lambda baud: logger.info("Listening on %s at %d baud", reader.port, baud))
    reader.sample_received.connect(power.on_sample)
    reader.error.connect(on_error)
    reader.finished.connect(lambda: app.exit(1 if errors else 0))

    def on_sigint(*_):
        logger.info("Stopping")
        reader.stop()
        app.quit()

    signal.signal(signal.SIGINT, on_sigint)
    # Let the Python interpreter run periodically so SIGINT is noticed
    timer = QtCore.QTimer()
    timer.start(250)
    timer.timeout.connect(lambda: None)

    reader.start()
    code = app.exec()
    reader.stop()
    sys.exit(code)


if __name__ == '__main__':
    main()
