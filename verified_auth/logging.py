import logging
import sys
import time

from pythonjsonlogger.json import JsonFormatter

# never written to a log line, even when passed through `extra=`
REDACTED_FIELDS = frozenset({"password", "token", "verification_code"})


class UTCJsonFormatter(JsonFormatter):
    converter = time.gmtime

    def add_fields(self, log_data, record, message_dict) -> None:
        super().add_fields(log_data, record, message_dict)
        for name in REDACTED_FIELDS.intersection(log_data):
            log_data[name] = "[redacted]"


def setup_logging(level: str = "INFO", *, service: str = "verified-auth") -> None:
    """JSON lines on stdout, UTC timestamps, one handler on the root logger."""
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        UTCJsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "ts"},
            static_fields={"service": service},
        )
    )
    root.addHandler(handler)

    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
