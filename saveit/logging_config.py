import logging.config
import sys
from typing import Dict, List

# 잔액/스트릭을 바꾸는 서비스는 LOG_LEVEL 이 WARNING 이어도 INFO 로 남깁니다
MUTATION_LOGGERS = [
    "saveit.services.ledger_service",
    "saveit.services.transaction_service",
    "saveit.services.streak_service",
    "saveit.services.tracker_service",
]


def _logger(handlers: List[str], level: str, propagate: bool = False) -> Dict:
    return {"handlers": handlers, "level": level, "propagate": propagate}


def build_logging_config(log_level: str = "INFO") -> Dict:
    level = log_level.upper()
    mutation_level = "DEBUG" if level == "DEBUG" else "INFO"

    loggers = {
        "": _logger(["stdout"], level, propagate=True),
        "saveit": _logger(["stdout", "stderr"], level),
        "uvicorn.error": _logger(["stdout", "stderr"], level),
        "uvicorn.access": _logger(["stdout"], level),
        "sqlalchemy.engine": _logger(["stdout"], "WARNING"),
    }
    for name in MUTATION_LOGGERS:
        loggers[name] = _logger(["stdout", "stderr"], mutation_level)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "line": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)-36s | %(message)s",
            },
            "located": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s (%(filename)s:%(lineno)d)\n%(message)s",
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "line",
                "stream": sys.stdout,
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "located",
                "stream": sys.stderr,
                "level": "WARNING",
            },
        },
        "loggers": loggers,
    }


def setup_logging(log_level: str = "INFO") -> None:
    logging.config.dictConfig(build_logging_config(log_level))
